"""
Per-seat draft state.

A Seat is an immutable record; every transition returns a new Seat so a
Draft can build its next state completely before persisting it.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime

from cubedraft.models.card import Card
from cubedraft.utils import swap_in_sequence

Pack = tuple[Card, ...]


@dataclass(frozen=True, slots=True)
class Seat:
    """
    One participant slot in a draft.

    Attributes:
        drafted: Cards kept for the main deck
        sideboard: Cards set aside
        pack_backlog: Packs waiting for this seat; index 0 is the current pack
        unopened_packs: Packs not yet put into rotation
        last_shown: When this seat's pack was last displayed, None if never
    """

    drafted: tuple[Card, ...] = ()
    sideboard: tuple[Card, ...] = ()
    pack_backlog: tuple[Pack, ...] = ()
    unopened_packs: tuple[Pack, ...] = ()
    last_shown: datetime | None = field(default=None, compare=False)

    @property
    def current_pack(self) -> Pack:
        return self.pack_backlog[0] if self.pack_backlog else ()

    @property
    def picked_count(self) -> int:
        return len(self.drafted) + len(self.sideboard)

    @property
    def total_cards(self) -> int:
        """Every card this seat currently holds, picked or not."""
        return (
            self.picked_count
            + sum(len(pack) for pack in self.pack_backlog)
            + sum(len(pack) for pack in self.unopened_packs)
        )

    def pack_number(self, packs_per_seat: int) -> int:
        return packs_per_seat - len(self.unopened_packs)

    def take_card(self, card: Card, to_sideboard: bool = False) -> tuple["Seat", Pack | None]:
        """
        Pick a card out of the current pack.

        Returns:
            Tuple of (new seat, outgoing pack). The outgoing pack is the rest
            of the current pack, to be passed on, or None when the pick
            emptied it. An emptied pack is dropped and the next unopened pack,
            if any, becomes the current pack.

        Raises:
            ValueError: If the card is not in the current pack
        """
        pack = self.current_pack
        if not any(candidate is card for candidate in pack):
            raise ValueError(f"{card.name} is not in the current pack")

        remaining = tuple(candidate for candidate in pack if candidate is not card)
        backlog = self.pack_backlog[1:]
        unopened = self.unopened_packs
        outgoing: Pack | None = remaining

        if not remaining:
            outgoing = None
            if unopened:
                backlog = (unopened[0], *backlog)
                unopened = unopened[1:]

        if to_sideboard:
            seat = replace(self, sideboard=(*self.sideboard, card))
        else:
            seat = replace(self, drafted=(*self.drafted, card))

        return replace(seat, pack_backlog=backlog, unopened_packs=unopened), outgoing

    def receive(self, pack: Pack) -> "Seat":
        """Queue a pack passed from a neighbouring seat."""
        return replace(self, pack_backlog=(*self.pack_backlog, pack))

    def toggle_sideboard(self, card: Card) -> "Seat":
        """
        Move a picked card between the main deck and the sideboard.

        Raises:
            ValueError: If the card has not been picked by this seat
        """
        if any(candidate is card for candidate in self.drafted):
            return replace(
                self,
                drafted=tuple(c for c in self.drafted if c is not card),
                sideboard=(*self.sideboard, card),
            )
        if any(candidate is card for candidate in self.sideboard):
            return replace(
                self,
                sideboard=tuple(c for c in self.sideboard if c is not card),
                drafted=(*self.drafted, card),
            )
        raise ValueError(f"{card.name} has not been picked by this seat")

    def substitute(self, first: Card, second: Card) -> "Seat":
        """Exchange two cards everywhere in this seat, keeping positions."""
        return replace(
            self,
            drafted=swap_in_sequence(self.drafted, first, second),
            sideboard=swap_in_sequence(self.sideboard, first, second),
            pack_backlog=tuple(
                swap_in_sequence(pack, first, second) for pack in self.pack_backlog
            ),
            unopened_packs=tuple(
                swap_in_sequence(pack, first, second) for pack in self.unopened_packs
            ),
        )

    def shown_at(self, timestamp: datetime) -> "Seat":
        return replace(self, last_shown=timestamp)
