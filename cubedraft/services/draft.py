"""
Draft: pack rotation and picking across a fixed table of seats.

All seat state lives in immutable Seat records. Every mutation computes the
complete next tuple of seats, persists it, and only then replaces the
in-memory state, so a failed write leaves the draft as it was.
"""

import asyncio
import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from cubedraft.config import settings
from cubedraft.db.store import Store
from cubedraft.models.card import Card
from cubedraft.models.failure import InvalidSeatError, NoPackAvailableError, SameCardError
from cubedraft.models.seat import Seat
from cubedraft.services.card_matcher import find_card
from cubedraft.services.cube import Cube

logger = logging.getLogger(__name__)

SEATS_KEY = "seats"


@dataclass(frozen=True, slots=True)
class DraftRules:
    """Shape of a draft. Fixed once the packs are dealt."""

    seat_count: int = 8
    packs_per_seat: int = 3
    pack_size: int = 15

    @classmethod
    def from_settings(cls) -> "DraftRules":
        return cls(
            seat_count=settings.seat_count,
            packs_per_seat=settings.packs_per_seat,
            pack_size=settings.pack_size,
        )

    @property
    def cards_per_seat(self) -> int:
        return self.packs_per_seat * self.pack_size

    @property
    def total_cards(self) -> int:
        return self.cards_per_seat * self.seat_count


@dataclass(frozen=True)
class SeatView:
    """Everything a renderer needs to show one seat."""

    seat: int
    pack: list[Card]
    drafted: list[Card]
    sideboard: list[Card]
    pack_number: int
    pick_number: int
    images: dict[str, str] = field(default_factory=dict)


def _chunk(items: Sequence[Any], size: int) -> list[tuple[Any, ...]]:
    return [tuple(items[i : i + size]) for i in range(0, len(items), size)]


def _serialize_cards(cards: Sequence[Card]) -> list[str]:
    return [card.name for card in cards]


def serialize_seat(seat: Seat) -> dict[str, Any]:
    """Convert a seat to its stored JSON form."""
    return {
        "drafted": _serialize_cards(seat.drafted),
        "sideboard": _serialize_cards(seat.sideboard),
        "packBacklog": [_serialize_cards(pack) for pack in seat.pack_backlog],
        "unopenedPacks": [_serialize_cards(pack) for pack in seat.unopened_packs],
        "lastShown": (
            int(seat.last_shown.timestamp() * 1000) if seat.last_shown is not None else None
        ),
    }


def deserialize_seat(cube: Cube, data: dict[str, Any]) -> Seat:
    """
    Rebuild a seat from its stored JSON form.

    Raises:
        CardNotFoundError: If a stored name is no longer in the cube
    """

    def cards(names: Sequence[str]) -> tuple[Card, ...]:
        return tuple(cube.get_card(name) for name in names)

    last_shown = data.get("lastShown")
    return Seat(
        drafted=cards(data.get("drafted", [])),
        sideboard=cards(data.get("sideboard", [])),
        pack_backlog=tuple(cards(pack) for pack in data.get("packBacklog", [])),
        unopened_packs=tuple(cards(pack) for pack in data.get("unopenedPacks", [])),
        last_shown=(
            datetime.fromtimestamp(last_shown / 1000, tz=UTC) if last_shown is not None else None
        ),
    )


class Draft:
    """
    The state of one draft.

    Mutating operations are async because they persist through the store,
    and are serialized by a per-draft lock.
    """

    def __init__(
        self,
        cube: Cube,
        store: Store,
        seats: Sequence[Seat],
        rules: DraftRules | None = None,
    ) -> None:
        self.cube = cube
        self.store = store
        self.rules = rules or DraftRules(seat_count=len(seats))
        if len(seats) != self.rules.seat_count:
            raise ValueError(f"Expected {self.rules.seat_count} seats, got {len(seats)}")
        self._seats: tuple[Seat, ...] = tuple(seats)
        self._lock = asyncio.Lock()

    @classmethod
    async def load_or_create(
        cls,
        cube: Cube,
        store: Store,
        rules: DraftRules | None = None,
        rng: random.Random | None = None,
    ) -> "Draft":
        """
        Load the stored draft, or deal and store a new one.

        Raises:
            CardNotFoundError: If stored seats name cards the cube lacks
            CubeTooSmallError: If the cube cannot fill every pack
        """
        rules = rules or DraftRules.from_settings()
        serialized = await store.get(SEATS_KEY)

        if serialized is not None:
            seats = [deserialize_seat(cube, seat) for seat in serialized]
            return cls(cube, store, seats, rules)

        draft = cls.deal(cube, store, rules, rng)
        await draft.save()
        return draft

    @classmethod
    def deal(
        cls,
        cube: Cube,
        store: Store,
        rules: DraftRules | None = None,
        rng: random.Random | None = None,
    ) -> "Draft":
        """
        Deal a new draft in memory. Nothing is stored until `save()`.

        Raises:
            CubeTooSmallError: If the cube cannot fill every pack
        """
        rules = rules or DraftRules.from_settings()
        logger.info(
            "Dealing %d packs of %d to %d seats",
            rules.packs_per_seat,
            rules.pack_size,
            rules.seat_count,
        )
        packs = _chunk(cube.get_random_cards(rules.total_cards, rng), rules.pack_size)
        seats = [
            Seat(pack_backlog=(first,), unopened_packs=tuple(rest))
            for first, *rest in _chunk(packs, rules.packs_per_seat)
        ]
        return cls(cube, store, seats, rules)

    # --- Persistence ---

    def serialize(self) -> list[dict[str, Any]]:
        return [serialize_seat(seat) for seat in self._seats]

    async def save(self) -> None:
        await self.store.set(SEATS_KEY, self.serialize())

    async def _commit(self, seats: tuple[Seat, ...]) -> None:
        await self.store.set(SEATS_KEY, [serialize_seat(seat) for seat in seats])
        self._seats = seats

    # --- Read accessors ---

    @property
    def seats(self) -> tuple[Seat, ...]:
        return self._seats

    @property
    def is_done(self) -> bool:
        return all(seat.picked_count == self.rules.cards_per_seat for seat in self._seats)

    def _check_seat(self, index: int) -> Seat:
        if not 0 <= index < self.rules.seat_count:
            raise InvalidSeatError(index, self.rules.seat_count)
        return self._seats[index]

    def get_pack(self, index: int) -> list[Card]:
        return list(self._check_seat(index).current_pack)

    def get_drafted(self, index: int) -> list[Card]:
        return list(self._check_seat(index).drafted)

    def get_sideboard(self, index: int) -> list[Card]:
        return list(self._check_seat(index).sideboard)

    def pack_number(self, index: int) -> int:
        return self._check_seat(index).pack_number(self.rules.packs_per_seat)

    def pick_number(self, index: int) -> int:
        return self.rules.pack_size + 1 - len(self._check_seat(index).current_pack)

    def seat_images(self, index: int) -> dict[str, str]:
        """Image URLs for the seat's drafted and sideboard piles, when non-empty."""
        seat = self._check_seat(index)
        images: dict[str, str] = {}
        if seat.drafted:
            images["deck_image"] = f"/image/{self.cube.encode_cards(seat.drafted)}"
            images["deck_curve_image"] = f"{images['deck_image']}?layout=cmc"
        if seat.sideboard:
            images["sideboard_image"] = f"/image/{self.cube.encode_cards(seat.sideboard)}"
        return images

    def seat_view(self, index: int) -> SeatView:
        return SeatView(
            seat=index,
            pack=self.get_pack(index),
            drafted=self.get_drafted(index),
            sideboard=self.get_sideboard(index),
            pack_number=self.pack_number(index),
            pick_number=self.pick_number(index),
            images=self.seat_images(index),
        )

    # --- Mutations ---

    def _pass_target(self, index: int, seat: Seat) -> int:
        """
        Seat that receives a pack passed by `seat`.

        Packs go to the lower-numbered neighbour while the passer is on its
        first pack and to the higher-numbered neighbour afterwards.
        """
        if seat.pack_number(self.rules.packs_per_seat) == 1:
            return (index - 1) % self.rules.seat_count
        return (index + 1) % self.rules.seat_count

    async def pick(self, index: int, query: str, to_sideboard: bool = False) -> Card:
        """
        Pick a card from the seat's current pack and pass the rest on.

        Raises:
            InvalidSeatError: If the seat index is out of range
            NoPackAvailableError: If the seat has no pack in front of it
            CardNotFoundError: If the query matches nothing in the pack
            AmbiguousCardError: If the query matches several cards in the pack
        """
        async with self._lock:
            seat = self._check_seat(index)
            if not seat.current_pack:
                raise NoPackAvailableError(index)

            card = find_card(seat.current_pack, query, scope="the pack")
            target = self._pass_target(index, seat)
            updated, outgoing = seat.take_card(card, to_sideboard)

            seats = list(self._seats)
            seats[index] = updated
            if outgoing is not None:
                seats[target] = seats[target].receive(outgoing)

            await self._commit(tuple(seats))

        logger.debug(
            "Seat %d picked %s%s", index, card.name, " to sideboard" if to_sideboard else ""
        )
        return card

    async def swap(self, index: int, query: str) -> Card:
        """
        Move a picked card between the seat's deck and sideboard.

        Raises:
            InvalidSeatError: If the seat index is out of range
            CardNotFoundError: If the query matches no picked card
            AmbiguousCardError: If the query matches several picked cards
        """
        async with self._lock:
            seat = self._check_seat(index)
            card = find_card((*seat.drafted, *seat.sideboard), query, scope="your picks")

            seats = list(self._seats)
            seats[index] = seat.toggle_sideboard(card)
            await self._commit(tuple(seats))

        return card

    async def fix_cards(self, first_query: str, second_query: str) -> tuple[Card, Card]:
        """
        Exchange two cards everywhere in the draft.

        Used to correct a bad cube entry without changing any pack or seat
        size.

        Raises:
            CardNotFoundError: If either query matches nothing in the cube
            AmbiguousCardError: If either query matches several cube cards
            SameCardError: If both queries resolve to the same card
        """
        async with self._lock:
            first = find_card(self.cube.cards, first_query)
            second = find_card(self.cube.cards, second_query)
            if first is second:
                raise SameCardError(first.name)

            await self._commit(tuple(seat.substitute(first, second) for seat in self._seats))

        logger.info("Swapped %s and %s in every seat", first.name, second.name)
        return first, second

    async def seat_to_show(self, now: datetime | None = None) -> int:
        """
        Choose the seat most in need of attention and mark it as shown.

        Prefers the seat with the fewest picks, then the one shown least
        recently. A seat never shown counts as older than any other.
        A naive `now` is taken as local time; stored times are always UTC.
        """
        async with self._lock:

            def priority(index: int) -> tuple[int, bool, datetime, int]:
                seat = self._seats[index]
                shown = seat.last_shown
                return (
                    seat.picked_count,
                    shown is not None,
                    shown or datetime.min.replace(tzinfo=UTC),
                    index,
                )

            index = min(range(len(self._seats)), key=priority)

            seats = list(self._seats)
            shown_at = (now or datetime.now(UTC)).astimezone(UTC)
            seats[index] = seats[index].shown_at(shown_at)
            await self._commit(tuple(seats))

        return index

    def all_cards(self) -> list[Card]:
        """Every card dealt to the draft, wherever it currently is."""
        cards: list[Card] = []
        for seat in self._seats:
            cards.extend(seat.drafted)
            cards.extend(seat.sideboard)
            for pack in (*seat.pack_backlog, *seat.unopened_packs):
                cards.extend(pack)
        return cards
