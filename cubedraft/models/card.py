from collections.abc import Iterable
from dataclasses import dataclass

from cubedraft.config import MAX_CMC_PILE


@dataclass(frozen=True, slots=True)
class CardRecord:
    """
    A card row as delivered by the source feed.

    Attributes:
        name: Card name, unique within a cube
        set_code: Set code of the chosen printing (e.g., "LEB", "DMU")
        collector_number: Collector number within set
        mana_value: Converted mana cost, None when the feed had no value
    """

    name: str
    set_code: str
    collector_number: str
    mana_value: int | None = None


@dataclass(frozen=True, slots=True, eq=False)
class Card:
    """
    A card in a cube.

    Cards are allocated once per Cube and compared by identity, so a card
    can be found and removed from whichever container holds it.

    Attributes:
        name: Card name exactly as it appears in the cube list
        set_code: Set code of the printing used for images
        collector_number: Collector number within set
        mana_value: Converted mana cost
        index: Position in the owning cube's sorted card list
    """

    name: str
    set_code: str
    collector_number: str
    mana_value: int
    index: int

    @property
    def url(self) -> str:
        return f"https://scryfall.com/card/{self.set_code}/{self.collector_number}"

    @property
    def image_url(self) -> str:
        return (
            f"https://api.scryfall.com/cards/{self.set_code}/{self.collector_number}"
            "?format=image&version=png"
        )

    @staticmethod
    def pile_by_cmc(cards: Iterable["Card"]) -> list[list["Card"]]:
        """
        Group cards into piles by mana value for display.

        Mana values of 7 and above share one pile. Piles are returned in
        increasing mana value order and empty piles are omitted.
        """
        piles: dict[int, list[Card]] = {}
        for card in cards:
            piles.setdefault(min(card.mana_value, MAX_CMC_PILE), []).append(card)
        return [piles[cmc] for cmc in sorted(piles)]
