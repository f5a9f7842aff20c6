"""
Cube: the immutable, indexed card pool a draft is dealt from.

Cards are sorted by name and numbered by position. The numbering is what
card tokens encode, so it must only change when the digest changes.
"""

import base64
import binascii
import hashlib
import logging
import random
from collections.abc import Iterable, Sequence
from functools import cached_property

from cubedraft.models.card import Card, CardRecord
from cubedraft.models.failure import CardNotFoundError, CubeTooSmallError, DecodeError

logger = logging.getLogger(__name__)

# Standard base64 with "+" and "/" replaced so tokens fit in a URL path
_TOKEN_ALTCHARS = b"._"


def encode_varint(value: int) -> bytes:
    """Encode a non-negative integer as LEB128 (7 bits per byte, low group first)."""
    if value < 0:
        raise ValueError(f"Cannot encode negative value {value}")
    out = bytearray()
    while True:
        group = value & 0x7F
        value >>= 7
        if value:
            out.append(group | 0x80)
        else:
            out.append(group)
            return bytes(out)


def decode_varints(data: bytes) -> list[int]:
    """
    Decode a concatenation of LEB128 integers.

    Raises:
        ValueError: If the data ends in the middle of an integer
    """
    values: list[int] = []
    value = 0
    shift = 0
    pending = False
    for byte in data:
        value |= (byte & 0x7F) << shift
        if byte & 0x80:
            shift += 7
            pending = True
        else:
            values.append(value)
            value = 0
            shift = 0
            pending = False
    if pending:
        raise ValueError("truncated varint")
    return values


class Cube:
    """
    The full card pool, sorted by name.

    Every card's index equals its position in `cards`. Cubes are never
    mutated; a reload builds a new Cube.
    """

    def __init__(self, records: Iterable[CardRecord]) -> None:
        """
        Build a cube from source records.

        Args:
            records: Card rows, assumed unique by name

        Raises:
            ValueError: If a record has no mana value
        """
        ordered = sorted(records, key=lambda record: record.name)

        cards: list[Card] = []
        for index, record in enumerate(ordered):
            if record.mana_value is None:
                raise ValueError(f"Card {record.name} has no mana value")
            cards.append(
                Card(
                    name=record.name,
                    set_code=record.set_code,
                    collector_number=record.collector_number,
                    mana_value=record.mana_value,
                    index=index,
                )
            )

        self._cards: tuple[Card, ...] = tuple(cards)
        self._cards_by_name: dict[str, Card] = {card.name: card for card in cards}

    @property
    def cards(self) -> tuple[Card, ...]:
        return self._cards

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card: object) -> bool:
        if not isinstance(card, Card):
            return False
        return 0 <= card.index < len(self._cards) and self._cards[card.index] is card

    def __repr__(self) -> str:
        return f"<Cube(cards={len(self._cards)}, digest={self.digest})>"

    @cached_property
    def digest(self) -> str:
        """MD5 over the sorted card names. Independent of source order."""
        md5 = hashlib.md5()
        for name in sorted(card.name for card in self._cards):
            md5.update(name.encode("utf-8"))
        return md5.hexdigest()

    def get_card(self, name: str) -> Card:
        """
        Look up a card by its exact name.

        Raises:
            CardNotFoundError: If no card has this name
        """
        card = self._cards_by_name.get(name)
        if card is None:
            raise CardNotFoundError(name)
        return card

    def get_random_cards(self, count: int, rng: random.Random | None = None) -> list[Card]:
        """
        Sample distinct cards uniformly at random.

        Raises:
            ValueError: If count is negative
            CubeTooSmallError: If count exceeds the cube size
        """
        if count < 0:
            raise ValueError(f"Cannot sample {count} cards")
        if count > len(self._cards):
            raise CubeTooSmallError(count, len(self._cards))
        return (rng or random).sample(self._cards, count)

    def encode_cards(self, cards: Sequence[Card]) -> str:
        """
        Encode a card sequence as a compact URL-safe token.

        Raises:
            CardNotFoundError: If a card does not belong to this cube
        """
        buffer = bytearray()
        for card in cards:
            if card not in self:
                raise CardNotFoundError(card.name)
            buffer += encode_varint(card.index)
        return base64.b64encode(bytes(buffer), altchars=_TOKEN_ALTCHARS).decode("ascii")

    def decode_cards(self, token: str) -> list[Card]:
        """
        Decode a token produced by encode_cards, preserving order.

        Raises:
            DecodeError: If the token is malformed or names an unknown index
        """
        # b64decode maps the altchars but still accepts "+" and "/" as-is
        if "+" in token or "/" in token:
            raise DecodeError(token, "not valid base64")
        try:
            data = base64.b64decode(token, altchars=_TOKEN_ALTCHARS, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(token, "not valid base64") from e

        try:
            indexes = decode_varints(data)
        except ValueError as e:
            raise DecodeError(token, str(e)) from e

        cards: list[Card] = []
        for index in indexes:
            if index >= len(self._cards):
                raise DecodeError(token, f"card index {index} is out of range")
            cards.append(self._cards[index])
        return cards
