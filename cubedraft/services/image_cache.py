"""
Composite card images for encoded card tokens.

A key is either a bare token (cards laid out in a grid) or a token followed
by "?cmc" (one column per mana value pile). Composed images are kept in a
small LRU so re-rendering a seat's picks doesn't refetch every card.
"""

import asyncio
import io
import logging
import math
from collections import OrderedDict

import httpx
from PIL import Image

from cubedraft.config import CARD_HEIGHT, CARD_WIDTH, GRID_COLUMNS, settings
from cubedraft.models.card import Card
from cubedraft.models.failure import SourceFeedError
from cubedraft.services.cube import Cube

logger = logging.getLogger(__name__)

CMC_SUFFIX = "?cmc"

_BACKGROUND = (255, 255, 255)


class ImageCache:
    """LRU cache of composed WebP images keyed by card token."""

    def __init__(
        self,
        cube: Cube,
        client: httpx.AsyncClient,
        max_size: int | None = None,
    ) -> None:
        self.cube = cube
        self._client = client
        self._max_size = max_size or settings.image_cache_size
        self._images: OrderedDict[str, bytes] = OrderedDict()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._images)

    def __contains__(self, key: object) -> bool:
        return key in self._images

    async def get(self, key: str) -> bytes:
        """
        Return the WebP image for a key, composing it on a miss.

        Raises:
            DecodeError: If the token is malformed
            SourceFeedError: If a card image cannot be fetched
        """
        async with self._lock:
            cached = self._images.get(key)
            if cached is not None:
                self._images.move_to_end(key)
                return cached

        if key.endswith(CMC_SUFFIX):
            cards = self.cube.decode_cards(key[: -len(CMC_SUFFIX)])
            image = await self._compose_piles(Card.pile_by_cmc(cards))
        else:
            cards = self.cube.decode_cards(key)
            image = await self._compose_grid(cards)

        async with self._lock:
            self._images[key] = image
            self._images.move_to_end(key)
            while len(self._images) > self._max_size:
                evicted, _ = self._images.popitem(last=False)
                logger.debug("Evicted image %s", evicted)

        return image

    async def _fetch_card_image(self, card: Card) -> Image.Image:
        try:
            response = await self._client.get(card.image_url, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise SourceFeedError(f"Failed to fetch image for {card.name}", detail=str(e)) from e
        return Image.open(io.BytesIO(response.content)).convert("RGB")

    async def _fetch_all(self, cards: list[Card]) -> list[Image.Image]:
        return list(await asyncio.gather(*(self._fetch_card_image(card) for card in cards)))

    async def _compose_grid(self, cards: list[Card]) -> bytes:
        rows = max(1, math.ceil(len(cards) / GRID_COLUMNS))
        canvas = Image.new("RGB", (CARD_WIDTH * GRID_COLUMNS, CARD_HEIGHT * rows), _BACKGROUND)

        for position, picture in enumerate(await self._fetch_all(cards)):
            left = CARD_WIDTH * (position % GRID_COLUMNS)
            top = CARD_HEIGHT * (position // GRID_COLUMNS)
            canvas.paste(picture.resize((CARD_WIDTH, CARD_HEIGHT)), (left, top))

        return _to_webp(canvas)

    async def _compose_piles(self, piles: list[list[Card]]) -> bytes:
        offset = CARD_HEIGHT / 9
        depth = max((len(pile) for pile in piles), default=1)
        canvas = Image.new(
            "RGB",
            (max(1, CARD_WIDTH * len(piles)), round(CARD_HEIGHT + offset * (depth - 1))),
            _BACKGROUND,
        )

        for column, pile in enumerate(piles):
            for row, picture in enumerate(await self._fetch_all(pile)):
                canvas.paste(
                    picture.resize((CARD_WIDTH, CARD_HEIGHT)),
                    (CARD_WIDTH * column, round(offset * row)),
                )

        return _to_webp(canvas)


def _to_webp(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="WEBP")
    return buffer.getvalue()
