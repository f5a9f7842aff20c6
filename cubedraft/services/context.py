"""
Application context: the current Cube, Draft and image cache.

Replaces module-level singletons. Request handlers get the context through
a FastAPI dependency; reloads and mutations share one lock so no request
ever sees a Draft built from a different Cube than the one being reloaded.
"""

import asyncio
import logging
import random
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

import httpx

from cubedraft.config import settings
from cubedraft.db.store import Store
from cubedraft.models.failure import DraftNotLoadedError
from cubedraft.services.cube import Cube
from cubedraft.services.cube_loader import USER_AGENT, load_cube
from cubedraft.services.draft import Draft, DraftRules
from cubedraft.services.image_cache import ImageCache

logger = logging.getLogger(__name__)

DIGEST_KEY = "digest"

CubeLoader = Callable[[], Awaitable[Cube]]


class DraftContext:
    """Holds the live Cube and Draft for one process."""

    def __init__(
        self,
        store: Store,
        cube_loader: CubeLoader | None = None,
        rules: DraftRules | None = None,
        http_client: httpx.AsyncClient | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=settings.http_timeout,
        )
        self._cube_loader = cube_loader or (lambda: load_cube(self._client))
        self._rules = rules
        self._rng = rng
        self._lock = asyncio.Lock()
        self._cube: Cube | None = None
        self._draft: Draft | None = None
        self._images: ImageCache | None = None

    @property
    def loaded(self) -> bool:
        return self._draft is not None

    @property
    def cube(self) -> Cube:
        if self._cube is None:
            raise DraftNotLoadedError()
        return self._cube

    @property
    def draft(self) -> Draft:
        if self._draft is None:
            raise DraftNotLoadedError()
        return self._draft

    @property
    def images(self) -> ImageCache:
        if self._images is None:
            raise DraftNotLoadedError()
        return self._images

    async def reload(self) -> Draft:
        """
        Load a fresh cube list and the draft that belongs to it.

        When the cube's digest differs from the one the stored draft was
        dealt from, the store is cleared and a new draft is dealt. A failure
        before the store is touched keeps the current draft.
        """
        async with self._lock:
            cube = await self._cube_loader()

            old_digest = await self.store.get(DIGEST_KEY)
            if old_digest is not None and old_digest != cube.digest:
                logger.warning("Cube list outdated, resetting draft")
                await self._replace(cube)
            else:
                draft = await Draft.load_or_create(cube, self.store, self._rules, self._rng)
                if old_digest is None:
                    await self.store.set(DIGEST_KEY, cube.digest)
                self._install(cube, draft)
            return self.draft

    async def reset(self) -> Draft:
        """Discard the current draft and deal a new one from the same cube."""
        async with self._lock:
            cube = self.cube
            logger.info("Resetting draft")
            await self._replace(cube)
            return self.draft

    async def _replace(self, cube: Cube) -> None:
        """
        Replace the stored draft with a newly dealt one for `cube`.

        The draft is dealt before the store is cleared. If clearing or
        writing fails, the context is unloaded so nothing can write seats
        under the wrong digest.
        """
        draft = Draft.deal(cube, self.store, self._rules, self._rng)
        try:
            await self.store.clear()
            await self.store.set(DIGEST_KEY, cube.digest)
            await draft.save()
        except Exception:
            logger.error("Failed to store new draft, unloading")
            self._install(None, None)
            raise
        self._install(cube, draft)

    def _install(self, cube: Cube | None, draft: Draft | None) -> None:
        self._cube = cube
        self._draft = draft
        self._images = ImageCache(cube, self._client) if cube is not None else None

    @asynccontextmanager
    async def mutation(self) -> AsyncIterator[Draft]:
        """Hold the context lock while mutating the current draft."""
        async with self._lock:
            yield self.draft

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
