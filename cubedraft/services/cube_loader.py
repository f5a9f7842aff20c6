"""
Cube list loader.

Downloads the cube's CSV export and fills in mana values the export lacks
from Scryfall, then builds a Cube.
"""

import asyncio
import logging
from dataclasses import replace

import httpx

from cubedraft.config import settings
from cubedraft.models.card import CardRecord
from cubedraft.models.failure import SourceFeedError
from cubedraft.parsers.cube_csv import parse_cube_csv
from cubedraft.services.cube import Cube

logger = logging.getLogger(__name__)

USER_AGENT = "CubeDraft/1.0"

# Scryfall asks for no more than 10 requests per second
_SCRYFALL_CONCURRENCY = 8


async def fetch_cube_csv(client: httpx.AsyncClient, url: str | None = None) -> str:
    """
    Download the cube CSV export.

    Raises:
        SourceFeedError: If the request fails
    """
    url = url or settings.cube_csv_url
    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise SourceFeedError(
            "Failed to download cube list",
            detail=f"HTTP {e.response.status_code}",
        ) from e
    except httpx.RequestError as e:
        raise SourceFeedError("Failed to download cube list", detail=str(e)) from e
    return response.text


async def fetch_mana_value(client: httpx.AsyncClient, set_code: str, collector_number: str) -> int:
    """
    Look up a printing's mana value on Scryfall.

    Raises:
        SourceFeedError: If the request fails or the card has no cmc
    """
    url = f"{settings.scryfall_api_url}/cards/{set_code}/{collector_number}"
    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise SourceFeedError(
            f"Failed to look up {set_code}/{collector_number}",
            detail=f"HTTP {e.response.status_code}",
        ) from e
    except httpx.RequestError as e:
        raise SourceFeedError(
            f"Failed to look up {set_code}/{collector_number}", detail=str(e)
        ) from e

    cmc = response.json().get("cmc")
    if cmc is None:
        raise SourceFeedError(f"Scryfall has no mana value for {set_code}/{collector_number}")
    return int(cmc)


async def backfill_mana_values(
    client: httpx.AsyncClient, records: list[CardRecord]
) -> list[CardRecord]:
    """Return records with every missing mana value looked up."""
    semaphore = asyncio.Semaphore(_SCRYFALL_CONCURRENCY)

    async def fill(record: CardRecord) -> CardRecord:
        if record.mana_value is not None:
            return record
        async with semaphore:
            logger.debug("Looking up mana value for %s", record.name)
            cmc = await fetch_mana_value(client, record.set_code, record.collector_number)
        return replace(record, mana_value=cmc)

    return list(await asyncio.gather(*(fill(record) for record in records)))


async def fetch_cube_records(client: httpx.AsyncClient | None = None) -> list[CardRecord]:
    """
    Fetch the cube list with every mana value resolved.

    Raises:
        SourceFeedError: If the list or any lookup cannot be fetched
    """
    if client is None:
        async with httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            timeout=settings.http_timeout,
        ) as owned_client:
            return await fetch_cube_records(owned_client)

    records = parse_cube_csv(await fetch_cube_csv(client))
    missing = sum(1 for record in records if record.mana_value is None)
    if missing:
        logger.info("Backfilling %d mana values from Scryfall", missing)
    return await backfill_mana_values(client, records)


async def load_cube(client: httpx.AsyncClient | None = None) -> Cube:
    """Fetch the cube list and build a Cube from it."""
    logger.info("Loading cube list...")
    cube = Cube(await fetch_cube_records(client))
    logger.info("Loaded %d cards (digest %s)", len(cube), cube.digest)
    return cube
