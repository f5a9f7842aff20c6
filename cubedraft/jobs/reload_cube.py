"""
Reload the cube list and reconcile the stored draft.

Run this job after editing the cube on CubeCobra. The stored draft is kept
if the card list is unchanged and re-dealt otherwise.
"""

import argparse
import asyncio
import logging

from cubedraft.db.database import async_session_factory, init_db
from cubedraft.db.store import DatabaseStore
from cubedraft.services.context import DraftContext

logger = logging.getLogger(__name__)


async def run_reload(reset: bool = False) -> bool:
    """
    Reload the cube and draft.

    Args:
        reset: Deal a new draft even if the cube list is unchanged

    Returns:
        True if the draft is complete
    """
    await init_db()
    context = DraftContext(DatabaseStore(async_session_factory))
    try:
        draft = await context.reload()
        if reset:
            draft = await context.reset()
    except Exception as e:
        logger.error("Failed to reload cube: %s", e)
        raise
    finally:
        await context.close()

    logger.info(
        "Draft ready: %d cards in cube, picks per seat %s",
        len(draft.cube),
        [seat.picked_count for seat in draft.seats],
    )
    return draft.is_done


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Reload the cube list")
    parser.add_argument("--reset", action="store_true", help="deal a new draft")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_reload(reset=args.reset))


if __name__ == "__main__":
    main()
