"""Standalone batch sync against the external player-data service.

Runs the same sequential sync as ``POST /api/admin/transfermarkt/sync``
without going through the HTTP API, so long runs are not cut off by request
timeouts.

Usage:
    python -m scoutcrm.cli.sync_runner --scope missing

Exit codes:
    0 - Run completed (per-player errors are logged, not fatal)
    1 - Failure (check logs for details)
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import Optional, Sequence

from scoutcrm.config import settings
from scoutcrm.logging_config import setup_logging
from scoutcrm.services.player_sync_service import run_batch_sync
from scoutcrm.services.player_sync_store import SqlPlayerSyncStore
from scoutcrm.services.request_pacer import RequestPacer
from scoutcrm.services.transfermarkt_client import TransfermarktClient
from scoutcrm.utils.db_async import SessionLocal, dispose_engine

logger = logging.getLogger("sync_runner")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sync players with Transfermarkt.")
    parser.add_argument(
        "--scope",
        choices=("missing", "all"),
        default="missing",
        help="missing: players without an external id; all: every player",
    )
    return parser.parse_args(argv)


async def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one batch sync.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = parse_args(argv)
    start_time = datetime.now(timezone.utc)
    logger.info(f"Starting batch sync (scope={args.scope})")

    try:
        async with SessionLocal() as db, TransfermarktClient() as client:
            result = await run_batch_sync(
                SqlPlayerSyncStore(db),
                client,
                RequestPacer.from_settings(),
                scope=args.scope,
            )

        elapsed = (datetime.now(timezone.utc) - start_time).total_seconds()
        logger.info(
            f"Sync complete in {elapsed:.1f}s: "
            f"{result.scanned} scanned, "
            f"{result.matched} matched, "
            f"{result.not_found} not found, "
            f"{len(result.errors)} errors"
        )
        for error in result.errors:
            logger.warning(f"Sync error for {error['id']}: {error['msg']}")

        return 0

    except Exception as e:
        elapsed = (datetime.now(timezone.utc) - start_time).total_seconds()
        logger.error(f"Sync failed after {elapsed:.1f}s: {e}", exc_info=True)
        return 1

    finally:
        await dispose_engine()


def run() -> None:
    setup_logging(
        level=settings.log_level, access_log=False, datefmt="%Y-%m-%d %H:%M:%S"
    )
    exit_code = asyncio.run(main())
    sys.exit(exit_code)


if __name__ == "__main__":
    run()
