"""Assign handles to accounts created before handles existed.

Usage:
    python src/backfill_handles.py

Safe to re-run: accounts that already have a handle are never touched.
Run a single instance at a time.
"""

import asyncio
import sys

import structlog
from sqlalchemy.exc import SQLAlchemyError

from api.v1.dependencies import get_backfill_service, get_uow_factory, set_reserved_registry
from core.exceptions import StorageError
from core.logging import setup_logging
from domain.services.reserved_registry import load_reserved_registry
from infrastructure.database.session import engine

logger = structlog.get_logger()


async def run() -> int:
    set_reserved_registry(await load_reserved_registry(get_uow_factory()))
    try:
        return await get_backfill_service().backfill_missing_handles()
    finally:
        await engine.dispose()


def main() -> int:
    setup_logging()
    try:
        assigned = asyncio.run(run())
    except (StorageError, SQLAlchemyError):
        logger.exception("handle_backfill_failed")
        return 1
    print(f"Assigned {assigned} handle(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
