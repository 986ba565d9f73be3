# Purpose: Manual remediation for a registration stuck on the Processing spinner.
# Usage: python -m resume_validation.workers.reset_status <candidate_id>
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from resume_validation.core.config import get_settings
from resume_validation.core.errors import RecordStoreError
from resume_validation.core.logging_config import configure_logging
from resume_validation.db.session import dispose_engines, get_sessionmaker
from resume_validation.repositories.registration_repo import RegistrationStore

logger = logging.getLogger("validation.reset")

RESET_REASON = "System Reset: Please upload again."


async def reset_user(store: RegistrationStore, candidate_id: str) -> None:
    logger.info("Resetting status for user %s...", candidate_id)
    await store.reset_status(candidate_id, RESET_REASON)
    logger.info("User status reset successfully.")


async def _run(candidate_id: str) -> int:
    store = RegistrationStore(get_sessionmaker(get_settings()))
    try:
        await reset_user(store, candidate_id)
        return 0
    except RecordStoreError as e:
        logger.error("Error resetting user: %s", e)
        return 1
    finally:
        await dispose_engines()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Reset a registration stuck in Processing.")
    parser.add_argument("candidate_id", help="Registration id (userId) to reset")
    args = parser.parse_args(argv)
    configure_logging()
    return asyncio.run(_run(args.candidate_id))


if __name__ == "__main__":
    sys.exit(main())
