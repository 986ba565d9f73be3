"""Deadline enforcement for registrations stuck in Processing.

Runs outside the job hot path (worker startup and a periodic timer). A record whose
validation started more than `deadline` ago is forced to Rejected without charging an attempt.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from resume_validation.core.config import Settings
from resume_validation.repositories.registration_repo import RegistrationStore

logger = logging.getLogger("validation.reconciler")

TIMEOUT_REASON = "Validation timed out. Please upload again."


class Reconciler:
    def __init__(self, store: RegistrationStore, *, deadline_seconds: float):
        self.store = store
        self.deadline = timedelta(seconds=deadline_seconds)

    @classmethod
    def from_settings(cls, store: RegistrationStore, settings: Settings) -> "Reconciler":
        return cls(store, deadline_seconds=settings.PROCESSING_DEADLINE_SECONDS)

    async def run_once(self, now: Optional[datetime] = None) -> list[str]:
        cutoff = (now or datetime.now(timezone.utc)) - self.deadline
        expired = await self.store.expire_processing(cutoff, TIMEOUT_REASON)
        if expired:
            logger.warning("⏱️ Timed out %d registration(s) stuck in Processing: %s", len(expired), ", ".join(expired))
        else:
            logger.debug("No registrations past the processing deadline")
        return expired
