"""Record store adapter: point reads and partial updates of candidate registrations.

Every write is a single UPDATE keyed by candidate id, so concurrent jobs for one
candidate resolve as last-write-wins. Attempt increments are done in SQL.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from resume_validation.core.errors import RecordStoreError
from resume_validation.models.registration import Registration, ResumeStatus
from resume_validation.schemas.validation import Verdict

logger = logging.getLogger("validation.store")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RegistrationStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, candidate_id: str) -> Optional[Registration]:
        try:
            async with self._session_factory() as session:
                return await session.get(Registration, candidate_id)
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Failed to read registration {candidate_id}: {e}") from e

    async def _update(self, candidate_id: str, values: Dict[str, Any]) -> None:
        stmt = update(Registration).where(Registration.id == candidate_id).values(**values)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Failed to update registration {candidate_id}: {e}") from e
        if result.rowcount == 0:
            raise RecordStoreError(f"Registration {candidate_id} does not exist")
        logger.debug("Registration %s updated: %s", candidate_id, sorted(values))

    async def mark_processing(self, candidate_id: str, resume_url: str) -> None:
        """Initial transition performed by the upload flow before the job is enqueued."""
        await self._update(candidate_id, {
            "resume_status": ResumeStatus.PROCESSING.value,
            "resume_url": resume_url,
            "processing_started_at": _utcnow(),
            "processing_completed_at": None,
        })

    async def mark_accepted(self, candidate_id: str, verdict: Verdict) -> None:
        await self._update(candidate_id, {
            "resume_status": ResumeStatus.ACCEPTED.value,
            "resume_ai_confidence": verdict.confidence,
            "resume_ai_reason": verdict.reason,
            "resume_score": verdict.score,
            "processing_completed_at": _utcnow(),
        })

    async def mark_rejected(
        self,
        candidate_id: str,
        *,
        reason: str,
        ai_reason: Optional[str] = None,
        charge_attempt: bool,
        verdict: Optional[Verdict] = None,
    ) -> None:
        values: Dict[str, Any] = {
            "resume_status": ResumeStatus.REJECTED.value,
            "resume_url": None,
            "last_rejection_reason": reason,
            "resume_ai_reason": ai_reason if ai_reason is not None else reason,
            "processing_completed_at": _utcnow(),
        }
        if charge_attempt:
            values["resume_attempts"] = Registration.resume_attempts + 1
        if verdict is not None:
            values["resume_ai_confidence"] = verdict.confidence
            values["resume_score"] = verdict.score
        await self._update(candidate_id, values)

    async def reset_status(self, candidate_id: str, reason: str) -> None:
        """Manual remediation for a record stuck in Processing."""
        await self._update(candidate_id, {
            "resume_status": ResumeStatus.REJECTED.value,
            "resume_ai_reason": reason,
            "processing_started_at": None,
        })

    async def expire_processing(self, started_before: datetime, reason: str) -> list[str]:
        """Force every record still Processing since before `started_before` to Rejected."""
        try:
            async with self._session_factory() as session:
                ids = (await session.execute(
                    select(Registration.id).where(
                        Registration.resume_status == ResumeStatus.PROCESSING.value,
                        Registration.processing_started_at < started_before,
                    )
                )).scalars().all()
                if ids:
                    await session.execute(
                        update(Registration)
                        .where(
                            Registration.id.in_(ids),
                            Registration.resume_status == ResumeStatus.PROCESSING.value,
                        )
                        .values(
                            resume_status=ResumeStatus.REJECTED.value,
                            resume_url=None,
                            last_rejection_reason=reason,
                            resume_ai_reason=reason,
                            processing_completed_at=_utcnow(),
                        )
                    )
                    await session.commit()
                return list(ids)
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Failed to expire stuck registrations: {e}") from e
