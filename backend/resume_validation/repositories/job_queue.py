"""Durable job queue backed by the `validation_jobs` table.

Delivery is at-least-once: a claimed job is locked with SELECT ... FOR UPDATE SKIP LOCKED,
so concurrent consumers (in this or another process) never hold the same job. A job whose
handler raised goes back to `queued` after a delay until its attempts run out.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from resume_validation.core.config import Settings
from resume_validation.core.errors import QueueError
from resume_validation.models.validation_job import JobStatus, ValidationJob
from resume_validation.schemas.validation import ValidationJobPayload

logger = logging.getLogger("validation.queue")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ClaimedJob:
    id: UUID
    payload: ValidationJobPayload
    attempts: int
    max_attempts: int


class ValidationQueue:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        name: str,
        max_attempts: int,
        retry_delay_seconds: float,
        visibility_timeout_seconds: float,
    ):
        self._session_factory = session_factory
        self.name = name
        self.max_attempts = max_attempts
        self.retry_delay = timedelta(seconds=retry_delay_seconds)
        self.visibility_timeout = timedelta(seconds=visibility_timeout_seconds)

    @classmethod
    def from_settings(cls, session_factory: async_sessionmaker[AsyncSession], settings: Settings) -> "ValidationQueue":
        return cls(
            session_factory,
            name=settings.QUEUE_NAME,
            max_attempts=settings.QUEUE_MAX_ATTEMPTS,
            retry_delay_seconds=settings.QUEUE_RETRY_DELAY_SECONDS,
            visibility_timeout_seconds=settings.QUEUE_VISIBILITY_TIMEOUT_SECONDS,
        )

    async def enqueue(self, payload: ValidationJobPayload) -> UUID:
        job = ValidationJob(
            queue=self.name,
            candidate_id=payload.candidate_id,
            resume_url=payload.resume_url,
            status=JobStatus.QUEUED.value,
            attempts=0,
            max_attempts=self.max_attempts,
            available_at=_utcnow(),
        )
        try:
            async with self._session_factory() as session:
                session.add(job)
                await session.commit()
        except SQLAlchemyError as e:
            raise QueueError(f"Failed to enqueue job for {payload.candidate_id}: {e}") from e
        logger.info("Job queued: %s for candidate %s", job.id, payload.candidate_id)
        return job.id

    async def claim(self) -> Optional[ClaimedJob]:
        """Take the oldest due job, mark it active and count the delivery attempt."""
        now = _utcnow()
        stmt = (
            select(ValidationJob)
            .where(
                ValidationJob.queue == self.name,
                ValidationJob.status == JobStatus.QUEUED.value,
                ValidationJob.available_at <= now,
            )
            .order_by(ValidationJob.available_at, ValidationJob.created_at)
            .limit(1)
            .with_for_update(skip_locked=True)
        )
        try:
            async with self._session_factory() as session:
                job = (await session.execute(stmt)).scalar_one_or_none()
                if job is None:
                    await session.rollback()
                    return None
                job.status = JobStatus.ACTIVE.value
                job.locked_at = now
                job.attempts = job.attempts + 1
                await session.commit()
                return ClaimedJob(
                    id=job.id,
                    payload=ValidationJobPayload(candidate_id=job.candidate_id, resume_url=job.resume_url),
                    attempts=job.attempts,
                    max_attempts=job.max_attempts,
                )
        except SQLAlchemyError as e:
            raise QueueError(f"Failed to claim job from {self.name}: {e}") from e

    async def complete(self, job_id: UUID) -> None:
        try:
            async with self._session_factory() as session:
                job = await session.get(ValidationJob, job_id)
                if job is None:
                    raise QueueError(f"Job {job_id} does not exist")
                job.status = JobStatus.COMPLETED.value
                job.finished_at = _utcnow()
                job.locked_at = None
                await session.commit()
                candidate_id, attempts = job.candidate_id, job.attempts
        except SQLAlchemyError as e:
            raise QueueError(f"Failed to complete job {job_id}: {e}") from e
        logger.info("Job %s completed (candidate=%s, attempts=%d)", job_id, candidate_id, attempts)

    async def fail(self, job_id: UUID, error: BaseException | str) -> JobStatus:
        """Record a handler failure; requeue with delay or give up once attempts are exhausted."""
        message = str(error) or error.__class__.__name__
        try:
            async with self._session_factory() as session:
                job = await session.get(ValidationJob, job_id)
                if job is None:
                    raise QueueError(f"Job {job_id} does not exist")
                job.last_error = message
                job.locked_at = None
                if job.attempts < job.max_attempts:
                    job.status = JobStatus.QUEUED.value
                    job.available_at = _utcnow() + self.retry_delay
                else:
                    job.status = JobStatus.FAILED.value
                    job.finished_at = _utcnow()
                await session.commit()
                status = JobStatus(job.status)
                candidate_id, attempts, max_attempts = job.candidate_id, job.attempts, job.max_attempts
        except SQLAlchemyError as e:
            raise QueueError(f"Failed to record failure for job {job_id}: {e}") from e

        if status is JobStatus.FAILED:
            logger.error("Job %s failed permanently (candidate=%s, attempts=%d): %s", job_id, candidate_id, attempts, message)
        else:
            logger.warning(
                "Job %s failed (candidate=%s, attempt %d/%d), retrying: %s",
                job_id, candidate_id, attempts, max_attempts, message,
            )
        return status

    async def requeue_stale(self) -> int:
        """Return jobs left active by a crashed consumer to the queue."""
        cutoff = _utcnow() - self.visibility_timeout
        stmt = (
            update(ValidationJob)
            .where(
                ValidationJob.queue == self.name,
                ValidationJob.status == JobStatus.ACTIVE.value,
                ValidationJob.locked_at < cutoff,
            )
            .values(status=JobStatus.QUEUED.value, locked_at=None, available_at=_utcnow())
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise QueueError(f"Failed to requeue stale jobs: {e}") from e
        if result.rowcount:
            logger.warning("Requeued %d stale job(s) from %s", result.rowcount, self.name)
        return result.rowcount

    async def get(self, job_id: UUID) -> Optional[ValidationJob]:
        try:
            async with self._session_factory() as session:
                return await session.get(ValidationJob, job_id)
        except SQLAlchemyError as e:
            raise QueueError(f"Failed to read job {job_id}: {e}") from e
