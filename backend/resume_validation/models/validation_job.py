# resume_validation/models/validation_job.py
# Purpose: Durable queue rows for resume validation jobs (one row per enqueue, no per-candidate dedup).
from __future__ import annotations
import enum
import uuid
from sqlalchemy import Column, Text, String, Integer, DateTime, Index, Uuid
from sqlalchemy.sql import func

from resume_validation.db.base import Base


class JobStatus(str, enum.Enum):
    QUEUED = "queued"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class ValidationJob(Base):
    __tablename__ = "validation_jobs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    queue = Column(String(64), nullable=False)
    candidate_id = Column(String(128), nullable=False)
    resume_url = Column(Text, nullable=False)

    status = Column(String(16), nullable=False, default=JobStatus.QUEUED.value)
    attempts = Column(Integer, nullable=False, default=0)
    max_attempts = Column(Integer, nullable=False)
    last_error = Column(Text, nullable=True)

    available_at = Column(DateTime(timezone=True), nullable=False)
    locked_at = Column(DateTime(timezone=True), nullable=True)
    finished_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_validation_jobs_claim", "queue", "status", "available_at"),
    )
