# resume_validation/models/registration.py
# Purpose: Per-candidate registration record. The UI subscribes to it; the validation worker writes verdicts.
from __future__ import annotations
import enum
from sqlalchemy import Column, Text, String, Integer, Float, DateTime
from sqlalchemy.sql import func

from resume_validation.db.base import Base  # IMPORTANT: Base must be imported


class ResumeStatus(str, enum.Enum):
    NO_RESUME = "NoResume"
    PROCESSING = "Processing"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class Registration(Base):
    """
    CandidateRecord.
    - `resume_attempts`: terminal rejections charged to the candidate; the upload gate closes at MAX_RESUME_ATTEMPTS.
    - `resume_url`: currently submitted file; cleared whenever the record is rejected.
    - `processing_started_at` / `processing_completed_at`: bounds of one validation attempt.
    """
    __tablename__ = "registrations"

    id = Column(String(128), primary_key=True)
    email = Column(Text, nullable=True)
    name = Column(Text, nullable=True)
    roll_number = Column(String(64), nullable=True)

    resume_status = Column(String(32), nullable=False, default=ResumeStatus.NO_RESUME.value, index=True)
    resume_url = Column(Text, nullable=True)
    resume_attempts = Column(Integer, nullable=False, default=0)
    last_rejection_reason = Column(Text, nullable=True)
    resume_ai_reason = Column(Text, nullable=True)
    resume_ai_confidence = Column(Float, nullable=True)
    resume_score = Column(Integer, nullable=True)

    processing_started_at = Column(DateTime(timezone=True), nullable=True)
    processing_completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
