from resume_validation.db.base import Base
from resume_validation.models.registration import Registration, ResumeStatus
from resume_validation.models.validation_job import JobStatus, ValidationJob

__all__ = [
    "Base",
    "Registration",
    "ResumeStatus",
    "ValidationJob",
    "JobStatus",
]
