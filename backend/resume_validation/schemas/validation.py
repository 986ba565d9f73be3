# resume_validation/schemas/validation.py
from __future__ import annotations

import enum
import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EvaluationMode(str, enum.Enum):
    """binary: lightweight screening. scored: full evaluation with a 0-10 quality score."""
    BINARY = "binary"
    SCORED = "scored"


class Verdict(BaseModel):
    """Classifier judgment. Ranges are not enforced; missing numeric fields read as zero."""
    valid: bool
    score: int = 0
    confidence: float = 0.0
    reason: str

    @field_validator("score", mode="before")
    @classmethod
    def _score_to_int(cls, value: Any) -> Any:
        if value is None:
            return 0
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError(f"score must be a finite number, got {value}")
            return int(value)
        return value

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence_default(cls, value: Any) -> Any:
        if value is None:
            return 0.0
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError(f"confidence must be a finite number, got {value}")
        return value


class ValidationJobPayload(BaseModel):
    """What the queue carries: no derived state, safe to reprocess."""
    candidate_id: str
    resume_url: str


# ----- HTTP bodies (camelCase on the wire, as the portal sends them) -----

class QueueValidationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")
    resume_url: Optional[str] = Field(default=None, alias="resumeUrl")


class QueueValidationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    job_id: str = Field(alias="jobId")


class ScreeningRequest(BaseModel):
    text: Optional[str] = None


class ApprovalEmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    name: Optional[str] = None
    roll_number: Optional[str] = Field(default=None, alias="rollNumber")
    password: Optional[str] = None
    login_url: Optional[str] = Field(default=None, alias="loginUrl")
