# resume_validation/services/validation/worker.py
"""Per-job orchestration: extract → classify → write the verdict back to the registration.

Every path after dequeue either ends in a status write or re-raises so the queue can
redeliver:
  - extraction failure        → Rejected, "System Error: ...", no attempt charged
  - text shorter than minimum → Rejected, attempt charged
  - classifier failure        → re-raised, record stays Processing
  - verdict                   → Accepted, or Rejected with an attempt charged
"""
from __future__ import annotations

import asyncio
import enum
import logging
from typing import Optional, Protocol

from resume_validation.core.config import Settings
from resume_validation.core.errors import EmptyContentError, ExtractionError
from resume_validation.schemas.validation import EvaluationMode, ValidationJobPayload, Verdict
from resume_validation.services.resumes.text_extractor import check_resume_size

logger = logging.getLogger("validation.worker")

EMPTY_RESUME_REASON = "Resume appears empty or scanned."
EMPTY_RESUME_AI_REASON = "Insufficient text content."
SYSTEM_ERROR_PREFIX = "System Error: "


class JobState(str, enum.Enum):
    RECEIVED = "received"
    EXTRACTING = "extracting"
    CLASSIFYING = "classifying"
    UPDATED = "updated"
    ERRORED = "errored"


class Extractor(Protocol):
    def fetch(self, url: str) -> bytes: ...
    def extract(self, content: bytes) -> str: ...


class Classifier(Protocol):
    def classify(self, text: str, mode: EvaluationMode) -> Verdict: ...


class RecordStore(Protocol):
    async def mark_accepted(self, candidate_id: str, verdict: Verdict) -> None: ...
    async def mark_rejected(
        self,
        candidate_id: str,
        *,
        reason: str,
        ai_reason: Optional[str] = None,
        charge_attempt: bool,
        verdict: Optional[Verdict] = None,
    ) -> None: ...


class ValidationWorker:
    def __init__(
        self,
        settings: Settings,
        store: RecordStore,
        extractor: Extractor,
        classifier: Classifier,
        *,
        mode: EvaluationMode = EvaluationMode.SCORED,
    ):
        self.store = store
        self.extractor = extractor
        self.classifier = classifier
        self.mode = mode
        self.min_text_length = settings.MIN_TEXT_LENGTH
        self.max_resume_bytes = settings.MAX_RESUME_BYTES

    def _enter(self, job: ValidationJobPayload, state: JobState) -> JobState:
        logger.info("[%s] → %s", job.candidate_id, state.value)
        return state

    async def _extract_text(self, url: str) -> str:
        content = await asyncio.to_thread(self.extractor.fetch, url)
        check_resume_size(len(content), self.max_resume_bytes)
        return await asyncio.to_thread(self.extractor.extract, content)

    async def process(self, job: ValidationJobPayload) -> JobState:
        """Run one job to a terminal state. ClassifierError and store failures propagate."""
        self._enter(job, JobState.RECEIVED)
        self._enter(job, JobState.EXTRACTING)

        try:
            text = await self._extract_text(job.resume_url)
            if len(text) < self.min_text_length:
                raise EmptyContentError(len(text), self.min_text_length)
        except EmptyContentError as e:
            logger.warning("[%s] %s", job.candidate_id, e)
            await self.store.mark_rejected(
                job.candidate_id,
                reason=EMPTY_RESUME_REASON,
                ai_reason=EMPTY_RESUME_AI_REASON,
                charge_attempt=True,
            )
            return self._enter(job, JobState.ERRORED)
        except ExtractionError as e:
            logger.error("[%s] Extraction error: %s", job.candidate_id, e)
            await self.store.mark_rejected(
                job.candidate_id,
                reason=f"{SYSTEM_ERROR_PREFIX}{e}",
                charge_attempt=False,
            )
            return self._enter(job, JobState.ERRORED)

        self._enter(job, JobState.CLASSIFYING)
        verdict = await asyncio.to_thread(self.classifier.classify, text, self.mode)

        if verdict.valid:
            await self.store.mark_accepted(job.candidate_id, verdict)
        else:
            await self.store.mark_rejected(
                job.candidate_id,
                reason=verdict.reason,
                ai_reason=verdict.reason,
                charge_attempt=True,
                verdict=verdict,
            )
        logger.info(
            "[%s] Verdict: %s (score=%s, confidence=%s)",
            job.candidate_id, "Accepted" if verdict.valid else "Rejected", verdict.score, verdict.confidence,
        )
        return self._enter(job, JobState.UPDATED)
