"""Resume validation API: queue an uploaded resume for async validation, or screen raw text synchronously.

The intake route only flips the registration to Processing and enqueues a job; the worker
process does the slow part and the portal observes the registration for the outcome.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from resume_validation.api.deps import get_classifier, get_registration_store, get_validation_queue
from resume_validation.core.config import Settings, get_settings
from resume_validation.core.errors import ClassifierError, QueueError
from resume_validation.repositories.job_queue import ValidationQueue
from resume_validation.repositories.registration_repo import RegistrationStore
from resume_validation.schemas.validation import (
    EvaluationMode,
    QueueValidationRequest,
    QueueValidationResponse,
    ScreeningRequest,
    ValidationJobPayload,
)
from resume_validation.services.resumes.classifier import ClassifierClient

logger = logging.getLogger("api.validation")

router = APIRouter(prefix="/api", tags=["validation"])


@router.post("/queue-validation", response_model=QueueValidationResponse)
async def queue_validation(
    payload: QueueValidationRequest,
    settings: Settings = Depends(get_settings),
    store: RegistrationStore = Depends(get_registration_store),
    queue: ValidationQueue = Depends(get_validation_queue),
):
    if not payload.user_id or not payload.resume_url:
        return JSONResponse(status_code=400, content={"error": "Missing userId or resumeUrl"})

    registration = await store.get(payload.user_id)
    if registration is None:
        return JSONResponse(status_code=404, content={"error": "Registration not found"})
    if registration.resume_attempts >= settings.MAX_RESUME_ATTEMPTS:
        return JSONResponse(status_code=409, content={"error": "Maximum upload attempts reached"})

    await store.mark_processing(payload.user_id, payload.resume_url)
    try:
        job_id = await queue.enqueue(
            ValidationJobPayload(candidate_id=payload.user_id, resume_url=payload.resume_url)
        )
    except QueueError as e:
        logger.error("Enqueue failed for user %s: %s", payload.user_id, e)
        # no job will ever resolve this record
        await store.mark_rejected(payload.user_id, reason=f"System Error: {e}", charge_attempt=False)
        return JSONResponse(status_code=503, content={"error": "Validation queue unavailable"})
    logger.info("Job queued: %s for user %s", job_id, payload.user_id)

    return QueueValidationResponse(message="Resume queued for validation", job_id=str(job_id))


@router.post("/validate-resume")
def validate_resume(
    payload: ScreeningRequest,
    settings: Settings = Depends(get_settings),
    classifier: ClassifierClient = Depends(get_classifier),
):
    """Binary screening of already-extracted text; blocks on the model call."""
    text = payload.text or ""
    if len(text) < settings.MIN_TEXT_LENGTH:
        return JSONResponse(
            status_code=400,
            content={"valid": False, "reason": "Insufficient text content identified."},
        )

    try:
        verdict = classifier.classify(text, EvaluationMode.BINARY)
    except ClassifierError as e:
        logger.error("AI Validation Error: %s", e)
        return JSONResponse(
            status_code=500,
            content={"valid": False, "reason": "AI Service Error", "error": str(e)},
        )
    return verdict.model_dump(exclude={"score"})
