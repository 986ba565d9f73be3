"""Error taxonomy for the resume validation pipeline.

The worker recovers locally from ExtractionError and EmptyContentError (both end in a
Rejected record). ClassifierError, RecordStoreError and QueueError propagate so the
queue can redeliver the job.
"""
from __future__ import annotations


class ValidationPipelineError(Exception):
    """Base class for every error raised by the pipeline."""


class ExtractionError(ValidationPipelineError):
    """Document could not be fetched, is not a parseable PDF, or has no pages."""


class EmptyContentError(ValidationPipelineError):
    """Extracted text is shorter than the minimum accepted length."""

    def __init__(self, length: int, minimum: int):
        super().__init__(f"Extracted text has {length} characters (minimum {minimum})")
        self.length = length
        self.minimum = minimum


class ClassifierError(ValidationPipelineError):
    """Inference endpoint failed or returned output that does not match the verdict contract."""


class RecordStoreError(ValidationPipelineError):
    """Reading or writing a candidate registration failed."""


class QueueError(ValidationPipelineError):
    """The durable job queue could not be read or updated."""
