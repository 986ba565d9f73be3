"""
Pytest configuration: settings fixtures, an SQLite-backed store harness, and in-memory fakes
for the worker collaborators.
"""
import asyncio
import os
from typing import Any, Awaitable, Callable, Dict, List, Optional

import pytest

# Settings() is built at import time by resume_validation.main; point it somewhere harmless.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./unused-test.db")

from resume_validation.core.config import Settings  # noqa: E402
from resume_validation.db.base import Base  # noqa: E402
from resume_validation.db.session import dispose_engines, get_engine, get_sessionmaker  # noqa: E402
from resume_validation.models import Registration  # noqa: E402
from resume_validation.schemas.validation import EvaluationMode, Verdict  # noqa: E402


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        QUEUE_RETRY_DELAY_SECONDS=0,
        QUEUE_MAX_ATTEMPTS=3,
        PROCESSING_DEADLINE_SECONDS=900,
    )


@pytest.fixture
def run_db(settings):
    """Run `fn(session_factory)` in a fresh event loop against a freshly created schema."""

    def _run(fn: Callable[[Any], Awaitable[Any]]):
        async def _main():
            engine = get_engine(settings)
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            try:
                return await fn(get_sessionmaker(settings))
            finally:
                await dispose_engines()

        return asyncio.run(_main())

    return _run


async def add_registration(session_factory, candidate_id: str = "u1", **fields) -> None:
    async with session_factory() as session:
        session.add(Registration(id=candidate_id, **fields))
        await session.commit()


class InMemoryStore:
    """Mirrors RegistrationStore semantics on plain dicts."""

    def __init__(self, records: Optional[Dict[str, Dict[str, Any]]] = None, fail_writes: bool = False):
        self.records = records or {}
        self.fail_writes = fail_writes
        self.writes: List[str] = []

    def add(self, candidate_id: str, **fields):
        record = {
            "resume_status": "Processing",
            "resume_url": "https://storage.example/resume.pdf",
            "resume_attempts": 0,
            "last_rejection_reason": None,
            "resume_ai_reason": None,
            "resume_ai_confidence": None,
            "resume_score": None,
            "processing_completed_at": None,
        }
        record.update(fields)
        self.records[candidate_id] = record
        return record

    def _write(self, candidate_id: str, values: Dict[str, Any]) -> None:
        from resume_validation.core.errors import RecordStoreError

        if self.fail_writes:
            raise RecordStoreError("store unavailable")
        if candidate_id not in self.records:
            raise RecordStoreError(f"Registration {candidate_id} does not exist")
        self.records[candidate_id].update(values)
        self.writes.append(candidate_id)

    async def get(self, candidate_id: str):
        record = self.records.get(candidate_id)
        if record is None:
            return None
        return type("RegistrationRow", (), dict(record, id=candidate_id))()

    async def mark_processing(self, candidate_id: str, resume_url: str) -> None:
        self._write(candidate_id, {
            "resume_status": "Processing",
            "resume_url": resume_url,
            "processing_completed_at": None,
        })

    async def mark_accepted(self, candidate_id: str, verdict: Verdict) -> None:
        self._write(candidate_id, {
            "resume_status": "Accepted",
            "resume_ai_confidence": verdict.confidence,
            "resume_ai_reason": verdict.reason,
            "resume_score": verdict.score,
            "processing_completed_at": "now",
        })

    async def mark_rejected(self, candidate_id, *, reason, ai_reason=None, charge_attempt, verdict=None) -> None:
        values = {
            "resume_status": "Rejected",
            "resume_url": None,
            "last_rejection_reason": reason,
            "resume_ai_reason": ai_reason if ai_reason is not None else reason,
            "processing_completed_at": "now",
        }
        if charge_attempt:
            values["resume_attempts"] = self.records.get(candidate_id, {}).get("resume_attempts", 0) + 1
        if verdict is not None:
            values["resume_ai_confidence"] = verdict.confidence
            values["resume_score"] = verdict.score
        self._write(candidate_id, values)


class FakeExtractor:
    def __init__(self, text: str = "", fetch_error: Optional[Exception] = None, content: bytes = b"%PDF-1.4"):
        self.text = text
        self.fetch_error = fetch_error
        self.content = content
        self.fetched: List[str] = []

    def fetch(self, url: str) -> bytes:
        self.fetched.append(url)
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.content

    def extract(self, content: bytes) -> str:
        return self.text


class FakeClassifier:
    def __init__(self, verdict: Optional[Verdict] = None, error: Optional[Exception] = None):
        self.verdict = verdict
        self.error = error
        self.calls: List[tuple] = []

    def classify(self, text: str, mode: EvaluationMode) -> Verdict:
        self.calls.append((text, mode))
        if self.error is not None:
            raise self.error
        return self.verdict


RESUME_TEXT = (
    "Jane Doe jane.doe@example.com +1 555 0100 "
    "Education: B.Sc. Computer Science, State University 2021 "
    "Skills: Python, SQL, FastAPI, Docker "
    "Experience: Backend Engineer at Acme 2021-2024"
)
