"""Tests for the HTTP routes with the store, queue, classifier and notifier replaced by fakes."""
import smtplib
import uuid

import pytest
from fastapi.testclient import TestClient

from conftest import RESUME_TEXT, FakeClassifier, InMemoryStore
from resume_validation.api.deps import (
    get_classifier,
    get_email_notifier,
    get_registration_store,
    get_validation_queue,
)
from resume_validation.core.config import get_settings
from resume_validation.core.errors import ClassifierError, QueueError
from resume_validation.main import create_app
from resume_validation.schemas.validation import EvaluationMode, Verdict
from resume_validation.services.resumes.classifier import ClassifierClient


class RecordingQueue:
    def __init__(self, error=None):
        self.error = error
        self.jobs = []

    async def enqueue(self, payload):
        if self.error is not None:
            raise self.error
        self.jobs.append(payload)
        return uuid.UUID(int=len(self.jobs))


class RecordingNotifier:
    def __init__(self, error=None):
        self.error = error
        self.sent = []

    def send_approval_email(self, **kwargs):
        if self.error is not None:
            raise self.error
        self.sent.append(kwargs)


@pytest.fixture
def store():
    store = InMemoryStore()
    store.add("u1", resume_status="NoResume", resume_url=None, resume_attempts=0)
    store.add("maxed", resume_status="Rejected", resume_url=None, resume_attempts=3)
    return store


@pytest.fixture
def queue():
    return RecordingQueue()


@pytest.fixture
def classifier():
    return FakeClassifier(Verdict(valid=True, confidence=0.95, reason="Contains clear education and skills sections."))


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(settings, store, queue, classifier, notifier):
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_registration_store] = lambda: store
    app.dependency_overrides[get_validation_queue] = lambda: queue
    app.dependency_overrides[get_classifier] = lambda: classifier
    app.dependency_overrides[get_email_notifier] = lambda: notifier
    return TestClient(app)


class TestQueueValidation:

    def test_enqueues_and_marks_processing(self, client, store, queue):
        response = client.post(
            "/api/queue-validation",
            json={"userId": "u1", "resumeUrl": "https://storage.example/u1.pdf"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Resume queued for validation"
        assert body["jobId"] == str(uuid.UUID(int=1))
        assert store.records["u1"]["resume_status"] == "Processing"
        assert store.records["u1"]["resume_url"] == "https://storage.example/u1.pdf"
        assert [(j.candidate_id, j.resume_url) for j in queue.jobs] == [("u1", "https://storage.example/u1.pdf")]

    @pytest.mark.parametrize("body", [
        {"resumeUrl": "https://storage.example/u1.pdf"},
        {"userId": "u1"},
        {"userId": "", "resumeUrl": "https://storage.example/u1.pdf"},
        {},
    ])
    def test_missing_fields_are_rejected(self, client, queue, body):
        response = client.post("/api/queue-validation", json=body)

        assert response.status_code == 400
        assert "error" in response.json()
        assert queue.jobs == []

    def test_unknown_candidate_is_404(self, client, queue):
        response = client.post(
            "/api/queue-validation",
            json={"userId": "ghost", "resumeUrl": "https://storage.example/g.pdf"},
        )

        assert response.status_code == 404
        assert queue.jobs == []

    def test_exhausted_attempts_are_refused(self, client, store, queue):
        response = client.post(
            "/api/queue-validation",
            json={"userId": "maxed", "resumeUrl": "https://storage.example/m.pdf"},
        )

        assert response.status_code == 409
        assert store.records["maxed"]["resume_status"] == "Rejected"
        assert queue.jobs == []

    def test_enqueue_failure_rejects_without_charging(self, client, store, queue):
        queue.error = QueueError("connection refused")

        response = client.post(
            "/api/queue-validation",
            json={"userId": "u1", "resumeUrl": "https://storage.example/u1.pdf"},
        )

        assert response.status_code == 503
        assert response.json() == {"error": "Validation queue unavailable"}
        record = store.records["u1"]
        assert record["resume_status"] == "Rejected"
        assert record["last_rejection_reason"] == "System Error: connection refused"
        assert record["resume_attempts"] == 0
        assert record["resume_url"] is None


class TestScreening:

    def test_short_text_is_rejected(self, client, classifier):
        response = client.post("/api/validate-resume", json={"text": "hello"})

        assert response.status_code == 400
        assert response.json() == {"valid": False, "reason": "Insufficient text content identified."}
        assert classifier.calls == []

    def test_returns_binary_verdict(self, client, classifier):
        response = client.post("/api/validate-resume", json={"text": RESUME_TEXT})

        assert response.status_code == 200
        assert response.json() == {
            "valid": True,
            "confidence": 0.95,
            "reason": "Contains clear education and skills sections.",
        }
        assert classifier.calls == [(RESUME_TEXT, EvaluationMode.BINARY)]

    def test_classifier_failure_is_500(self, client, classifier):
        classifier.error = ClassifierError("Ollama API Error: 502")

        response = client.post("/api/validate-resume", json={"text": RESUME_TEXT})

        assert response.status_code == 500
        body = response.json()
        assert body["valid"] is False
        assert body["reason"] == "AI Service Error"
        assert body["error"] == "Ollama API Error: 502"

    def test_overflowing_model_number_is_500(self, client, mocker):
        reply = mocker.MagicMock()
        reply.raise_for_status.return_value = None
        reply.json.return_value = {"response": '{"valid": true, "confidence": 1e999, "reason": "ok"}'}
        mocker.patch("resume_validation.services.resumes.classifier.requests.post", return_value=reply)
        client.app.dependency_overrides[get_classifier] = lambda: ClassifierClient(
            "http://ollama.local:8080", scored_model="qwen2:7b", binary_model="llama3:8b"
        )

        response = client.post("/api/validate-resume", json={"text": RESUME_TEXT})

        assert response.status_code == 500
        body = response.json()
        assert body["valid"] is False
        assert body["reason"] == "AI Service Error"
        assert "verdict shape" in body["error"]


class TestApprovalEmail:

    PAYLOAD = {
        "email": "jane@example.com",
        "name": "Jane Doe",
        "rollNumber": "CQ-042",
        "password": "s3cret",
        "loginUrl": "https://portal.example/login",
    }

    def test_sends_email(self, client, notifier):
        response = client.post("/api/send-approval-email", json=self.PAYLOAD)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Email sent successfully"}
        assert notifier.sent == [{
            "email": "jane@example.com",
            "name": "Jane Doe",
            "roll_number": "CQ-042",
            "password": "s3cret",
            "login_url": "https://portal.example/login",
        }]

    def test_missing_fields(self, client, notifier):
        response = client.post("/api/send-approval-email", json={"email": "jane@example.com"})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}
        assert notifier.sent == []

    def test_smtp_failure_is_500(self, client, notifier):
        notifier.error = smtplib.SMTPAuthenticationError(535, b"bad credentials")

        response = client.post("/api/send-approval-email", json=self.PAYLOAD)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed to send email"}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
