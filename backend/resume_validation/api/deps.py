# Purpose: FastAPI dependencies wiring the routers to process-wide collaborators.
from __future__ import annotations

from fastapi import Depends

from resume_validation.core.config import Settings, get_settings
from resume_validation.db.session import get_sessionmaker
from resume_validation.repositories.job_queue import ValidationQueue
from resume_validation.repositories.registration_repo import RegistrationStore
from resume_validation.services.notifications.email_service import EmailNotifier
from resume_validation.services.resumes.classifier import ClassifierClient


def get_registration_store(settings: Settings = Depends(get_settings)) -> RegistrationStore:
    return RegistrationStore(get_sessionmaker(settings))


def get_validation_queue(settings: Settings = Depends(get_settings)) -> ValidationQueue:
    return ValidationQueue.from_settings(get_sessionmaker(settings), settings)


def get_classifier(settings: Settings = Depends(get_settings)) -> ClassifierClient:
    return ClassifierClient.from_settings(settings)


def get_email_notifier(settings: Settings = Depends(get_settings)) -> EmailNotifier:
    return EmailNotifier(settings)
