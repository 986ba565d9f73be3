# backend/resume_validation/db/session.py
"""Async engine and session factory, created lazily once per process and per database URL."""
from __future__ import annotations
import threading
from typing import Dict

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from resume_validation.core.config import Settings

_engines: Dict[str, AsyncEngine] = {}
_sessionmakers: Dict[str, async_sessionmaker[AsyncSession]] = {}
_lock = threading.Lock()


def get_engine(settings: Settings) -> AsyncEngine:
    """Initialize the engine if absent, otherwise return the existing handle."""
    url = settings.database_url_async_effective
    engine = _engines.get(url)
    if engine is not None:
        return engine
    with _lock:
        engine = _engines.get(url)
        if engine is None:
            engine = create_async_engine(url, pool_pre_ping=True)
            _engines[url] = engine
        return engine


def get_sessionmaker(settings: Settings) -> async_sessionmaker[AsyncSession]:
    url = settings.database_url_async_effective
    factory = _sessionmakers.get(url)
    if factory is not None:
        return factory
    engine = get_engine(settings)
    with _lock:
        factory = _sessionmakers.get(url)
        if factory is None:
            factory = async_sessionmaker(
                bind=engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            _sessionmakers[url] = factory
        return factory


async def dispose_engines() -> None:
    """Close every pooled connection and forget the cached handles."""
    with _lock:
        engines = list(_engines.values())
        _engines.clear()
        _sessionmakers.clear()
    for engine in engines:
        await engine.dispose()
