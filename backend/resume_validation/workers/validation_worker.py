# resume_validation/workers/validation_worker.py
"""
Resume Validation Worker - consumes the durable validation queue and writes verdicts back to registrations.
Runs WORKER_CONCURRENCY consumers in one event loop; any number of these processes may share the queue.
"""
# Purpose: python -m resume_validation.workers.validation_worker
from __future__ import annotations

import asyncio
import logging
import signal
from typing import Optional

from resume_validation.core.config import Settings, get_settings
from resume_validation.core.logging_config import configure_logging
from resume_validation.db.session import dispose_engines, get_sessionmaker
from resume_validation.repositories.job_queue import ValidationQueue
from resume_validation.repositories.registration_repo import RegistrationStore
from resume_validation.services.resumes.classifier import ClassifierClient
from resume_validation.services.resumes.text_extractor import TextExtractor
from resume_validation.services.validation.reconciler import Reconciler
from resume_validation.services.validation.worker import ValidationWorker

logger = logging.getLogger("validation.worker")


async def process_next(queue: ValidationQueue, worker: ValidationWorker) -> bool:
    """Claim and handle one job. Returns False when nothing was due."""
    job = await queue.claim()
    if job is None:
        return False

    logger.info(
        "Processing job %s for user %s (attempt %d/%d)",
        job.id, job.payload.candidate_id, job.attempts, job.max_attempts,
    )
    try:
        await worker.process(job.payload)
    except Exception as e:
        logger.exception("Job %s failed for %s", job.id, job.payload.candidate_id)
        await queue.fail(job.id, e)
    else:
        await queue.complete(job.id)
    return True


async def _consume(
    name: str,
    queue: ValidationQueue,
    worker: ValidationWorker,
    stop: asyncio.Event,
    poll_interval: float,
) -> None:
    logger.info("[%s] 👂 Listening on queue '%s'", name, queue.name)
    while not stop.is_set():
        try:
            handled = await process_next(queue, worker)
        except Exception:
            # Queue/store outage: back off and keep the consumer alive.
            logger.exception("[%s] Queue error", name)
            handled = False
        if not handled:
            try:
                await asyncio.wait_for(stop.wait(), timeout=poll_interval)
            except asyncio.TimeoutError:
                pass


async def _reconcile_forever(
    reconciler: Reconciler,
    queue: ValidationQueue,
    stop: asyncio.Event,
    interval: float,
) -> None:
    while not stop.is_set():
        try:
            await asyncio.wait_for(stop.wait(), timeout=interval)
            return
        except asyncio.TimeoutError:
            pass
        try:
            await queue.requeue_stale()
            await reconciler.run_once()
        except Exception:
            logger.exception("Reconciliation pass failed")


async def run(settings: Settings, stop: Optional[asyncio.Event] = None) -> None:
    stop = stop or asyncio.Event()
    session_factory = get_sessionmaker(settings)

    store = RegistrationStore(session_factory)
    queue = ValidationQueue.from_settings(session_factory, settings)
    worker = ValidationWorker(
        settings,
        store,
        TextExtractor(timeout=settings.FETCH_TIMEOUT_SECONDS),
        ClassifierClient.from_settings(settings),
    )
    reconciler = Reconciler.from_settings(store, settings)

    logger.info("================================================================")
    logger.info("👀 STARTING RESUME VALIDATION WORKER (concurrency=%d)", settings.WORKER_CONCURRENCY)
    logger.info("================================================================")

    # Self-healing first: redeliver jobs orphaned by a crash, then time out stuck records.
    await queue.requeue_stale()
    await reconciler.run_once()

    tasks = [
        asyncio.create_task(
            _consume(f"consumer-{i}", queue, worker, stop, settings.QUEUE_POLL_INTERVAL_SECONDS)
        )
        for i in range(1, settings.WORKER_CONCURRENCY + 1)
    ]
    tasks.append(asyncio.create_task(
        _reconcile_forever(reconciler, queue, stop, settings.RECONCILE_INTERVAL_SECONDS)
    ))
    try:
        await asyncio.gather(*tasks)
    finally:
        for task in tasks:
            task.cancel()
        await dispose_engines()
        logger.info("Worker stopped")


async def _main() -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            pass
    await run(get_settings(), stop)


def main():
    configure_logging()
    try:
        asyncio.run(_main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
