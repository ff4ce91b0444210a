"""Asynchronous runtime for running routine jobs against one agent."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Protocol
from uuid import uuid4

from mc_routines.agent import RoutineAgent
from mc_routines.routines import Routine


class RoutineJobStatus(str, Enum):
    """Lifecycle states for submitted routine jobs."""

    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(slots=True)
class RoutineJob:
    """Represents routine execution state and final outcome."""

    id: str
    routine: str
    submitted_at: datetime
    status: RoutineJobStatus
    params: dict[str, Any] = field(default_factory=dict)
    attempts: int = 0
    error: str | None = None
    finished_at: datetime | None = None


class RoutineHistoryStore(Protocol):
    """Storage contract for finished routine jobs."""

    def append(self, job: RoutineJob) -> None:
        """Record a job once it has reached a final status."""

    def get(self, job_id: str) -> RoutineJob | None:
        """Return the finished job with ``job_id``, if still retained."""

    def list_recent(self, limit: int) -> list[RoutineJob]:
        """Newest first, at most ``limit`` jobs."""


class InMemoryHistoryStore:
    """Keeps the newest finished jobs in a bounded deque."""

    def __init__(self, max_jobs: int = 1_000) -> None:
        self._jobs: deque[RoutineJob] = deque(maxlen=max_jobs)

    def append(self, job: RoutineJob) -> None:
        self._jobs.appendleft(job)

    def get(self, job_id: str) -> RoutineJob | None:
        return next((job for job in self._jobs if job.id == job_id), None)

    def list_recent(self, limit: int) -> list[RoutineJob]:
        return list(self._jobs)[:limit]


class RoutineRuntime:
    """Queue-backed runtime that executes routines one at a time with retries.

    Jobs run sequentially because they share a single agent. A routine that returns
    False is retried up to ``max_retries`` times; so is one that raises, with the
    exception recorded on the job instead of escaping the worker. Finished jobs
    leave the pending map for the history store, which bounds how many are kept.
    """

    def __init__(
        self,
        agent: RoutineAgent,
        registry: Mapping[str, Routine],
        *,
        history_store: RoutineHistoryStore | None = None,
        history_limit: int = 1_000,
        routine_timeout_seconds: float | None = None,
        max_retries: int = 2,
        retry_delay_seconds: float = 0.5,
        max_queue_size: int = 100,
        logger: logging.Logger | None = None,
    ) -> None:
        self._agent = agent
        self._registry = dict(registry)
        self._history_store = history_store or InMemoryHistoryStore(max_jobs=history_limit)
        self._routine_timeout_seconds = routine_timeout_seconds
        self._max_retries = max_retries
        self._retry_delay_seconds = retry_delay_seconds
        self._logger = logger or logging.getLogger("mc_routines.runtime")

        # Queued and running jobs only; finished ones move to the history store.
        self._jobs: dict[str, RoutineJob] = {}
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=max_queue_size)
        self._worker_task: asyncio.Task[None] | None = None

    @property
    def routine_names(self) -> list[str]:
        return sorted(self._registry)

    async def start(self) -> None:
        """Spawn the worker task unless one is already running."""
        if self._worker_task and not self._worker_task.done():
            return

        self._worker_task = asyncio.create_task(self._worker_loop(), name="routine-runtime-worker")
        self._logger.info("routine_runtime_started", extra={"queue_maxsize": self._queue.maxsize})

    async def stop(self) -> None:
        """Cancel the worker task and wait for it to unwind."""
        if not self._worker_task:
            return

        self._worker_task.cancel()
        try:
            await self._worker_task
        except asyncio.CancelledError:
            pass
        finally:
            self._worker_task = None

        self._logger.info("routine_runtime_stopped")

    async def join(self) -> None:
        """Wait until every submitted job has finished."""
        await self._queue.join()

    def submit_routine(self, routine: str, **params: Any) -> str:
        """Queue ``routine`` with keyword ``params`` and return the job id."""
        if routine not in self._registry:
            raise KeyError(f"Unknown routine: {routine}")

        job_id = uuid4().hex
        job = RoutineJob(
            id=job_id,
            routine=routine,
            submitted_at=datetime.now(timezone.utc),
            status=RoutineJobStatus.QUEUED,
            params=dict(params),
        )
        self._jobs[job_id] = job
        self._queue.put_nowait(job_id)
        self._logger.info(
            "routine_submitted",
            extra={"job_id": job_id, "routine": routine, "queue_size": self._queue.qsize()},
        )
        return job_id

    def get_job(self, job_id: str) -> RoutineJob:
        """Look up a job by id; unknown ids raise KeyError."""
        job = self._jobs.get(job_id) or self._history_store.get(job_id)
        if job is None:
            raise KeyError(f"Unknown routine job id: {job_id}")
        return job

    def list_recent_jobs(self, limit: int = 20) -> list[RoutineJob]:
        """Return most recent jobs: pending ones first, then finished ones from history."""
        pending = sorted(self._jobs.values(), key=lambda job: job.submitted_at, reverse=True)
        if len(pending) >= limit:
            return pending[:limit]
        return [*pending, *self._history_store.list_recent(limit - len(pending))]

    async def _worker_loop(self) -> None:
        while True:
            job_id = await self._queue.get()
            try:
                await self._execute_job(job_id)
            finally:
                self._queue.task_done()

    async def _execute_job(self, job_id: str) -> None:
        job = self._jobs[job_id]
        routine = self._registry[job.routine]
        job.status = RoutineJobStatus.RUNNING
        self._logger.info("routine_started", extra={"job_id": job.id, "routine": job.routine})

        last_error: str | None = None
        for attempt in range(1, self._max_retries + 2):
            job.attempts = attempt
            try:
                succeeded = await asyncio.wait_for(
                    routine(self._agent, **job.params),
                    timeout=self._routine_timeout_seconds,
                )
                if succeeded:
                    job.status = RoutineJobStatus.SUCCEEDED
                    job.error = None
                    self._logger.info("routine_succeeded", extra={"job_id": job.id, "attempt": attempt})
                    break
                last_error = f"Routine reported failure (attempt {attempt}/{self._max_retries + 1})"
                job.status = RoutineJobStatus.FAILED
                self._logger.warning("routine_unsuccessful", extra={"job_id": job.id, "attempt": attempt})
            except asyncio.TimeoutError:
                last_error = (
                    f"Routine timed out after {self._routine_timeout_seconds}s "
                    f"(attempt {attempt}/{self._max_retries + 1})"
                )
                job.status = RoutineJobStatus.TIMED_OUT
                self._logger.warning("routine_timeout", extra={"job_id": job.id, "attempt": attempt})
            except Exception as exc:  # noqa: BLE001 - runtime should capture routine failures.
                last_error = f"{type(exc).__name__}: {exc}"
                job.status = RoutineJobStatus.FAILED
                self._logger.exception(
                    "routine_failed",
                    extra={"job_id": job.id, "attempt": attempt, "routine": job.routine},
                )

            if attempt <= self._max_retries:
                await asyncio.sleep(self._retry_delay_seconds)

        if job.status != RoutineJobStatus.SUCCEEDED:
            job.error = last_error or "Unknown routine failure"
        job.finished_at = datetime.now(timezone.utc)
        self._history_store.append(job)
        del self._jobs[job.id]
