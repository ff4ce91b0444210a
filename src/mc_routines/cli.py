"""CLI-side handler wrappers."""

from __future__ import annotations

from typing import Any

from mc_routines.runtime import RoutineJob, RoutineRuntime


class CliRoutineHandler:
    """Simple sync-friendly facade over the async routine runtime."""

    def __init__(self, runtime: RoutineRuntime) -> None:
        self._runtime = runtime

    def submit_routine(self, routine: str, **params: Any) -> str:
        return self._runtime.submit_routine(routine, **params)

    def get_job(self, job_id: str) -> RoutineJob:
        return self._runtime.get_job(job_id)

    def list_recent_jobs(self, limit: int = 20) -> list[RoutineJob]:
        return self._runtime.list_recent_jobs(limit=limit)

    def routine_names(self) -> list[str]:
        return self._runtime.routine_names
