from __future__ import annotations

import asyncio
from typing import Any, Callable

from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from agentline.core.tasks.store import TaskStore

TTL_SWEEPER_JOB_ID = "task-ttl-sweeper"


class SchedulerService:
    def __init__(self) -> None:
        self.scheduler: AsyncIOScheduler | None = None
        self._jobs: list[tuple[str, Callable[..., Any], dict[str, Any], int]] = []

    @property
    def running(self) -> bool:
        return self.scheduler is not None and self.scheduler.running

    def add_interval(self, job_id: str, seconds: int, func: Callable[..., Any], kwargs: dict[str, Any] | None = None) -> None:
        job = (job_id, func, dict(kwargs or {}), max(1, int(seconds)))
        self._jobs.append(job)
        if self.scheduler is not None:
            self._register(*job)

    def job_ids(self) -> list[str]:
        return [job_id for job_id, *_ in self._jobs]

    def _register(self, job_id: str, func: Callable[..., Any], kwargs: dict[str, Any], seconds: int) -> None:
        if self.scheduler is None:
            return
        self.scheduler.add_job(
            func,
            trigger="interval",
            id=job_id,
            seconds=seconds,
            kwargs=kwargs,
            replace_existing=True,
        )

    def start(self) -> None:
        if self.running:
            return
        self.scheduler = AsyncIOScheduler(
            jobstores={"default": MemoryJobStore()},
            event_loop=asyncio.get_running_loop(),
        )
        for job_id, func, kwargs, seconds in self._jobs:
            self._register(job_id, func, kwargs, seconds)
        self.scheduler.start()

    def shutdown(self) -> None:
        if self.running:
            self.scheduler.shutdown(wait=False)
        self.scheduler = None


async def sweep_expired_tasks(task_store: TaskStore, ttl_ms: int) -> int:
    # coroutine so the executor runs it on the loop rather than a worker thread
    return len(task_store.purge_expired(ttl_ms))
