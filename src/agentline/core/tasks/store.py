from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from typing import Any
from uuid import uuid4

from .schemas import TaskEvent, TaskRecord, TaskState, is_terminal

logger = logging.getLogger("agentline.tasks")

_WHITESPACE_RE = re.compile(r"\s+")


class _Unset:
    """Marks an update field the caller did not supply."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


def normalize_task_id(value: object) -> str:
    return _WHITESPACE_RE.sub("", str(value if value is not None else "").strip())


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_task_id() -> str:
    return f"task-{uuid4().hex}"


class TaskStore:
    """In-memory owner of task records and their append-only event logs.

    Every public method normalizes the task id it receives. Callers get the
    record back for reading; mutation goes through ``update`` only.
    """

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self._clock = clock or _now_ms
        self._tasks: dict[str, TaskRecord] = {}

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return normalize_task_id(task_id) in self._tasks

    def create(self, seed_message: str = "accepted") -> TaskRecord:
        now = self._clock()
        task_id = normalize_task_id(_new_task_id())
        task = TaskRecord(
            task_id=task_id,
            created_at_ms=now,
            updated_at_ms=now,
            state="accepted",
            message=seed_message,
            progress=0,
            events=[TaskEvent(id=1, state="accepted", progress=0, message=seed_message, final=False)],
        )
        self._tasks[task_id] = task
        logger.info("task_created", extra={"extra_fields": {"task_id": task_id}})
        return task

    def get(self, task_id: object) -> TaskRecord | None:
        return self._tasks.get(normalize_task_id(task_id))

    def update(
        self,
        task_id: object,
        state: TaskState,
        *,
        progress: int | None = UNSET,
        message: str | None = UNSET,
        result: Any = UNSET,
        error: Any = UNSET,
        final: bool = False,
    ) -> TaskRecord | None:
        task = self._tasks.get(normalize_task_id(task_id))
        if task is None:
            return None

        task.state = state
        task.updated_at_ms = self._clock()
        if progress is not UNSET:
            task.progress = progress
        if message is not UNSET:
            task.message = message
        if result is not UNSET:
            task.result = result
        if error is not UNSET:
            task.error = error

        event = TaskEvent(
            id=task.last_event.id + 1,
            state=state,
            progress=task.progress,
            message=task.message,
            final=bool(final),
        )
        task.events.append(event)
        logger.debug(
            "task_updated",
            extra={"extra_fields": {"task_id": task.task_id, "state": state, "event_id": event.id, "final": event.final}},
        )
        return task

    def purge_expired(self, ttl_ms: int, now_ms: int | None = None) -> list[str]:
        """Drop terminal tasks whose last update is older than ``ttl_ms``."""
        if ttl_ms <= 0:
            return []
        now = self._clock() if now_ms is None else now_ms
        expired = [
            task_id
            for task_id, task in self._tasks.items()
            if is_terminal(task.state) and now - task.updated_at_ms >= ttl_ms
        ]
        for task_id in expired:
            del self._tasks[task_id]
        if expired:
            logger.info("tasks_purged", extra={"extra_fields": {"count": len(expired)}})
        return expired
