from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

TaskState = Literal["accepted", "queued", "running", "succeeded", "failed", "canceled", "expired"]

TERMINAL_STATES: frozenset[str] = frozenset({"succeeded", "failed", "canceled", "expired"})


def is_terminal(state: str) -> bool:
    return state in TERMINAL_STATES


class TaskEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    state: TaskState
    progress: int | None = None
    message: str | None = None
    final: bool = False


class TaskRecord(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    task_id: str
    created_at_ms: int
    updated_at_ms: int
    state: TaskState = "accepted"
    message: str | None = None
    progress: int | None = None
    result: Any = None
    error: Any = None
    events: list[TaskEvent] = Field(default_factory=list)

    @property
    def last_event(self) -> TaskEvent:
        return self.events[-1]

    @property
    def terminal(self) -> bool:
        return is_terminal(self.state)
