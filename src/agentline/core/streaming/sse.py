"""Server-Sent Events replay of a task's event log.

A stream covers the events known when it is built, strictly after the
client's cursor, and then ends. When the task is already terminal the stream
always finishes on a ``final`` frame, synthesizing one from the current
snapshot if the selected events do not carry it.
"""

from __future__ import annotations

import asyncio
import json
import math
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

from fastapi.responses import StreamingResponse

from agentline.core.tasks.schemas import TaskRecord, is_terminal

SSE_EVENT_NAME = "task"
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


@dataclass(frozen=True)
class SSEFrame:
    id: int
    data: dict[str, Any]

    @property
    def final(self) -> bool:
        return bool(self.data.get("final"))

    def render(self) -> str:
        body = json.dumps(self.data, separators=(",", ":"), ensure_ascii=False)
        return f"id: {self.id}\nevent: {SSE_EVENT_NAME}\ndata: {body}\n\n"


def parse_cursor(value: str | None) -> int:
    if value is None:
        return 0
    try:
        cursor = float(value.strip())
    except ValueError:
        return 0
    if not math.isfinite(cursor):
        return 0
    # event ids are integers, so "after 1.5" is "after 1"
    return max(0, math.floor(cursor))


def _payload(task_id: str, state: str, progress: int | None, message: str | None, final: bool) -> dict[str, Any]:
    return {
        "taskId": task_id,
        "status": {"state": state, "progress": progress, "message": message},
        "final": final,
    }


def build_frames(task: TaskRecord, cursor: int = 0) -> list[SSEFrame]:
    frames = [
        SSEFrame(
            id=event.id,
            data=_payload(task.task_id, event.state, event.progress, event.message, event.final),
        )
        for event in task.events
        if event.id > cursor
    ]

    if is_terminal(task.state) and not any(frame.final for frame in frames):
        frames.append(
            SSEFrame(
                id=task.last_event.id,
                data=_payload(task.task_id, task.state, task.progress, task.message, True),
            )
        )
    return frames


async def iter_frames(frames: list[SSEFrame]) -> AsyncIterator[str]:
    for frame in frames:
        yield frame.render()
        # let the transport flush between frames
        await asyncio.sleep(0)


def stream_task(task: TaskRecord, cursor: int = 0) -> StreamingResponse:
    frames = build_frames(task, cursor)
    return StreamingResponse(iter_frames(frames), status_code=200, media_type="text/event-stream", headers=SSE_HEADERS)
