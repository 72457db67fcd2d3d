from .sse import SSEFrame, build_frames, parse_cursor, stream_task

__all__ = ["SSEFrame", "build_frames", "parse_cursor", "stream_task"]
