from __future__ import annotations

import io
import json
import logging

from agentline.core.logging import redact_string
from agentline.core.logging.context import get_log_context, log_context
from agentline.core.logging.json_formatter import JSONFormatter


def test_logging_json_line_with_context() -> None:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())

    logger = logging.getLogger("agentline.test.json")
    logger.handlers = []
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger.addHandler(handler)

    with log_context(correlation_id="c1", task_id="t1"):
        with log_context(rpc_method="tasks/get"):
            logger.info("hello", extra={"extra_fields": {"event_id": 3}})

    payload = json.loads(stream.getvalue().strip())
    assert payload["msg"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "agentline.test.json"
    assert payload["correlation_id"] == "c1"
    assert payload["task_id"] == "t1"
    assert payload["rpc_method"] == "tasks/get"
    assert payload["event_id"] == 3
    assert "ts_iso_utc" in payload
    assert get_log_context() == {}


def test_redact_masks_bearer_and_token_values() -> None:
    redacted = redact_string("Authorization: Bearer abc123 token=xyz")
    assert "abc123" not in redacted
    assert "xyz" not in redacted
    assert "Bearer ***" in redacted


def test_formatter_drops_none_fields_and_nests_exceptions() -> None:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())

    logger = logging.getLogger("agentline.test.json.exc")
    logger.handlers = []
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger.addHandler(handler)

    try:
        raise RuntimeError("bridge down")
    except RuntimeError:
        logger.exception("failed", extra={"extra_fields": {"detail": None, "msg": "spoofed", "attempt": 2}})

    payload = json.loads(stream.getvalue().strip())
    assert payload["msg"] == "failed"
    assert payload["attempt"] == 2
    assert "detail" not in payload
    assert "correlation_id" not in payload
    assert payload["exc"]["type"] == "RuntimeError"
    assert payload["exc"]["msg"] == "bridge down"
    assert "Traceback" in payload["exc"]["stack"]
    assert payload["ts_iso_utc"].endswith("Z")
