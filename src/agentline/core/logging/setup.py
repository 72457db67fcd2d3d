from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .json_formatter import JSONFormatter

_LOGGER_NAME = "agentline"
_CONFIGURED_ATTR = "_agentline_json_logging"


def _parse_level(raw: str) -> int:
    normalized = raw.strip().upper()
    return getattr(logging, normalized, logging.INFO)


def _is_on(name: str, default: str = "off") -> bool:
    return os.getenv(name, default).strip().casefold() in {"on", "true", "1"}


def configure_logging(log_dir: Path | None = None) -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(_parse_level(os.getenv("AGENTLINE_LOG_LEVEL", "INFO")))
    logger.propagate = False

    formatter = JSONFormatter()

    if not any(getattr(handler, _CONFIGURED_ATTR, False) for handler in logger.handlers):
        stdout_handler = logging.StreamHandler(stream=sys.stdout)
        stdout_handler.setFormatter(formatter)
        setattr(stdout_handler, _CONFIGURED_ATTR, True)
        logger.addHandler(stdout_handler)

    configured_dir = os.getenv("AGENTLINE_LOG_DIR")
    if _is_on("AGENTLINE_LOG_TO_FILE") and (configured_dir or log_dir is not None):
        target_dir = Path(configured_dir) if configured_dir else Path(log_dir)
        target_dir.mkdir(parents=True, exist_ok=True)
        log_path = target_dir / "agentline.log"
        max_bytes = int(os.getenv("AGENTLINE_LOG_MAX_BYTES", "5000000"))
        backup_count = int(os.getenv("AGENTLINE_LOG_BACKUP_COUNT", "5"))

        file_exists = any(
            isinstance(handler, RotatingFileHandler)
            and getattr(handler, _CONFIGURED_ATTR, False)
            and Path(handler.baseFilename) == log_path.resolve()
            for handler in logger.handlers
        )
        if not file_exists:
            file_handler = RotatingFileHandler(
                filename=log_path,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            setattr(file_handler, _CONFIGURED_ATTR, True)
            logger.addHandler(file_handler)

    return logger
