from __future__ import annotations

import json
import logging
import os
import re
import threading
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars

DEFAULT_LOG_DIR = Path("artifacts/logs")
FRAMEWORK_LOG_NAME = "framework.log"

# Context keys that will be automatically included into log records
_CONTEXT_KEYS = ("platform", "browser", "device", "scenario", "test", "session_id")

_UNSAFE_CHARS = re.compile(r"[^\w.-]+")

# TRACE sits below DEBUG
TRACE = 5


def safe_file_name(name: str) -> str:
    """Collapse path separators, spaces and punctuation into underscores."""
    return _UNSAFE_CHARS.sub("_", name).strip("_") or "unnamed"


def _level_from_env() -> int:
    """Get log level from CROSSAUTO_LOG_LEVEL (TRACE|DEBUG|INFO|WARNING|ERROR)."""
    raw = os.getenv("CROSSAUTO_LOG_LEVEL", "INFO").upper()
    if raw == "TRACE":
        return TRACE
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else logging.INFO


class _FileSink:
    """
    Processor that duplicates every record as a JSON line into:
    - <log_dir>/framework.log      all events
    - <log_dir>/test_<name>.log    events of the current test (when bound)
    """

    def __init__(self, log_dir: Path) -> None:
        self.log_dir = log_dir
        self._lock = threading.RLock()

    def __call__(
        self, logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> MutableMapping[str, Any]:
        line = json.dumps(event_dict, ensure_ascii=False, default=str) + "\n"
        targets = [self.log_dir / FRAMEWORK_LOG_NAME]
        test_name = event_dict.get("test")
        if isinstance(test_name, str) and test_name:
            targets.append(log_path_for(test_name, self.log_dir))
        try:
            with self._lock:
                self.log_dir.mkdir(parents=True, exist_ok=True)
                for path in targets:
                    with path.open("a", encoding="utf-8") as f:
                        f.write(line)
        except OSError:
            # A full disk or a read-only checkout must not fail the test run
            pass
        return event_dict


def _add_message(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> Mapping[str, Any]:
    # "message" mirrors "event" for log viewers that expect it
    event_dict.setdefault("message", event_dict.get("event"))
    return event_dict


def _drop_none(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> Mapping[str, Any]:
    return {k: v for k, v in event_dict.items() if v is not None}


_state: dict[str, Any] = {"configured": False, "log_dir": DEFAULT_LOG_DIR}


def log_dir() -> Path:
    return Path(_state["log_dir"])


def log_path_for(test_name: str | None = None, directory: Path | None = None) -> Path:
    """
    Path of the per-test log file, or of the framework log when no name is given.
    """
    base = directory or log_dir()
    if not test_name:
        return base / FRAMEWORK_LOG_NAME
    return base / f"test_{safe_file_name(str(test_name))}.log"


def tail_test_log(test_name: str | None, lines: int = 200) -> str:
    """Last `lines` lines of the test's log file; empty when it does not exist."""
    path = log_path_for(test_name)
    if not path.exists():
        return ""
    with path.open(encoding="utf-8", errors="ignore") as f:
        return "".join(f.readlines()[-lines:])


def bind_context(
    *,
    settings: Any | None = None,
    driver: Any | None = None,
    test_name: str | None = None,
    scenario: str | None = None,
) -> None:
    """
    Bind platform, browser or device, scenario, test and session id into the
    logging context.

    Only known values are bound, so a later call with just the driver keeps
    the platform bound earlier from settings.
    """
    values: dict[str, Any] = {"test": test_name, "scenario": scenario}

    if settings is not None:
        raw = getattr(settings, "platform", None)
        platform = str(getattr(raw, "value", raw) or "").lower() or None
        values["platform"] = platform
        if platform == "web":
            values["browser"] = getattr(settings, "browser", None)
        elif platform in ("android", "ios"):
            device_cfg = getattr(settings, platform, None)
            values["device"] = getattr(device_cfg, "device_name", None)

    if driver is not None:
        values["session_id"] = getattr(driver, "session_id", None)

    bind_contextvars(**{k: v for k, v in values.items() if k in _CONTEXT_KEYS and v is not None})


def setup_logging(level: int | str | None = None, directory: str | Path | None = None) -> None:
    """
    Centralized setup of structured logging with JSON output and file duplication.

    Includes:
    - Log level from the argument, else CROSSAUTO_LOG_LEVEL
    - ISO 8601 timestamp (key: "timestamp")
    - Context (platform, browser/device, scenario, test, session_id) via contextvars
    - Duplication of each record into the log directory (see _FileSink)
    - JSON lines printed to stdout

    Later calls are no-ops.
    """
    if _state["configured"]:
        return

    if level is None:
        resolved = _level_from_env()
    elif isinstance(level, str):
        resolved = TRACE if level.upper() == "TRACE" else logging.getLevelName(level.upper())
    else:
        resolved = level
    if not isinstance(resolved, int):
        resolved = logging.INFO

    if directory is not None:
        _state["log_dir"] = Path(directory)

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            structlog.processors.CallsiteParameterAdder(
                [structlog.processors.CallsiteParameter.MODULE]
            ),
            _add_message,
            _drop_none,
            _FileSink(log_dir()),
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.PrintLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(resolved),
        cache_logger_on_first_use=True,
    )

    # Selenium and urllib3 follow the same level
    logging.getLogger().setLevel(resolved)
    _state["configured"] = True


def get_logger(name: str | None = None) -> Any:
    """
    Get a structlog logger instance.

    Configures logging on first use, so plain unit-test runs without the
    pytest plugin still get JSON output.
    """
    if not _state["configured"]:
        setup_logging()
    return structlog.get_logger(name or __name__)


__all__ = [
    "setup_logging",
    "bind_context",
    "safe_file_name",
    "log_path_for",
    "tail_test_log",
    "log_dir",
    "get_logger",
    "clear_contextvars",
]
