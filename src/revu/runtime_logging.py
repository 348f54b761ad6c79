"""Structured JSONL runtime logging for revu."""

from __future__ import annotations

import json
import os
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Literal

from revu.paths import log_path

LogLevel = Literal["off", "error", "warning", "info", "debug"]

LEVEL_ENV = "REVU_LOG_LEVEL"
FILE_ENV = "REVU_LOG_FILE"

_LEVEL_VALUES: dict[str, int] = {
    "off": 100,
    "error": 40,
    "warning": 30,
    "info": 20,
    "debug": 10,
}

_runtime_logger: "RuntimeLogger | None" = None


def parse_level(value: str | None, default: LogLevel = "warning") -> LogLevel:
    if not value:
        return default
    normalized = value.strip().lower()
    if normalized == "warn":
        normalized = "warning"
    if normalized in {"none", "disabled", "0"}:
        normalized = "off"
    if normalized not in _LEVEL_VALUES:
        return default
    return normalized  # type: ignore[return-value]


@dataclass(slots=True)
class RuntimeLogger:
    level: LogLevel
    sink_path: Path
    context: dict[str, Any] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def enabled(self, level: str) -> bool:
        current = _LEVEL_VALUES.get(self.level, _LEVEL_VALUES["warning"])
        incoming = _LEVEL_VALUES.get(level, _LEVEL_VALUES["debug"])
        return incoming >= current and current < _LEVEL_VALUES["off"]

    def bind(self, **fields: Any) -> "RuntimeLogger":
        """Child logger that adds ``fields`` to every event and shares the sink."""
        return RuntimeLogger(
            level=self.level,
            sink_path=self.sink_path,
            context={**self.context, **fields},
            _lock=self._lock,
        )

    @contextmanager
    def timed(self, event: str, level: str = "debug", **fields: Any) -> Iterator[dict[str, Any]]:
        """Log ``event`` with ``duration_ms`` once the block exits.

        The yielded dict can be filled with fields known only after the work.
        """
        extra: dict[str, Any] = {}
        started = time.perf_counter()
        try:
            yield extra
        finally:
            duration_ms = round((time.perf_counter() - started) * 1000, 3)
            self.log(level, event, duration_ms=duration_ms, **{**fields, **extra})

    def log(self, level: str, event: str, **fields: Any) -> None:
        if not self.enabled(level):
            return
        payload = {
            "ts": datetime.now(UTC).isoformat(),
            "level": level,
            "event": event,
            "pid": os.getpid(),
            **self.context,
            **fields,
        }
        line = json.dumps(payload, sort_keys=True, default=str)
        with self._lock:
            self.sink_path.parent.mkdir(parents=True, exist_ok=True)
            with self.sink_path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")

    def debug(self, event: str, **fields: Any) -> None:
        self.log("debug", event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        self.log("info", event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self.log("warning", event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self.log("error", event, **fields)


class _DisabledLogger(RuntimeLogger):
    def __init__(self) -> None:
        super().__init__(level="off", sink_path=Path(os.devnull))

    def bind(self, **fields: Any) -> RuntimeLogger:  # noqa: ARG002
        return self

    def log(self, level: str, event: str, **fields: Any) -> None:  # noqa: ARG002
        return


def configure_runtime_logging(
    *,
    level: str | None = None,
    log_file: str | Path | None = None,
    default_level: LogLevel = "warning",
) -> RuntimeLogger:
    """Install the process-wide logger.

    Explicit arguments win over the environment, which wins over
    ``default_level`` (normally the saved ``logging.level`` setting).
    """
    global _runtime_logger

    effective_level = parse_level(level or os.getenv(LEVEL_ENV), default=default_level)
    if effective_level == "off":
        _runtime_logger = _DisabledLogger()
    else:
        file_value = log_file or os.getenv(FILE_ENV)
        effective_file = Path(file_value).expanduser().resolve() if file_value else log_path()
        _runtime_logger = RuntimeLogger(level=effective_level, sink_path=effective_file)
        _runtime_logger.info(
            "logging.configured",
            configured_level=effective_level,
            sink_path=str(effective_file),
        )
    return _runtime_logger


def get_runtime_logger() -> RuntimeLogger:
    global _runtime_logger
    if _runtime_logger is None:
        _runtime_logger = configure_runtime_logging()
    return _runtime_logger
