"""Logging helpers for the conversion pipeline.

Modules log through a :class:`StructuredLogger`, which appends ``key=value``
fields to the message text. Fields bound with :class:`LogContext` (the
conversion id, the output format) live in a context variable, so every
record emitted while a conversion runs carries them, on whichever thread
it runs. :class:`ContextFormatter` writes them as a bracketed prefix.

    logger = get_logger(__name__)

    with LogContext(conversion_id="c0ffee12", output_format="csv"):
        with timed_stage(logger, "read") as metrics:
            metrics.bytes_read = 1024
"""

import logging
import sys
import time
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_log_fields: ContextVar[dict[str, Any] | None] = ContextVar("log_fields", default=None)


def context_fields() -> dict[str, Any]:
    """Fields bound to the current context, conversion id first."""
    fields = dict(_log_fields.get() or {})
    conversion_id = fields.pop("conversion_id", None)
    if conversion_id is None:
        return fields
    return {"conversion_id": conversion_id, **fields}


def get_conversion_id() -> str | None:
    return (_log_fields.get() or {}).get("conversion_id")


def set_conversion_id(conversion_id: str | None) -> None:
    """Bind a conversion id to the current context, or unbind it with None."""
    fields = dict(_log_fields.get() or {})
    fields.pop("conversion_id", None)
    if conversion_id is not None:
        fields["conversion_id"] = conversion_id
    _log_fields.set(fields)


def clear_context() -> None:
    _log_fields.set(None)


class LogContext:
    """Bind extra fields to every record logged inside the block.

    Blocks nest; leaving one restores the fields bound before it.
    """

    def __init__(self, **fields: Any) -> None:
        self._fields = fields
        self._token: Any = None

    def __enter__(self) -> "LogContext":
        self._token = _log_fields.set({**(_log_fields.get() or {}), **self._fields})
        return self

    def __exit__(self, *exc_info: Any) -> None:
        _log_fields.reset(self._token)


class ContextFormatter(logging.Formatter):
    """Formatter that prefixes the message with the bound context fields."""

    def formatMessage(self, record: logging.LogRecord) -> str:
        fields = context_fields()
        if not fields:
            return super().formatMessage(record)
        prefix = " ".join(f"{key}={value}" for key, value in fields.items())
        prefixed = logging.makeLogRecord(
            {**record.__dict__, "message": f"[{prefix}] {record.message}"}
        )
        return super().formatMessage(prefixed)


def render_fields(message: str, fields: dict[str, Any]) -> str:
    """Append ``key=value`` pairs to a message.

    >>> render_fields("Parsed", {"sheet": "Data", "rows": 2})
    'Parsed | sheet=Data, rows=2'
    """
    if not fields:
        return message
    pairs = ", ".join(f"{key}={value}" for key, value in fields.items())
    return f"{message} | {pairs}"


@dataclass
class StageMetrics:
    """Measurements taken while one pipeline stage runs."""

    stage: str
    started: float = field(default_factory=time.perf_counter)
    duration_seconds: float | None = None
    bytes_read: int = 0
    sheets_processed: int = 0
    rows_processed: int = 0

    def stop(self) -> None:
        self.duration_seconds = time.perf_counter() - self.started

    def summary(self) -> dict[str, Any]:
        """Non-zero measurements, keyed by name."""
        summary: dict[str, Any] = {}
        if self.duration_seconds is not None:
            summary["duration_seconds"] = f"{self.duration_seconds:.4f}"
        for name in ("bytes_read", "sheets_processed", "rows_processed"):
            value = getattr(self, name)
            if value:
                summary[name] = value
        return summary


class StructuredLogger:
    """Standard logger whose calls accept ``key=value`` fields."""

    def __init__(self, name: str) -> None:
        self._logger = logging.getLogger(name)

    def _log(
        self,
        level: int,
        message: str,
        fields: dict[str, Any],
        exc_info: bool = False,
    ) -> None:
        self._logger.log(level, render_fields(message, fields), exc_info=exc_info)

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, fields)

    def error(self, message: str, exc_info: bool = False, **fields: Any) -> None:
        """Log an error, with the active traceback when ``exc_info`` is set."""
        self._log(logging.ERROR, message, fields, exc_info=exc_info)

    def log_stage(self, metrics: StageMetrics) -> None:
        self.debug(f"Stage {metrics.stage} finished", **metrics.summary())

    def log_conversion_result(
        self,
        output_format: str,
        success: bool,
        duration_seconds: float,
        output_chars: int | None = None,
        stage: str | None = None,
        error_code: str | None = None,
    ) -> None:
        """Log the outcome of a conversion.

        Successes are logged at INFO, failures at WARNING since the error is
        also handed back to the caller.

        Args:
            output_format: Requested output format.
            success: Whether the conversion succeeded.
            duration_seconds: Total processing time.
            output_chars: Length of the rendered output.
            stage: Failing stage, for failures.
            error_code: Error code, for failures.
        """
        fields: dict[str, Any] = {
            "output_format": output_format,
            "success": success,
            "duration_seconds": f"{duration_seconds:.3f}",
        }
        optional = {
            "output_chars": output_chars,
            "stage": stage,
            "error_code": error_code,
        }
        fields.update({k: v for k, v in optional.items() if v is not None})
        level = logging.INFO if success else logging.WARNING
        self._log(level, "Conversion finished", fields)


@contextmanager
def timed_stage(
    logger: StructuredLogger, stage: str
) -> Generator[StageMetrics, None, None]:
    """Time a pipeline stage and log its metrics when it ends, even on error."""
    metrics = StageMetrics(stage=stage)
    try:
        yield metrics
    finally:
        metrics.stop()
        logger.log_stage(metrics)


class ProgressTracker:
    """Logs progress through a known number of items.

    A line is logged every ``every`` items and for the last one.
    """

    def __init__(
        self,
        logger: StructuredLogger,
        stage: str,
        total: int,
        every: int = 1,
    ) -> None:
        self._logger = logger
        self._stage = stage
        self._total = total
        self._every = max(every, 1)
        self._done = 0
        self._started = time.perf_counter()

    @property
    def current(self) -> int:
        return self._done

    def update(self, details: str | None = None) -> None:
        """Count one finished item."""
        self._done += 1
        if self._done % self._every and self._done != self._total:
            return
        percentage = self._done / self._total * 100 if self._total else 100.0
        fields: dict[str, Any] = {
            "done": f"{self._done}/{self._total}",
            "percentage": f"{percentage:.1f}%",
        }
        if details:
            fields["details"] = details
        self._logger.debug(f"Progress: {self._stage}", **fields)

    def complete(self) -> float:
        """Log the end of the stage and return its duration in seconds."""
        duration = time.perf_counter() - self._started
        self._logger.debug(
            f"Completed: {self._stage}",
            items=self._done,
            duration_seconds=f"{duration:.2f}",
        )
        return duration


def configure_logging(level: int | str = logging.INFO) -> None:
    """Route log records to stderr, replacing any root handlers.

    Converted output goes to stdout, so logs must not.

    Args:
        level: Log level as a number or a name such as ``"INFO"``.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ContextFormatter(LOG_FORMAT))

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: str) -> StructuredLogger:
    return StructuredLogger(name)
