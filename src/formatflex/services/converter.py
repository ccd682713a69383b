"""Conversion orchestration.

A conversion runs through ``IDLE -> READING -> PARSING -> SERIALIZING ->
DONE``. The first failing stage moves it to ``FAILED`` and the error is
returned in the result, tagged with that stage; nothing is retried.

The requested output format alone picks the reader, parser and writer
through ``PIPELINES``. The source is never sniffed: asking for a spreadsheet
report on a text file fails while opening the archive.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from contextlib import AbstractContextManager, ExitStack
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any
from uuid import uuid4

from formatflex.document import Document, Value
from formatflex.models import ConversionConfig, OutputFormat
from formatflex.output import write_csv, write_json, write_report, write_text
from formatflex.output.field_policy import apply_text_policy, apply_value_policy
from formatflex.parsers import (
    parse_csv,
    parse_lines,
    parse_raw,
    parse_workbook,
    parse_yaml,
)
from formatflex.services.source_reader import read_text
from formatflex.services.spreadsheet_reader import SpreadsheetArchive, open_archive
from formatflex.utils.exceptions import ConversionError, ConversionStage
from formatflex.utils.logging import LogContext, get_logger, timed_stage

logger = get_logger(__name__)


class ConversionState(str, Enum):
    """Lifecycle of a single conversion."""

    IDLE = "idle"
    READING = "reading"
    PARSING = "parsing"
    SERIALIZING = "serializing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class Pipeline:
    """Reader, parser and writer used for one output format."""

    read: Callable[[Path], Any]
    parse: Callable[[Any, ConversionConfig], Any]
    write: Callable[[Any, ConversionConfig], str]
    description: str


# =============================================================================
# Pipeline steps
# =============================================================================


def _parse_text_value(text: str, config: ConversionConfig) -> Value:
    return apply_text_policy(parse_raw(text), config)


def _parse_yaml_value(text: str, config: ConversionConfig) -> Value:
    return apply_value_policy(parse_yaml(text), config)


def _parse_line_document(text: str, config: ConversionConfig) -> Document:
    return parse_lines(text)


def _parse_csv_document(text: str, config: ConversionConfig) -> Document:
    return parse_csv(text)


def _parse_spreadsheet(
    archive: SpreadsheetArchive, config: ConversionConfig
) -> Document:
    return parse_workbook(archive)


def _write_json_value(value: Value, config: ConversionConfig) -> str:
    return write_json(value)


PIPELINES: dict[OutputFormat, Pipeline] = {
    OutputFormat.JSON: Pipeline(
        read=read_text,
        parse=_parse_text_value,
        write=_write_json_value,
        description="File content as a single JSON string",
    ),
    OutputFormat.TXT: Pipeline(
        read=read_text,
        parse=_parse_line_document,
        write=write_text,
        description="Lines of text",
    ),
    OutputFormat.YAML: Pipeline(
        read=read_text,
        parse=_parse_yaml_value,
        write=_write_json_value,
        description="YAML mapping or sequence converted to JSON",
    ),
    OutputFormat.CSV: Pipeline(
        read=read_text,
        parse=_parse_csv_document,
        write=write_csv,
        description="Delimited records, one per source line",
    ),
    OutputFormat.XLSX: Pipeline(
        read=open_archive,
        parse=_parse_spreadsheet,
        write=write_report,
        description="Spreadsheet contents as a per-sheet text report",
    ),
}

_missing_formats = set(OutputFormat) - set(PIPELINES)
if _missing_formats:
    raise RuntimeError(f"No conversion pipeline for: {sorted(_missing_formats)}")


# =============================================================================
# Result
# =============================================================================


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of a conversion: the rendered output or a structured error."""

    output_format: OutputFormat
    state: ConversionState
    output: str | None = None
    error: ConversionError | None = None
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> str:
        """Return the output, raising the conversion error on failure."""
        if self.error is not None:
            raise self.error
        return self.output or ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation.

        Returns:
            Dictionary with the outcome of the conversion.
        """
        result: dict[str, Any] = {
            "output_format": self.output_format.value,
            "state": self.state.value,
            "ok": self.ok,
            "duration_seconds": self.duration_seconds,
        }
        if self.error is not None:
            result["error"] = self.error.to_dict()
        else:
            result["output"] = self.output
        return result


# =============================================================================
# Orchestrator
# =============================================================================


class FormatConverter:
    """Runs conversions.

    Holds no per-call state, so one instance can serve concurrent calls
    from several threads. Each call opens and releases its own handles.
    """

    def __init__(self, pipelines: dict[OutputFormat, Pipeline] | None = None) -> None:
        """Initialize the converter.

        Args:
            pipelines: Pipeline table, defaults to ``PIPELINES``.
        """
        self._pipelines = pipelines or PIPELINES

    def convert(
        self,
        input_path: str | Path,
        output_format: OutputFormat | str,
        config: ConversionConfig | None = None,
    ) -> ConversionResult:
        """Convert a file to the requested format.

        Args:
            input_path: Path of the source file.
            output_format: Target format, as a member or a name.
            config: Conversion flags, all off when omitted.

        Returns:
            ConversionResult with the output, or with the error of the
            stage that failed.

        Raises:
            ValueError: If ``output_format`` names no known format.
        """
        fmt = OutputFormat.parse(output_format)
        config = config or ConversionConfig()
        pipeline = self._pipelines[fmt]
        path = Path(input_path)
        started = time.perf_counter()
        state = ConversionState.IDLE

        with LogContext(conversion_id=uuid4().hex[:8], output_format=fmt.value):
            logger.info("Starting conversion", file=path.name, **config.to_dict())
            try:
                with ExitStack() as stack:
                    state = ConversionState.READING
                    source = self._run_stage(
                        ConversionStage.READ, path, pipeline.read, path
                    )
                    if isinstance(source, AbstractContextManager):
                        stack.enter_context(source)

                    state = ConversionState.PARSING
                    model = self._run_stage(
                        ConversionStage.PARSE, path, pipeline.parse, source, config
                    )

                    state = ConversionState.SERIALIZING
                    output = self._run_stage(
                        ConversionStage.SERIALIZE, path, pipeline.write, model, config
                    )
            except ConversionError as e:
                duration = time.perf_counter() - started
                logger.log_conversion_result(
                    fmt.value,
                    success=False,
                    duration_seconds=duration,
                    stage=e.stage.value,
                    error_code=e.error_code.value,
                )
                logger.debug(
                    "Conversion failed", failed_in=state.value, detail=e.detail
                )
                return ConversionResult(
                    output_format=fmt,
                    state=ConversionState.FAILED,
                    error=e,
                    duration_seconds=duration,
                )

            duration = time.perf_counter() - started
            logger.log_conversion_result(
                fmt.value,
                success=True,
                duration_seconds=duration,
                output_chars=len(output),
            )
            return ConversionResult(
                output_format=fmt,
                state=ConversionState.DONE,
                output=output,
                duration_seconds=duration,
            )

    @staticmethod
    def _run_stage(
        stage: ConversionStage,
        path: Path,
        step: Callable[..., Any],
        *args: Any,
    ) -> Any:
        """Run one pipeline step, mapping unexpected errors to the stage."""
        with timed_stage(logger, stage.value) as metrics:
            try:
                result = step(*args)
                if stage is ConversionStage.READ:
                    metrics.bytes_read = path.stat().st_size
            except ConversionError:
                raise
            except Exception as e:  # noqa: BLE001 - every failure becomes a result
                logger.error(
                    f"Unexpected error during {stage.value}", exc_info=True
                )
                raise ConversionError.from_exception(e, stage, str(path)) from e

            if isinstance(result, Document):
                metrics.sheets_processed = len(result.sheets)
                metrics.rows_processed = result.row_count
            return result


def convert(
    input_path: str | Path,
    output_format: OutputFormat | str,
    config: ConversionConfig | None = None,
) -> ConversionResult:
    """Convert a file with a default FormatConverter.

    Args:
        input_path: Path of the source file.
        output_format: Target format, as a member or a name.
        config: Conversion flags, all off when omitted.

    Returns:
        ConversionResult with the output or a structured error.
    """
    return FormatConverter().convert(input_path, output_format, config)


def describe_pipelines() -> dict[OutputFormat, str]:
    """Describe what each output format produces."""
    return {fmt: pipeline.description for fmt, pipeline in PIPELINES.items()}
