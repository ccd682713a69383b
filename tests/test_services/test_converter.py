"""Tests for the conversion orchestrator."""

from __future__ import annotations

import json
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

import pytest
import yaml

from formatflex.models import ConversionConfig, OutputFormat
from formatflex.services.converter import (
    PIPELINES,
    ConversionResult,
    ConversionState,
    FormatConverter,
    Pipeline,
    convert,
    describe_pipelines,
)
from formatflex.utils.exceptions import (
    ConversionError,
    ConversionStage,
    ErrorCode,
    ErrorKind,
)


class _TrackedSource:
    """Context-managed source that records whether it was released."""

    def __init__(self) -> None:
        self.closed = False

    def __enter__(self) -> _TrackedSource:
        return self

    def __exit__(self, *args: Any) -> None:
        self.closed = True


class TestPipelineTable:
    """Tests for the format to pipeline table."""

    def test_every_format_has_a_pipeline(self) -> None:
        assert set(PIPELINES) == set(OutputFormat)

    def test_describe_pipelines(self) -> None:
        descriptions = describe_pipelines()
        assert set(descriptions) == set(OutputFormat)
        assert all(descriptions.values())


class TestTextConversions:
    """Tests for TXT, CSV and JSON targets."""

    def test_txt_lines(self, write_text_file: Callable[..., Path]) -> None:
        path = write_text_file("notes.txt", "a\nb\nc\n")
        assert convert(path, OutputFormat.TXT).unwrap() == "a\nb\nc"

    def test_txt_no_header_flattens(self, write_text_file: Callable[..., Path]) -> None:
        path = write_text_file("notes.txt", "a\nb\nc\n")
        result = convert(path, "txt", ConversionConfig(no_header=True))
        assert result.unwrap() == "a,b,c"

    def test_csv_records(self, write_text_file: Callable[..., Path]) -> None:
        path = write_text_file("data.csv", "a,b\nc,d\n")
        assert convert(path, OutputFormat.CSV).unwrap() == "a,b\nc,d"

    def test_csv_lines(self, write_text_file: Callable[..., Path]) -> None:
        path = write_text_file("data.csv", "line1\nline2\n")
        assert convert(path, OutputFormat.CSV).unwrap() == "line1\nline2"

    def test_csv_no_header_flattens(
        self, write_text_file: Callable[..., Path]
    ) -> None:
        path = write_text_file("data.csv", "line1\nline2\n")
        result = convert(path, OutputFormat.CSV, ConversionConfig(no_header=True))
        assert result.unwrap() == "line1,line2"

    def test_csv_round_trips_unchanged(
        self, write_text_file: Callable[..., Path]
    ) -> None:
        source = 'name,city\nAda,"London, UK"\nLinus,Helsinki'
        path = write_text_file("people.csv", source + "\n")
        assert convert(path, OutputFormat.CSV).unwrap() == source

    def test_csv_trim_and_ignore_empty(
        self, write_text_file: Callable[..., Path]
    ) -> None:
        path = write_text_file("data.csv", " a , ,b\n\n , \nc,d\n")
        config = ConversionConfig(trim=True, ignore_empty=True)
        assert convert(path, OutputFormat.CSV, config).unwrap() == "a,b\nc,d"

    def test_semicolon_csv_keeps_its_delimiter(
        self, write_text_file: Callable[..., Path]
    ) -> None:
        path = write_text_file("data.csv", "a;b;c\n1;2;3\n4;5;6\n")
        assert convert(path, OutputFormat.CSV).unwrap() == "a;b;c\n1;2;3\n4;5;6"

    @pytest.mark.parametrize(
        "source",
        [
            "id|name\n1|Smith, John",
            '"name","age"\n"bob","3"',
            'name,note\nbob,he said "hi',
        ],
    )
    def test_csv_lines_pass_through(
        self, write_text_file: Callable[..., Path], source: str
    ) -> None:
        path = write_text_file("data.csv", source + "\n")
        assert convert(path, OutputFormat.CSV).unwrap() == source

    def test_csv_trim_keeps_pipe_delimiter(
        self, write_text_file: Callable[..., Path]
    ) -> None:
        path = write_text_file("data.csv", "id | name\n1 | Smith, John\n")
        result = convert(path, OutputFormat.CSV, ConversionConfig(trim=True))
        assert result.unwrap() == "id|name\n1|Smith, John"

    def test_csv_line_longer_than_field_limit(
        self, write_text_file: Callable[..., Path]
    ) -> None:
        line = "a," + "x" * 200_000
        path = write_text_file("wide.csv", line + "\n")
        assert convert(path, OutputFormat.CSV).unwrap() == line

    def test_txt_blank_lines_dropped(
        self, write_text_file: Callable[..., Path]
    ) -> None:
        path = write_text_file("notes.txt", "a\n\nb\n")
        result = convert(path, OutputFormat.TXT, ConversionConfig(no_header=True))
        assert result.unwrap() == "a,b"

    def test_txt_splits_on_newline_only(
        self, write_text_file: Callable[..., Path]
    ) -> None:
        path = write_text_file("notes.txt", "page1\x0cpage2\nline \u2028 sep\n")
        result = convert(path, OutputFormat.TXT)
        assert result.unwrap() == "page1\x0cpage2\nline \u2028 sep"

    def test_json_trim_splits_on_newline_only(
        self, write_text_file: Callable[..., Path]
    ) -> None:
        path = write_text_file("raw.txt", " page1\x0cpage2 \n  next\n")
        output = convert(path, OutputFormat.JSON, ConversionConfig(trim=True))
        assert json.loads(output.unwrap()) == "page1\x0cpage2\nnext\n"

    def test_json_wraps_content_as_string(
        self, write_text_file: Callable[..., Path]
    ) -> None:
        path = write_text_file("raw.txt", 'say "hi"\nbye\n')
        output = convert(path, OutputFormat.JSON).unwrap()
        assert output == '"say \\"hi\\"\\nbye\\n"'
        assert json.loads(output) == 'say "hi"\nbye\n'

    def test_crlf_source(self, write_text_file: Callable[..., Path]) -> None:
        path = write_text_file("notes.txt", "a\r\nb\r\n")
        assert convert(path, OutputFormat.TXT).unwrap() == "a\nb"


class TestYamlConversion:
    """Tests for the YAML to JSON pipeline."""

    def test_mapping_keeps_source_order(
        self, write_text_file: Callable[..., Path]
    ) -> None:
        path = write_text_file("doc.yaml", "key: value\nlist:\n  - 1\n  - 2\n")
        output = convert(path, OutputFormat.YAML).unwrap()
        assert output == '{\n  "key": "value",\n  "list": [\n    1,\n    2\n  ]\n}'

    def test_output_reparses_to_equal_value(
        self, write_text_file: Callable[..., Path]
    ) -> None:
        source = (
            "name: FormatFlex\n"
            "version: 1.5\n"
            "enabled: true\n"
            "missing: null\n"
            "tags: [csv, yaml, 'naïve']\n"
            "nested:\n  depth:\n    - {a: 1}\n    - [x, y]\n"
        )
        path = write_text_file("doc.yaml", source)
        output = convert(path, OutputFormat.YAML).unwrap()
        assert json.loads(output) == yaml.safe_load(source)
        assert "naïve" in output

    def test_invalid_yaml(self, write_text_file: Callable[..., Path]) -> None:
        path = write_text_file("bad.yaml", "key: [unclosed\nother: 1\n")
        result = convert(path, OutputFormat.YAML)

        assert result.state == ConversionState.FAILED
        assert result.error is not None
        assert result.error.stage == ConversionStage.PARSE
        assert result.error.kind == ErrorKind.INVALID_SYNTAX

    def test_scalar_yaml_is_unsupported(
        self, write_text_file: Callable[..., Path]
    ) -> None:
        path = write_text_file("scalar.yaml", "just a string\n")
        result = convert(path, OutputFormat.YAML)

        assert result.error is not None
        assert result.error.stage == ConversionStage.PARSE
        assert result.error.kind == ErrorKind.UNSUPPORTED_SHAPE

    def test_nan_fails_serialization(
        self, write_text_file: Callable[..., Path]
    ) -> None:
        path = write_text_file("nan.yaml", "value: .nan\n")
        result = convert(path, OutputFormat.YAML)

        assert result.error is not None
        assert result.error.stage == ConversionStage.SERIALIZE
        assert result.error.kind == ErrorKind.SERIALIZATION_FAILURE
        assert result.error.error_code == ErrorCode.SERIALIZATION_FAILED

    def test_ignore_empty_prunes_values(
        self, write_text_file: Callable[..., Path]
    ) -> None:
        path = write_text_file("doc.yaml", "a: ''\nb: null\nc: [' x ', '']\n")
        config = ConversionConfig(trim=True, ignore_empty=True)
        output = convert(path, OutputFormat.YAML, config).unwrap()
        assert json.loads(output) == {"c": ["x"]}

    def test_keys_colliding_as_text_are_unsupported(
        self, write_text_file: Callable[..., Path]
    ) -> None:
        path = write_text_file("doc.yaml", '1: int key\n"1": string key\n')
        result = convert(path, OutputFormat.YAML)

        assert result.error is not None
        assert result.error.stage == ConversionStage.PARSE
        assert result.error.kind == ErrorKind.UNSUPPORTED_SHAPE


class TestSpreadsheetConversion:
    """Tests for the XLSX report pipeline."""

    def test_two_sheets_report(self, write_workbook: Callable[..., Path]) -> None:
        path = write_workbook({"Empty": [], "Data": [["1", "2"]]})
        output = convert(path, OutputFormat.XLSX).unwrap()
        assert output == "Worksheet: Empty\n\nWorksheet: Data\n1, 2\n\n"

    def test_typed_cells(self, write_workbook: Callable[..., Path]) -> None:
        path = write_workbook({"Data": [["Name", "Amount", "Paid"], ["Ada", 12.5, True]]})
        output = convert(path, OutputFormat.XLSX).unwrap()
        assert output == "Worksheet: Data\nName, Amount, Paid\nAda, 12.5, TRUE\n\n"

    def test_no_header_is_inert(self, write_workbook: Callable[..., Path]) -> None:
        path = write_workbook({"Data": [["a", "b"], ["c", "d"]]})
        plain = convert(path, OutputFormat.XLSX).unwrap()
        flagged = convert(path, OutputFormat.XLSX, ConversionConfig(no_header=True))
        assert flagged.unwrap() == plain

    def test_rows_missing_from_sheet_are_skipped(
        self, write_workbook: Callable[..., Path]
    ) -> None:
        path = write_workbook({"S": [[], [], ["x", "y"]]})
        assert convert(path, OutputFormat.XLSX).unwrap() == "Worksheet: S\nx, y\n\n"

    def test_workbook_without_xlsx_extension(
        self, write_workbook: Callable[..., Path]
    ) -> None:
        path = write_workbook({"Data": [["a", "b"]]}, name="upload.tmp")
        assert convert(path, OutputFormat.XLSX).unwrap() == "Worksheet: Data\na, b\n\n"

    def test_text_file_fails_at_read(
        self, write_text_file: Callable[..., Path]
    ) -> None:
        """The output format alone picks the reader; sources are not sniffed."""
        path = write_text_file("data.csv", "a,b\n")
        result = convert(path, OutputFormat.XLSX)

        assert result.error is not None
        assert result.error.stage == ConversionStage.READ
        assert result.error.kind == ErrorKind.CORRUPT_ARCHIVE


class TestFailures:
    """Tests for failure handling."""

    @pytest.mark.parametrize("output_format", list(OutputFormat))
    def test_missing_file_is_not_found(
        self, tmp_path: Path, output_format: OutputFormat
    ) -> None:
        result = convert(tmp_path / "does-not-exist", output_format)

        assert result.ok is False
        assert result.state == ConversionState.FAILED
        assert result.output is None
        assert result.error is not None
        assert result.error.stage == ConversionStage.READ
        assert result.error.kind == ErrorKind.NOT_FOUND
        assert result.error.error_code == ErrorCode.FILE_NOT_FOUND

    def test_unwrap_raises_error(self, tmp_path: Path) -> None:
        result = convert(tmp_path / "missing.txt", OutputFormat.TXT)
        with pytest.raises(ConversionError):
            result.unwrap()

    def test_unknown_format_name(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Unsupported output format"):
            convert(tmp_path / "x.txt", "pdf")

    def test_unexpected_error_maps_to_stage_kind(self, tmp_path: Path) -> None:
        """Unexpected exceptions become the default kind of their stage."""

        def explode(source: str, config: ConversionConfig) -> str:
            raise RuntimeError("boom")

        pipelines = dict(PIPELINES)
        pipelines[OutputFormat.TXT] = Pipeline(
            read=lambda path: "text",
            parse=explode,
            write=lambda model, config: model,
            description="test",
        )
        result = FormatConverter(pipelines).convert(tmp_path / "x", OutputFormat.TXT)

        assert result.error is not None
        assert result.error.stage == ConversionStage.PARSE
        assert result.error.kind == ErrorKind.INVALID_SYNTAX
        assert result.error.error_code == ErrorCode.INTERNAL_ERROR
        assert "RuntimeError: boom" in result.error.detail

    def test_unexpected_serialize_error(self, tmp_path: Path) -> None:
        def explode(model: str, config: ConversionConfig) -> str:
            raise TypeError("not writable")

        pipelines = dict(PIPELINES)
        pipelines[OutputFormat.CSV] = Pipeline(
            read=lambda path: "text",
            parse=lambda source, config: source,
            write=explode,
            description="test",
        )
        result = FormatConverter(pipelines).convert(tmp_path / "x", OutputFormat.CSV)

        assert result.error is not None
        assert result.error.stage == ConversionStage.SERIALIZE
        assert result.error.kind == ErrorKind.SERIALIZATION_FAILURE


class TestResourceScoping:
    """Tests that sources are released before convert returns."""

    def _pipelines(
        self, source: _TrackedSource, parse: Callable[..., Any]
    ) -> dict[OutputFormat, Pipeline]:
        pipelines = dict(PIPELINES)
        pipelines[OutputFormat.XLSX] = Pipeline(
            read=lambda path: source,
            parse=parse,
            write=lambda model, config: "report",
            description="test",
        )
        return pipelines

    def test_source_closed_on_success(self, tmp_path: Path) -> None:
        source = _TrackedSource()
        converter = FormatConverter(
            self._pipelines(source, lambda src, config: "model")
        )

        result = converter.convert(tmp_path / "x.xlsx", OutputFormat.XLSX)

        assert result.unwrap() == "report"
        assert source.closed is True

    def test_source_closed_on_failure(self, tmp_path: Path) -> None:
        def explode(src: _TrackedSource, config: ConversionConfig) -> str:
            raise ValueError("bad sheet table")

        source = _TrackedSource()
        result = FormatConverter(self._pipelines(source, explode)).convert(
            tmp_path / "x.xlsx", OutputFormat.XLSX
        )

        assert result.ok is False
        assert source.closed is True


class TestDeterminism:
    """Tests for repeated and concurrent conversions."""

    def test_converting_twice_is_identical(
        self, write_workbook: Callable[..., Path]
    ) -> None:
        path = write_workbook({"A": [["x", 1]], "B": [["y", 2.5]]})
        assert convert(path, "xlsx").unwrap() == convert(path, "xlsx").unwrap()

    def test_concurrent_conversions(
        self,
        write_text_file: Callable[..., Path],
        write_workbook: Callable[..., Path],
    ) -> None:
        csv_path = write_text_file("data.csv", "a,b\nc,d\n")
        yaml_path = write_text_file("doc.yaml", "k: v\n")
        xlsx_path = write_workbook({"S": [["1", "2"]]})
        jobs = [
            (csv_path, OutputFormat.CSV, "a,b\nc,d"),
            (yaml_path, OutputFormat.YAML, '{\n  "k": "v"\n}'),
            (xlsx_path, OutputFormat.XLSX, "Worksheet: S\n1, 2\n\n"),
        ] * 4
        converter = FormatConverter()

        with ThreadPoolExecutor(max_workers=6) as pool:
            results = list(
                pool.map(lambda job: converter.convert(job[0], job[1]), jobs)
            )

        assert [r.unwrap() for r in results] == [expected for _, _, expected in jobs]


class TestConversionResult:
    """Tests for ConversionResult."""

    def test_success_to_dict(self) -> None:
        result = ConversionResult(
            output_format=OutputFormat.TXT,
            state=ConversionState.DONE,
            output="a",
        )
        data = result.to_dict()
        assert data["ok"] is True
        assert data["output"] == "a"
        assert data["state"] == "done"
        assert "error" not in data

    def test_failure_to_dict(self, tmp_path: Path) -> None:
        data = convert(tmp_path / "missing.csv", OutputFormat.CSV).to_dict()
        assert data["ok"] is False
        assert data["state"] == "failed"
        assert data["error"]["kind"] == "NotFound"
        assert data["error"]["stage"] == "read"
