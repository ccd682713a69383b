"""Command-line interface for FormatFlex."""

from pathlib import Path

import click
from pydantic import ValidationError

from formatflex.config import Settings, validate_settings_on_startup
from formatflex.models import FORMAT_FLAGS, ConversionConfig, OutputFormat
from formatflex.services.converter import FormatConverter, describe_pipelines
from formatflex.utils.exceptions import ErrorCode, FormatFlexError
from formatflex.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

FORMAT_CHOICES = [fmt.value.lower() for fmt in OutputFormat]


def load_settings() -> Settings:
    """Load shell settings, reporting invalid values as a configuration error."""
    try:
        return Settings()
    except ValidationError as e:
        raise FormatFlexError(
            f"Invalid configuration: {e.error_count()} error(s)",
            ErrorCode.CONFIGURATION_ERROR,
            {"errors": [str(err["msg"]) for err in e.errors()]},
        ) from e


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """FormatFlex - convert data files between formats."""
    try:
        settings = load_settings()
    except FormatFlexError as e:
        click.echo(f"Error {e}: {'; '.join(e.details['errors'])}", err=True)
        ctx.exit(1)

    if debug:
        settings = settings.model_copy(update={"debug": True})
    configure_logging(level=settings.log_level_int)
    validate_settings_on_startup(settings)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@click.argument("input_file", type=click.Path(path_type=Path))
@click.option(
    "--to",
    "output_format",
    type=click.Choice(FORMAT_CHOICES, case_sensitive=False),
    default=None,
    help="Output format (defaults to FORMATFLEX_DEFAULT_OUTPUT_FORMAT)",
)
@click.option("--trim", is_flag=True, help="Strip whitespace around each field")
@click.option("--parse-types", is_flag=True, help="Reserved type coercion (no-op)")
@click.option("--ignore-empty", is_flag=True, help="Drop empty fields and rows")
@click.option(
    "--no-header", is_flag=True, help="TXT/CSV: join rows with ',' on one line"
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the result to a file instead of stdout",
)
@click.pass_context
def convert(
    ctx: click.Context,
    input_file: Path,
    output_format: str | None,
    trim: bool,
    parse_types: bool,
    ignore_empty: bool,
    no_header: bool,
    output: Path | None,
) -> None:
    """Convert INPUT_FILE to the requested format."""
    settings: Settings = ctx.obj["settings"]
    fmt = (
        OutputFormat.parse(output_format)
        if output_format
        else settings.default_output_format
    )
    config = ConversionConfig(
        trim=trim,
        parse_types=parse_types,
        ignore_empty=ignore_empty,
        no_header=no_header,
    )

    result = FormatConverter().convert(input_file, fmt, config)

    if result.error is not None:
        error = result.error
        click.echo(
            f"Error [{error.error_code.value}] ({error.stage.value}): {error.detail}",
            err=True,
        )
        if settings.debug:
            logger.debug("Conversion error details", **error.to_dict())
        ctx.exit(1)

    text = result.unwrap()
    if output is None:
        click.echo(text)
        return

    try:
        output.write_text(text, encoding=settings.output_encoding)
    except (OSError, UnicodeEncodeError) as e:
        click.echo(f"Error: failed to write {output}: {e}", err=True)
        ctx.exit(1)
    click.echo(f"Wrote {fmt.value} output to {output}", err=True)


@cli.command()
def formats() -> None:
    """List output formats and the flags each one honours."""
    descriptions = describe_pipelines()
    for fmt in OutputFormat:
        flags = ", ".join(f"--{flag.replace('_', '-')}" for flag in FORMAT_FLAGS[fmt])
        click.echo(f"{fmt.value.lower():<5} {descriptions[fmt]}")
        click.echo(f"      flags: {flags}")


def main() -> None:
    """Run the FormatFlex command line."""
    cli(obj={})


if __name__ == "__main__":
    main()
