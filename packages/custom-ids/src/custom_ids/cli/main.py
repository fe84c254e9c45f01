"""CLI commands for custom-ids."""

import json
import re
import sys
from typing import TextIO

import click

from custom_ids import IdGenerator, IdValidator, MalformedFormatError, parse_format
from custom_ids.document import hash_document, serialize_format
from custom_ids.segments import Segment


def _load_segments(format_file: TextIO) -> list[Segment]:
    try:
        return parse_format(format_file.read())
    except MalformedFormatError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _parse_last_values(values: tuple[str, ...]) -> dict[str, int]:
    last_values = {}
    for item in values:
        segment_id, sep, value = item.rpartition("=")
        if not sep or not re.fullmatch(r"-?[0-9]+", value):
            click.echo(f"Error: --last-value expects SEGMENT_ID=N, got {item!r}", err=True)
            sys.exit(1)
        last_values[segment_id] = int(value)
    return last_values


@click.group()
@click.version_option(package_name="stockroom")
def cli() -> None:
    """custom-ids - render and validate custom item id formats."""
    pass


@cli.command()
@click.argument("format_file", type=click.File("r"))
@click.option(
    "--last-value",
    "last_values",
    multiple=True,
    help="Last persisted counter value as SEGMENT_ID=N (repeatable)",
)
@click.option("--count", type=int, default=1, help="Number of ids to generate (default: 1)")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def generate(format_file: TextIO, last_values: tuple[str, ...], count: int, output_json: bool) -> None:
    """Generate id(s) from a format document (use - for stdin)."""
    segments = _load_segments(format_file)

    if count < 1:
        click.echo("Error: --count must be at least 1", err=True)
        sys.exit(1)

    generated = IdGenerator().generate_batch(segments, count, _parse_last_values(last_values))

    for result in generated:
        if output_json:
            click.echo(
                json.dumps(
                    {
                        "id": result.value,
                        "boundaries": result.boundaries_text,
                        "sequenceValues": result.sequence_values,
                    }
                )
            )
        else:
            click.echo(result.value)


@cli.command()
@click.argument("format_file", type=click.File("r"))
@click.argument("custom_id")
@click.option("--boundaries", help="Segment boundaries (e.g. 4,3) for a strict per-segment check")
@click.option("--quiet", "-q", is_flag=True, help="Only output result (0=valid, 1=invalid)")
def validate(format_file: TextIO, custom_id: str, boundaries: str | None, quiet: bool) -> None:
    """Validate an id against a format document."""
    segments = _load_segments(format_file)
    result = IdValidator().validate(custom_id, segments, boundaries)

    if quiet:
        sys.exit(0 if result.valid else 1)

    if result.valid:
        click.echo(f"✓ Valid id: {custom_id}")
        sys.exit(0)
    else:
        click.echo(f"✗ Invalid id: {result.error}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("format_file", type=click.File("r"))
def canonicalize(format_file: TextIO) -> None:
    """Print the canonical document and its content hash."""
    segments = _load_segments(format_file)

    if not segments:
        click.echo("(empty format)")
        return

    canonical = serialize_format(segments)
    click.echo(canonical)
    click.echo(f"sha256: {hash_document(canonical)}")


if __name__ == "__main__":
    cli()
