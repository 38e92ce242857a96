"""Main CLI entry point for contract-kit.

Converts, inspects and validates data contracts from the command line.
"""

from pathlib import Path
from typing import Any
import json
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from contract_kit import __version__
from contract_kit.convert import ConversionOptions, NestedObjectStrategy, UniversalConverter, load_options
from contract_kit.convert.report import ConversionReport
from contract_kit.logging_config import setup_logging
from contract_kit.models.tag import parse_tag, serialize_tag
from contract_kit.registry import get_global_registry
from contract_kit.schemas import SchemaFormat, SchemaParser
from contract_kit.schemas.parser import EXTENSION_FORMATS
from contract_kit.validation import validate_contract_file

console = Console()

FORMAT_CHOICES = [f.value for f in SchemaFormat]
TARGET_CHOICES = [f.value for f in get_global_registry().list_exporters()]


@click.group()
@click.version_option(version=__version__, prog_name="contract-kit")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging and tracebacks")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """contract-kit - Convert and validate data contracts.

    Imports SQL DDL, Avro, Protobuf, JSON Schema, OpenAPI and ODCS documents
    and converts them to ODCS data contracts or to each other.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(debug=verbose)


def _source_format(path: str, source_format: str | None) -> str | None:
    """Explicit format, else the file extension's, else None (auto-detect)."""
    if source_format:
        return source_format
    fmt = EXTENSION_FORMATS.get(Path(path).suffix.lower())
    return fmt.value if fmt else None


def _fail(ctx: click.Context, e: Exception) -> None:
    console.print(f"[red]Error: {escape(str(e))}[/red]")
    if ctx.obj.get("verbose", False):
        import traceback
        console.print(traceback.format_exc())
    sys.exit(1)


@cli.command()
@click.argument("source", type=click.Path(exists=True))
@click.option("--from", "-f", "source_format", type=click.Choice(FORMAT_CHOICES), help="Source format (auto-detected if omitted)")
@click.option("--to", "-t", "target_format", type=click.Choice(TARGET_CHOICES), default="odcs", help="Target format")
@click.option(
    "--strategy", "-s",
    type=click.Choice([s.value for s in NestedObjectStrategy]),
    help="Nested object strategy (overrides the options file)",
)
@click.option("--options", "options_path", type=click.Path(exists=True), help="Conversion options YAML file")
@click.option("--dialect", default="postgres", help="SQL dialect for --to sql")
@click.option("--syntax", type=click.Choice(["proto2", "proto3"]), default="proto3", help="Syntax for --to protobuf")
@click.option("--output", "-o", type=click.Path(), help="Output file (stdout if not specified)")
@click.option("--report", is_flag=True, help="Print the conversion report")
@click.pass_context
def convert(
    ctx: click.Context,
    source: str,
    source_format: str | None,
    target_format: str,
    strategy: str | None,
    options_path: str | None,
    dialect: str,
    syntax: str,
    output: str | None,
    report: bool,
) -> None:
    """Convert a schema document to another format.

    SOURCE is the path to the document to convert.

    \b
    Examples:
      # SQL DDL to an ODCS contract
      contract-kit convert users.sql -o users.odcs.yaml

      # Avro to JSON Schema, nested records flattened
      contract-kit convert events.avsc --to jsonschema --strategy flatten

      # OpenAPI to MySQL DDL with the mapping report
      contract-kit convert api.yaml --to sql --dialect mysql --report
    """
    try:
        options = load_options(options_path) if options_path else ConversionOptions()
        if strategy:
            options = options.model_copy(update={"nested_object_strategy": NestedObjectStrategy(strategy)})

        content = Path(source).read_text()
        converter = UniversalConverter(options)
        result = converter.convert(_source_format(source, source_format), content)

        exporter_options: dict[str, Any] = {}
        if target_format == SchemaFormat.SQL.value:
            exporter_options["dialect"] = dialect
        elif target_format == SchemaFormat.PROTOBUF.value:
            exporter_options["syntax"] = syntax
        rendered = get_global_registry().get_exporter(target_format, **exporter_options).render(result.document)

        if output:
            output_path = Path(output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(rendered)
            console.print(Panel.fit(
                f"[green]Converted {result.report.source_format} to {target_format}[/green]\n\n"
                f"[cyan]Source:[/cyan] {source}\n"
                f"[cyan]Objects:[/cyan] {len(result.document.schema_objects)}\n"
                f"[cyan]Fields:[/cyan] {result.report.field_count}\n"
                f"[cyan]Heuristic:[/cyan] {result.report.heuristic_count}\n"
                f"[cyan]Output:[/cyan] {output}",
                title="Conversion Complete",
            ))
        else:
            click.echo(rendered, nl=False)

        if report:
            _print_report(result.report)

    except Exception as e:
        _fail(ctx, e)


@cli.command()
@click.argument("source", type=click.Path(exists=True))
@click.option("--from", "-f", "source_format", type=click.Choice(FORMAT_CHOICES), help="Source format (auto-detected if omitted)")
@click.option("--json", "as_json", is_flag=True, help="Print the names as a JSON list")
@click.pass_context
def list_entities(ctx: click.Context, source: str, source_format: str | None, as_json: bool) -> None:
    """List the entities (tables, records, messages, schemas) of a document.

    SOURCE is the path to the document.
    """
    try:
        parser = SchemaParser.from_file(source, _source_format(source, source_format))
        entities = parser.list_entities()
    except Exception as e:
        _fail(ctx, e)
        return

    if as_json:
        click.echo(json.dumps(entities))
        return

    if not entities:
        console.print("[yellow]No entities found[/yellow]")
        return

    table = Table(title=f"Entities ({parser.format.value})")
    table.add_column("#", justify="right")
    table.add_column("Name", style="cyan")
    for i, name in enumerate(entities, start=1):
        table.add_row(str(i), escape(name))
    console.print(table)


@cli.command()
@click.argument("contract", type=click.Path(exists=True))
@click.pass_context
def validate(ctx: click.Context, contract: str) -> None:
    """Validate an ODCS contract file.

    CONTRACT is the path to the ODCS YAML file.
    """
    try:
        result = validate_contract_file(contract)
    except Exception as e:
        _fail(ctx, e)
        return

    _print_validation_result(contract, result)
    if not result.valid:
        sys.exit(1)


@cli.command("parse-tag")
@click.argument("tags", nargs=-1, required=True)
@click.pass_context
def parse_tag_command(ctx: click.Context, tags: tuple[str, ...]) -> None:
    """Parse tags and show their form and canonical text.

    \b
    Examples:
      contract-kit parse-tag pii "owner:data-team" "regions:[eu, us]"
    """
    table = Table(title="Tags")
    table.add_column("Input")
    table.add_column("Kind", style="cyan")
    table.add_column("Canonical", style="green")

    try:
        for text in tags:
            tag = parse_tag(text)
            table.add_row(escape(text), tag.kind, escape(serialize_tag(tag)))
    except Exception as e:
        _fail(ctx, e)
        return

    console.print(table)


def _print_report(report: ConversionReport) -> None:
    """Print a conversion report."""
    table = Table(title=f"Conversion Report ({report.source_format}, {report.strategy})")
    table.add_column("Entity", style="cyan")
    table.add_column("Path")
    table.add_column("Source type")
    table.add_column("Logical type", style="green")
    table.add_column("Rule")
    table.add_column("Heuristic", justify="center")
    table.add_column("Detail", style="dim")

    for entry in report.entries:
        table.add_row(
            escape(entry.entity),
            escape(entry.path),
            escape(entry.source_type),
            entry.target_type or "-",
            entry.rule.value,
            "[yellow]yes[/yellow]" if entry.heuristic else "",
            escape(entry.detail or ""),
        )

    console.print(table)
    console.print(
        f"{report.field_count} fields, {report.heuristic_count} heuristic, "
        f"{len(report.unmapped)} unmapped, {len(report.dropped)} dropped"
    )
    if report.lifted_entities:
        console.print(f"Lifted entities: {', '.join(report.lifted_entities)}")


def _print_validation_result(name: str, result: Any) -> None:
    """Print validation results."""
    status = "[green]VALID[/green]" if result.valid else "[red]INVALID[/red]"
    console.print(f"\n{escape(name)}: {status}")

    for issue in result.issues:
        color = {
            "error": "red",
            "warning": "yellow",
            "info": "blue",
        }.get(issue.severity.value, "white")

        console.print(f"  [{color}]{issue.severity.value.upper()}[/{color}]: {escape(issue.message)}")
        if issue.path:
            console.print(f"    Path: {escape(issue.path)}")


if __name__ == "__main__":
    cli()
