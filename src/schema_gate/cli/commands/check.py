"""Schema check CLI command for schema-gate.

`schema-gate check` runs the publish checks against local SDL files:

  schema-gate check after/users.graphql after/posts.graphql \
      --before before/users.graphql --before before/posts.graphql

The first AFTER file is the subschema being published. Its published version
is the BEFORE file with the same name. With no BEFORE files the target is
treated as having no schema yet.
"""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from schema_gate.cli.app import app
from schema_gate.container import Container
from schema_gate.errors import SchemaParseError
from schema_gate.schema.changes import Criticality
from schema_gate.schema.helper import SchemaHelper
from schema_gate.schema.objects import SchemaObject, TargetSelector
from schema_gate.schema.validator import ValidationResult
from schema_gate.schemas.report import ValidationReport

console = Console()

CRITICALITY_STYLES = {
    Criticality.BREAKING: "red",
    Criticality.DANGEROUS: "yellow",
    Criticality.SAFE: "green",
}


def _load_schema(helper: SchemaHelper, path: Path) -> SchemaObject:
    """Read and parse one SDL file; the file stem is used as the source name."""
    return helper.create_schema_object(path.read_text(encoding="utf-8"), source=path.stem)


async def _run_check(
    after_files: list[Path],
    before_files: list[Path],
    base_file: Optional[Path],
    accept_breaking_changes: Optional[bool],
    selector: TargetSelector,
) -> ValidationResult:
    container = Container.create()
    helper = container.helper

    after = [_load_schema(helper, path) for path in after_files]
    before = [_load_schema(helper, path) for path in before_files]
    incoming = after[0]
    existing = next((schema for schema in before if schema.source == incoming.source), None)
    base_schema = base_file.read_text(encoding="utf-8") if base_file else None

    if accept_breaking_changes is None:
        accept_breaking_changes = container.config.accept_breaking_changes

    return await container.validator.validate(
        orchestrator=container.orchestrator,
        selector=selector,
        incoming=incoming,
        existing=existing,
        is_initial=not before,
        before=before,
        after=after,
        base_schema=base_schema,
        accept_breaking_changes=accept_breaking_changes,
        project=container.config.project(),
    )


def _print_result(result: ValidationResult) -> None:
    if result.changes:
        table = Table(title="Schema Changes")
        table.add_column("Criticality", justify="center")
        table.add_column("Change")
        table.add_column("Path", style="cyan")

        for change in result.changes:
            style = CRITICALITY_STYLES[change.criticality]
            table.add_row(
                f"[{style}]{change.criticality.value}[/{style}]",
                escape(change.message),
                change.coordinate or "",
            )
        console.print(table)
    else:
        console.print("No changes detected.")

    for error in result.errors:
        console.print(f"[red]✗ {escape(error.message)}[/red]")

    if result.valid:
        console.print("\n[green]✓ Schema is valid[/green]")
    else:
        console.print(f"\n[red]Schema is invalid: {len(result.errors)} errors[/red]")


@app.command()
def check(
    after: Annotated[
        list[Path],
        typer.Argument(help="Subschema files after the change; the first one is published"),
    ],
    before: Annotated[
        Optional[list[Path]],
        typer.Option("--before", "-b", help="Subschema files as currently published"),
    ] = None,
    base: Annotated[
        Optional[Path],
        typer.Option("--base", help="Shared SDL fragment merged into the first subschema"),
    ] = None,
    accept_breaking_changes: Annotated[
        Optional[bool],
        typer.Option(
            "--accept-breaking-changes/--reject-breaking-changes",
            help="Do not fail on breaking changes (default from config)",
        ),
    ] = None,
    organization: str = typer.Option("local", help="Organization of the target"),
    project: str = typer.Option("local", help="Project of the target"),
    target: str = typer.Option("default", help="Target the schema is published to"),
    format: str = typer.Option("text", "--format", help="Output format: text or json"),
):
    """Check whether a schema revision composes and is safe to publish.

    Exits with code 1 when the revision is invalid.
    """
    if format not in ("text", "json"):
        console.print(f"[red]Error: unknown format '{format}', use text or json[/red]")
        raise typer.Exit(1)

    selector = TargetSelector(organization=organization, project=project, target=target)
    try:
        result = asyncio.run(
            _run_check(after, before or [], base, accept_breaking_changes, selector)
        )
    except (SchemaParseError, OSError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        logger.error(f"Error during schema check: {e}")
        typer.echo(f"Error during schema check: {e}", err=True)
        raise typer.Exit(1)

    if format == "json":
        typer.echo(ValidationReport.from_result(result).model_dump_json(indent=2))
    else:
        _print_result(result)

    if not result.valid:
        raise typer.Exit(1)
