from typing import Optional

import typer


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import schema_gate

        typer.echo(f"schema-gate version: {schema_gate.__version__}")
        raise typer.Exit()


app = typer.Typer(name="schema-gate")


@app.callback()
def app_callback(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """schema-gate - publish checks for federated GraphQL schemas."""

    # Run initialization for every command unless --version was specified
    if not version and ctx.invoked_subcommand is not None:
        from schema_gate.config import init_cli_logging

        init_cli_logging()
