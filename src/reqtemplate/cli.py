"""
reqtemplate command line.

Commands:
- inspect: show how every field of a template is resolved
- eval: resolve a template against a JSON context and print the request
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from reqtemplate._version import get_version
from reqtemplate.core.errors import ReqTemplateError
from reqtemplate.core.settings import CompilerSettings, load_settings
from reqtemplate.core.spec_loader import load_templates
from reqtemplate.core.template import RequestTemplate

console = Console()

app = typer.Typer(
    help="Compile and evaluate declarative request templates",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"reqtemplate {get_version()}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Path | None = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="TOML file with a [compiler] table",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log compile and evaluation decisions",
    ),
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version",
    ),
) -> None:
    """reqtemplate main callback for global options."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        ctx.obj = load_settings(config)
    except ReqTemplateError as e:
        typer.echo(f"Error loading settings: {e}", err=True)
        raise typer.Exit(code=1)


def _load(spec_file: Path, settings: CompilerSettings) -> dict[str, RequestTemplate]:
    try:
        return load_templates(spec_file, settings=settings)
    except ReqTemplateError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


def _select(templates: dict[str, RequestTemplate], name: str | None) -> dict[str, RequestTemplate]:
    if name is None:
        return templates
    if name not in templates:
        typer.echo(f"No template named '{name}'", err=True)
        if templates:
            typer.echo(f"Available: {', '.join(templates)}", err=True)
        raise typer.Exit(code=1)
    return {name: templates[name]}


def _to_json(value: Any) -> str:
    # URI values render as their string form
    return json.dumps(value, indent=2, default=str)


@app.command(name="inspect")
def inspect_command(
    ctx: typer.Context,
    spec_file: Path = typer.Argument(..., help="YAML template document"),  # noqa: B008
    template: str | None = typer.Option(
        None,
        "--template",
        "-t",
        help="Only this template",
    ),
) -> None:
    """Show how every field of the templates is resolved."""
    templates = _select(_load(spec_file, ctx.obj or CompilerSettings()), template)
    if not templates:
        console.print("[dim]No templates found.[/dim]")
        return

    for name, compiled in templates.items():
        table = Table(title=name)
        table.add_column("Field")
        table.add_column("Kind")
        table.add_column("Source", style="dim")

        for field in compiled.fields:
            kind = field.kind.value
            if field.dotted_path == "uri" and compiled.uri_strategy:
                kind = f"{kind} ({compiled.uri_strategy.value})"
            table.add_row(field.dotted_path, kind, repr(field.source))

        console.print(table)


@app.command(name="eval")
def eval_command(
    ctx: typer.Context,
    spec_file: Path = typer.Argument(..., help="YAML template document"),  # noqa: B008
    context_file: Path = typer.Option(  # noqa: B008
        ...,
        "--context",
        help="JSON file with the evaluation context",
    ),
    template: str | None = typer.Option(
        None,
        "--template",
        "-t",
        help="Template to evaluate (required when the document has several)",
    ),
) -> None:
    """Resolve a template against a context and print the request as JSON."""
    templates = _select(_load(spec_file, ctx.obj or CompilerSettings()), template)
    if len(templates) != 1:
        typer.echo(
            f"Document has {len(templates)} templates, pick one with --template",
            err=True,
        )
        if templates:
            typer.echo(f"Available: {', '.join(templates)}", err=True)
        raise typer.Exit(code=1)

    try:
        context = json.loads(context_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        typer.echo(f"Error reading context: {e}", err=True)
        raise typer.Exit(code=1)

    (compiled,) = templates.values()
    try:
        resolved = compiled.eval(context)
    except ReqTemplateError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(_to_json(resolved))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
