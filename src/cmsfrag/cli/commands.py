"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from cmsfrag.config import Settings, load_config
from cmsfrag.core.links import TemplateLinkResolver
from cmsfrag.core.pipeline import run_inspect, run_render
from cmsfrag.core.utils.logs import configure_logging


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling, then set up logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    configure_logging(settings.log_level)
    return settings


def render_cmd(
    path: Annotated[str, typer.Argument(help="JSON file or directory of documents")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    template: Annotated[Optional[str], typer.Option("--link-template", help="Document link URL template, e.g. '/{type}/{id}'")] = None,
    field: Annotated[Optional[str], typer.Option("--field", help="Render only this 'type.field'")] = None,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR")] = None,
    ):
    """Render every document to <out-dir>/<id>.html."""
    settings = _settings(overrides={"output_dir": out, "link_template": template, "log_level": log_level})
    output_dir = Path(settings.output_dir)
    resolver = TemplateLinkResolver(settings.link_template)

    try:
        results = run_render(path, resolver, output_dir, field, settings.wrap_sections)
    except RuntimeError as e:
        _fail(str(e))
    if not results:
        typer.echo(f"No documents found in {path}.")
        raise typer.Exit(1)

    for doc_id, html_path in results:
        typer.echo(f"  {doc_id} -> {html_path}")
    typer.echo(f"Rendered {len(results)} document(s) to {output_dir}/")


def inspect_cmd(
    path: Annotated[str, typer.Argument(help="JSON file or directory of documents")],
    ):
    """List each document's fields and their fragment kinds."""
    _settings()
    try:
        results = run_inspect(path)
    except RuntimeError as e:
        _fail(str(e))
    if not results:
        typer.echo(f"No documents found in {path}.")
        raise typer.Exit(1)

    for doc_id, fields in results:
        typer.echo(doc_id)
        for name, kind in fields:
            typer.echo(f"  {name}: {kind}")
