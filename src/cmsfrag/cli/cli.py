"""CLI entrypoint: Typer app definition and command registration"""

import typer

from cmsfrag.cli.commands import inspect_cmd, render_cmd


app = typer.Typer(name="cmsfrag", no_args_is_help=True, help="Headless-CMS document fragments to HTML")

app.command(name="render")(render_cmd)
app.command(name="inspect")(inspect_cmd)
