"""CLI application for Databricks workspace notebooks."""

from pathlib import Path

import typer

from wsops.cli.commands.workspace import ws_app
from wsops.cli.common.exits import exit_from_exc
from wsops.cli.common.logs import configure_logging
from wsops.cli.common.options import FormatOpt, VerboseOpt
from wsops.cli.common.output import out
from wsops.core.errors import FingerprintError
from wsops.core.fingerprint import fingerprint_file
from wsops.core.models import ExportFormat

app = typer.Typer(
    help="wsops - Databricks workspace notebook tooling",
    no_args_is_help=True,
)

app.add_typer(ws_app, name="workspace", help="List / push / diff / delete notebooks.")


@app.callback()
def _main(verbose: bool = VerboseOpt):
    """Configure logging for every command."""
    configure_logging(verbose)


@app.command("fingerprint")
def fingerprint_cmd(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Local notebook"),
    fmt: ExportFormat = FormatOpt,
):
    """Print the content fingerprint of a local notebook file."""
    try:
        value = fingerprint_file(file, fmt)
    except FingerprintError as exc:
        exit_from_exc(exc, message=str(exc), code=2)
    out.kv({"file": file, "format": fmt.value, "fingerprint": value})


if __name__ == "__main__":
    app()
