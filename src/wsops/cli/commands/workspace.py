"""Commands for managing workspace notebooks and directories."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from wsops.cli.common.context import WorkspaceAppContext, build_workspace_context
from wsops.cli.common.exits import exit_from_exc, ok_exit, warn_exit
from wsops.cli.common.options import (
    ConfirmOpt,
    DryRunOpt,
    FormatOpt,
    KindOpt,
    MkdirsOpt,
    ProfileOpt,
    RecursiveOpt,
)
from wsops.cli.common.output import out
from wsops.core.errors import FingerprintError, InvalidPath, RemoteError
from wsops.core.fingerprint import encode_file
from wsops.core.listing import filter_by_kind, list_objects
from wsops.core.models import DesiredNotebook, ExportFormat, Language
from wsops.core.notebooks import (
    create_notebook,
    delete_notebook,
    notebook_drift,
    read_notebook,
)

ws_app = typer.Typer(
    help="Workspace notebook operations.",
    no_args_is_help=False,
    invoke_without_command=True,
)

LanguageOpt = typer.Option(
    ...,
    "--language",
    "-l",
    case_sensitive=False,
    help="Notebook language",
)


@ws_app.callback()
def _init(ctx: typer.Context, profile: str | None = ProfileOpt):
    """Initialize workspace context."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)
    ctx.obj = build_workspace_context(profile)


def _read_local(file: Path) -> str:
    """Base64-encode a local notebook file or exit with an input error."""
    try:
        return encode_file(file)
    except OSError as exc:
        exit_from_exc(exc, message=f"Cannot read {file}: {exc}", code=2)


def _fail(exc: Exception) -> NoReturn:
    """Translate engine errors into CLI exits."""
    if isinstance(exc, (InvalidPath, FingerprintError)):
        exit_from_exc(exc, message=str(exc), code=2)
    exit_from_exc(exc, message=str(exc), code=1)


@ws_app.command("ls")
def ls(
    ctx: typer.Context,
    path: str = typer.Argument("/", help="Workspace directory to list"),
    recursive: bool = RecursiveOpt,
    kind: list[str] = KindOpt,
):
    """List workspace objects."""
    appctx: WorkspaceAppContext = ctx.obj

    try:
        with out.status("Listing workspace..."):
            objects = list_objects(appctx.adapter, path, recursive=recursive)
    except (InvalidPath, RemoteError) as exc:
        _fail(exc)

    objects = filter_by_kind(objects, kind)
    if not objects:
        warn_exit("No objects found", code=0)

    out.objects_table(objects, title=path)


@ws_app.command("status")
def status(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Workspace notebook path"),
    fmt: ExportFormat = FormatOpt,
):
    """Show the reported state of a notebook."""
    appctx: WorkspaceAppContext = ctx.obj

    try:
        with out.status("Reading notebook..."):
            state = read_notebook(appctx.adapter, path, fmt)
    except (InvalidPath, FingerprintError, RemoteError) as exc:
        _fail(exc)

    if state is None:
        warn_exit(f"{path} is absent", code=0)

    out.header(path)
    out.notebook_state(state)


@ws_app.command("push")
def push(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Local notebook"),
    path: str = typer.Argument(..., help="Target workspace path"),
    language: Language = LanguageOpt,
    fmt: ExportFormat = FormatOpt,
    mkdirs: bool = MkdirsOpt,
):
    """Create or overwrite a notebook from a local file."""
    appctx: WorkspaceAppContext = ctx.obj
    desired = DesiredNotebook(
        path=path,
        content=_read_local(file),
        language=language,
        format=fmt,
        mkdirs=mkdirs,
    )

    try:
        with out.status("Importing notebook..."):
            state = create_notebook(appctx.adapter, desired)
    except (InvalidPath, FingerprintError, RemoteError) as exc:
        _fail(exc)

    out.success(f"Imported {path}")
    out.notebook_state(state)


@ws_app.command("diff")
def diff(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Local notebook"),
    path: str = typer.Argument(..., help="Workspace notebook path"),
    language: Language = LanguageOpt,
    fmt: ExportFormat = FormatOpt,
):
    """Compare a local notebook with the workspace (exit 1 on drift)."""
    appctx: WorkspaceAppContext = ctx.obj
    desired = DesiredNotebook(
        path=path, content=_read_local(file), language=language, format=fmt
    )

    try:
        with out.status("Reading notebook..."):
            state = read_notebook(appctx.adapter, path, fmt)
        drift = notebook_drift(desired, state)
    except (InvalidPath, FingerprintError, RemoteError) as exc:
        _fail(exc)

    if not drift:
        ok_exit(f"{path} is in sync")

    out.drift_table(drift, title=f"Drift for {path}")
    raise typer.Exit(1)


@ws_app.command("rm")
def rm(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Workspace path to delete"),
    recursive: bool = typer.Option(
        True, "--recursive/--no-recursive", help="Delete directory contents too"
    ),
    confirm: bool = ConfirmOpt,
    dry_run: bool = DryRunOpt,
):
    """Delete a notebook or directory."""
    appctx: WorkspaceAppContext = ctx.obj

    if dry_run:
        warn_exit(f"Dry-run enabled: {path} was not deleted", code=0)

    if confirm and not out.confirm(f"Delete {path}?"):
        ok_exit("Cancelled")

    try:
        with out.status("Deleting..."):
            delete_notebook(appctx.adapter, path, recursive=recursive)
    except (InvalidPath, RemoteError) as exc:
        _fail(exc)

    out.success(f"Deleted {path}")
