"""Common CLI options for the CLI."""

import typer

from wsops.core.models import ExportFormat

ProfileOpt = typer.Option(
    None,
    "--profile",
    "-p",
    help="Databricks CLI profile (from ~/.databrickscfg)",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Log remote calls and retries",
)

FormatOpt = typer.Option(
    ExportFormat.SOURCE,
    "--format",
    "-f",
    case_sensitive=False,
    help="Notebook export format",
)

RecursiveOpt = typer.Option(
    False,
    "--recursive",
    "-r",
    help="Expand directories into their contents",
)

KindOpt = typer.Option(
    [],
    "--kind",
    help="Only show objects of this type (NOTEBOOK, FILE, ...). This is reusable.",
    show_default=False,
)

MkdirsOpt = typer.Option(
    False,
    "--mkdirs",
    help="Create missing parent directories before importing",
)

ConfirmOpt = typer.Option(
    True,
    "--confirm/--no-confirm",
    help="Ask for confirmation before deleting",
)

DryRunOpt = typer.Option(
    False,
    "--dry-run",
    help="Show what would be deleted, but don't delete anything",
)
