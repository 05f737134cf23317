"""Ways a wsops command ends.

Exit codes: 0 success (or nothing to do), 1 remote failure or drift,
2 invalid local input (bad path, undecodable content).
"""

from __future__ import annotations

from typing import Callable, NoReturn

import typer

from wsops.cli.common.output import out


def _leave(printer: Callable[[str], None], msg: str | None, code: int) -> NoReturn:
    if msg:
        printer(msg)
    raise typer.Exit(code)


def ok_exit(msg: str | None = None) -> NoReturn:
    _leave(out.info, msg, 0)


def die(msg: str, code: int = 1) -> NoReturn:
    _leave(out.error, msg, code)


def warn_exit(msg: str, code: int = 0) -> NoReturn:
    _leave(out.warn, msg, code)


def exit_from_exc(exc: Exception, *, message: str, code: int = 1) -> NoReturn:
    """Print message and exit, keeping exc as the cause for tracebacks."""
    out.error(message)
    raise typer.Exit(code) from exc
