"""Console rendering for wsops commands (rich tables, questionary prompts)."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import questionary
from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from wsops.cli.common.tui_style import QUESTIONARY_STYLE_DELETE

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
        "drift": "bold magenta",
    }
)

console = Console(theme=_THEME)

_GLYPHS = {"info": ("title", "›"), "ok": ("ok", "✓"), "warn": ("warn", "⚠"), "err": ("err", "✗")}


def _label(value: Any) -> str:
    """Render enum members by value and missing values as empty strings."""
    if value is None:
        return ""
    return str(getattr(value, "value", value))


@dataclass(frozen=True)
class Out:
    """Rendering helpers shared by every command."""

    prompt_prefix: str = "[WSOPS]"

    def _line(self, kind: str, msg: str) -> None:
        style, glyph = _GLYPHS[kind]
        console.print(f"[{style}]{glyph}[/] {msg}")

    def info(self, msg: str) -> None:
        self._line("info", msg)

    def success(self, msg: str) -> None:
        self._line("ok", msg)

    def warn(self, msg: str) -> None:
        self._line("warn", msg)

    def error(self, msg: str) -> None:
        self._line("err", msg)

    def header(self, title: str) -> None:
        console.print(f"[title]{title}[/]")

    @contextmanager
    def status(self, msg: str):
        """Spin while a remote call (and its retries) is in flight."""
        with console.status(msg, spinner="dots"):
            yield

    def kv(self, items: Mapping[str, Any]) -> None:
        width = max((len(k) for k in items), default=0)
        for key, value in items.items():
            console.print(f"[meta]{key:<{width}}[/]  {value}")

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """
        Ask a yes/no question before a destructive action.

        Returns:
            True only if the user explicitly answered yes.
        """
        question = questionary.confirm(
            f"{self.prompt_prefix} {message}",
            default=default,
            style=QUESTIONARY_STYLE_DELETE,
            qmark="!",
        )
        return question.ask() is True

    def objects_table(self, objects: Iterable[Any], title: str = "Objects") -> None:
        """Render ObjectStatus rows (id, type, path, language)."""
        table = Table(title=title, header_style="title")
        table.add_column("Object ID", style="ok", no_wrap=True, justify="right")
        table.add_column("Type", style="meta")
        table.add_column("Path", overflow="fold")
        table.add_column("Language", style="meta")

        for obj in objects:
            table.add_row(
                str(obj.object_id),
                _label(obj.object_type),
                obj.path,
                _label(obj.language),
            )
        console.print(table)

    def notebook_state(self, state: Any) -> None:
        """Render a NotebookState; `fingerprint` is the reported content."""
        self.kv(
            {
                "id": state.id,
                "path": state.path,
                "object_id": state.object_id,
                "type": _label(state.object_type),
                "language": _label(state.language),
                "format": _label(state.format),
                "fingerprint": state.content,
            }
        )

    def drift_table(self, drift: Iterable[str], title: str = "Drift") -> None:
        table = Table(title=title, header_style="title")
        table.add_column("Drifted attribute", style="drift")
        for name in drift:
            table.add_row(name)
        console.print(table)


out = Out()
