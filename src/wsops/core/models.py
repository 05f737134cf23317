"""Core domain models for workspace notebooks.

These models represent workspace objects and the desired/reported state of a
notebook in a simple, immutable form. They are intentionally free of
Databricks SDK types and UI/CLI concerns.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, TypeVar

from wsops.core.errors import InvalidPath


class ExportFormat(str, Enum):
    """
    Encodings in which notebook content is exchanged with the workspace.

    Values:
        SOURCE: Plain source text, language-tagged.
        HTML: Rendered HTML notebook.
        JUPYTER: Jupyter `.ipynb` JSON.
        DBC: Zip bundle with one JSON descriptor per notebook.
        R_MARKDOWN: R Markdown document.
    """

    SOURCE = "SOURCE"
    HTML = "HTML"
    JUPYTER = "JUPYTER"
    DBC = "DBC"
    R_MARKDOWN = "R_MARKDOWN"

    @property
    def is_bundle(self) -> bool:
        """True for archive formats whose packaging is not byte-stable."""
        return self is ExportFormat.DBC


class Language(str, Enum):
    """Source language attached to a notebook."""

    PYTHON = "PYTHON"
    SCALA = "SCALA"
    SQL = "SQL"
    R = "R"


class ObjectKind(str, Enum):
    """Object types reported by the workspace."""

    NOTEBOOK = "NOTEBOOK"
    DIRECTORY = "DIRECTORY"
    LIBRARY = "LIBRARY"
    FILE = "FILE"
    REPO = "REPO"
    DASHBOARD = "DASHBOARD"


_E = TypeVar("_E", bound=Enum)


def _coerce(enum_cls: type[_E], value: Any) -> _E | str | None:
    """Map a raw API value onto an enum member, keeping unknown values as-is."""
    if value is None or value == "":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return str(value)


def validate_path(path: str) -> list[str]:
    """Return every problem with a workspace path (empty list when valid)."""
    problems: list[str] = []
    if not path:
        problems.append("path must not be empty")
    if not path.startswith("/"):
        problems.append(f"path '{path}' must start with /")
    return problems


def require_path(path: str) -> str:
    """Return the path unchanged, or raise InvalidPath if it is malformed."""
    problems = validate_path(path)
    if problems:
        raise InvalidPath("; ".join(problems))
    return path


def parent_path(path: str) -> str:
    """Return the parent directory of a workspace path (`/` for top-level)."""
    parent = require_path(path).rstrip("/").rsplit("/", 1)[0]
    return parent or "/"


@dataclass(frozen=True)
class ObjectStatus:
    """
    Remote metadata for a workspace path.

    Attributes:
        object_id: Workspace-assigned identifier, immutable once assigned.
        object_type: ObjectKind, or the raw string for unknown kinds.
        path: Absolute workspace path.
        language: Language for notebooks, None for other kinds.
    """

    object_id: int
    object_type: ObjectKind | str | None
    path: str
    language: Language | str | None = None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "ObjectStatus":
        """Build a status from a get-status/list API object."""
        return cls(
            object_id=int(payload.get("object_id") or 0),
            object_type=_coerce(ObjectKind, payload.get("object_type")),
            path=str(payload.get("path") or ""),
            language=_coerce(Language, payload.get("language")),
        )

    @property
    def is_directory(self) -> bool:
        return self.object_type == ObjectKind.DIRECTORY


@dataclass(frozen=True)
class DesiredNotebook:
    """
    Declared state of a workspace notebook.

    Attributes:
        path: Absolute workspace path; becomes the external identifier.
        content: Base64-encoded notebook payload in `format`.
        language: Source language.
        format: Encoding of `content`.
        overwrite: Declared overwrite flag (import always overwrites).
        mkdirs: Create missing parent directories before import.
        recursive_delete: Delete recursively when the notebook is removed.
    """

    path: str
    content: str
    language: Language
    format: ExportFormat = ExportFormat.SOURCE
    overwrite: bool = True
    mkdirs: bool = False
    recursive_delete: bool = True


@dataclass(frozen=True)
class NotebookState:
    """
    Reported state of a notebook as it exists in the workspace.

    `content` holds the fingerprint of the remote payload, not the payload.
    """

    id: str
    path: str
    content: str
    language: Language | str | None
    format: ExportFormat
    object_id: int
    object_type: ObjectKind | str | None = ObjectKind.NOTEBOOK
