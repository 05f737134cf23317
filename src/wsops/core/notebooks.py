"""Notebook lifecycle: create, read and delete a single workspace notebook.

Each operation is a synchronous sequence of remote calls with no state kept
between invocations. The workspace path doubles as the notebook's external
identifier. Reported content is always the fingerprint of what the
workspace actually holds, never of the input payload.
"""

from __future__ import annotations

import logging
from typing import Protocol

from wsops.core.errors import NotFound
from wsops.core.fingerprint import fingerprint
from wsops.core.models import (
    DesiredNotebook,
    ExportFormat,
    Language,
    NotebookState,
    ObjectStatus,
    parent_path,
    require_path,
)

logger = logging.getLogger(__name__)


class NotebooksAdapter(Protocol):
    """Interface for the workspace calls used by the notebook lifecycle."""

    def get_status(self, path: str) -> ObjectStatus:
        """Return metadata for a workspace path."""
        ...

    def mkdirs(self, path: str) -> None:
        """Create a directory and any missing parents."""
        ...

    def import_notebook(
        self,
        path: str,
        content: str,
        language: Language,
        fmt: ExportFormat,
        overwrite: bool,
    ) -> None:
        """Import base64 content at path."""
        ...

    def export(self, path: str, fmt: ExportFormat) -> str:
        """Export a notebook and return its base64 content."""
        ...

    def delete(self, path: str, recursive: bool) -> None:
        """Delete an object."""
        ...


def ensure_parent_directory(adapter: NotebooksAdapter, path: str) -> bool:
    """
    Create the parent directory of path unless it already exists.

    Returns:
        True if a mkdirs call was issued.
    """
    parent = parent_path(path)
    if parent == "/":
        return False
    try:
        if adapter.get_status(parent).is_directory:
            return False
    except NotFound:
        pass
    logger.debug("creating parent directory %s", parent)
    adapter.mkdirs(parent)
    return True


def create_notebook(adapter: NotebooksAdapter, desired: DesiredNotebook) -> NotebookState:
    """
    Create or overwrite a notebook and report what the workspace now holds.

    Import is an upsert: the overwrite flag sent to the workspace is always
    True regardless of `desired.overwrite`.

    Raises:
        InvalidPath: If the path is malformed (no remote call is made).
        RemoteError: If a directory, import or read-back call fails.
        NotFound: If the notebook disappeared before it could be read back.
    """
    require_path(desired.path)
    if desired.mkdirs:
        ensure_parent_directory(adapter, desired.path)

    adapter.import_notebook(
        desired.path,
        desired.content,
        desired.language,
        desired.format,
        overwrite=True,
    )
    logger.debug("imported %s as %s", desired.path, ExportFormat(desired.format).value)

    state = read_notebook(adapter, desired.path, desired.format)
    if state is None:
        raise NotFound("NOT_FOUND", f"{desired.path} not found after import", 404)
    return state


def read_notebook(
    adapter: NotebooksAdapter,
    path: str,
    fmt: ExportFormat = ExportFormat.SOURCE,
) -> NotebookState | None:
    """
    Read the current state of a notebook.

    Returns:
        The reported NotebookState, or None if the notebook is absent
        (deleted outside of the controller).

    Raises:
        InvalidPath: If the path is malformed.
        RemoteError: For any failure other than not-found; the caller keeps
            its last-known identifier.
        FingerprintError: If the exported content cannot be fingerprinted.
    """
    require_path(path)
    fmt = ExportFormat(fmt)
    try:
        content = adapter.export(path, fmt)
        status = adapter.get_status(path)
    except NotFound:
        logger.debug("%s is absent", path)
        return None

    return NotebookState(
        id=path,
        path=status.path or path,
        content=fingerprint(content, fmt),
        language=status.language,
        format=fmt,
        object_id=status.object_id,
        object_type=status.object_type,
    )


def delete_notebook(adapter: NotebooksAdapter, path: str, recursive: bool = True) -> None:
    """
    Delete a notebook; on success it is absent.

    Raises:
        InvalidPath: If the path is malformed.
        RemoteError: If the workspace rejects the delete.
    """
    require_path(path)
    adapter.delete(path, recursive)


def remove_declared(adapter: NotebooksAdapter, desired: DesiredNotebook) -> None:
    """Delete a declared notebook honoring its `recursive_delete` flag."""
    delete_notebook(adapter, desired.path, recursive=desired.recursive_delete)


def notebook_drift(desired: DesiredNotebook, state: NotebookState | None) -> list[str]:
    """
    Return the names of attributes where the workspace differs from desired.

    Content is compared by fingerprint in the desired format, so byte-different
    but equivalent DBC bundles do not count as drift.
    """
    if state is None:
        return ["absent"]

    drift: list[str] = []
    if fingerprint(desired.content, desired.format) != state.content:
        drift.append("content")
    if desired.path != state.path:
        drift.append("path")
    if _enum_value(desired.language) != _enum_value(state.language):
        drift.append("language")
    if _enum_value(desired.format) != _enum_value(state.format):
        drift.append("format")
    return drift


def in_sync(desired: DesiredNotebook, state: NotebookState | None) -> bool:
    """True if the reported state matches the desired notebook."""
    return not notebook_drift(desired, state)


def _enum_value(value: object) -> str:
    return str(getattr(value, "value", value) or "")
