from __future__ import annotations

from wsops.core.models import ExportFormat, Language, ObjectStatus
from wsops.core.remote import RemoteCaller


class WorkspaceAdapter:
    """Adapter around the Databricks Workspace REST API (2.0)."""

    def __init__(self, caller: RemoteCaller) -> None:
        self.caller = caller

    def get_status(self, path: str) -> ObjectStatus:
        """Return metadata for a workspace path."""
        payload = self.caller.call("GET", "/workspace/get-status", query={"path": path})
        return ObjectStatus.from_api(payload)

    def list_children(self, path: str) -> list[ObjectStatus]:
        """Return the immediate children of a directory, in remote order."""
        payload = self.caller.call("GET", "/workspace/list", query={"path": path})
        return [ObjectStatus.from_api(o) for o in payload.get("objects") or []]

    def mkdirs(self, path: str) -> None:
        """Create a directory and any missing parents (no-op if it exists)."""
        self.caller.call("POST", "/workspace/mkdirs", body={"path": path})

    def import_notebook(
        self,
        path: str,
        content: str,
        language: Language,
        fmt: ExportFormat,
        overwrite: bool,
    ) -> None:
        """Import base64 content at path."""
        self.caller.call(
            "POST",
            "/workspace/import",
            body={
                "content": content,
                "path": path,
                "language": Language(language).value,
                "overwrite": overwrite,
                "format": ExportFormat(fmt).value,
            },
        )

    def export(self, path: str, fmt: ExportFormat) -> str:
        """Export a notebook and return its base64 content."""
        payload = self.caller.call(
            "GET",
            "/workspace/export",
            query={"format": ExportFormat(fmt).value, "path": path},
        )
        return str(payload.get("content") or "")

    def delete(self, path: str, recursive: bool) -> None:
        """Delete an object (recursively for non-empty directories)."""
        self.caller.call(
            "POST", "/workspace/delete", body={"path": path, "recursive": recursive}
        )
