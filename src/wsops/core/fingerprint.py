"""Format-aware content fingerprints for notebook payloads.

Two payloads are considered equal when their fingerprints match. Flat
formats (SOURCE, HTML, ...) are fingerprinted over their raw bytes. DBC
bundles are normalized first: the archive layout (entry order, timestamps,
compression, metadata) is not stable across exports of identical content,
so only the position-ordered cell text of each notebook descriptor counts.
"""

from __future__ import annotations

import base64
import binascii
import io
import json
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from wsops.core.errors import InvalidEncoding, InvalidPayload
from wsops.core.models import ExportFormat


@dataclass(frozen=True)
class NotebookCell:
    """One cell of a DBC notebook descriptor."""

    position: int
    command: str


@dataclass(frozen=True)
class NotebookDescriptor:
    """The parts of a DBC notebook descriptor that carry content."""

    name: str | None
    commands: tuple[NotebookCell, ...]

    @classmethod
    def from_json(cls, raw: bytes, *, entry: str = "<descriptor>") -> "NotebookDescriptor":
        """
        Parse a descriptor, rejecting anything without usable cells.

        Raises:
            InvalidPayload: If the JSON is malformed or `commands`,
                `position` or `command` are missing or mistyped.
        """
        try:
            data = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise InvalidPayload(f"{entry}: invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise InvalidPayload(f"{entry}: descriptor must be a JSON object")
        commands = data.get("commands")
        if not isinstance(commands, list):
            raise InvalidPayload(f"{entry}: descriptor has no 'commands' list")
        name = data.get("name")
        return cls(
            name=name if isinstance(name, str) else None,
            commands=tuple(_parse_cell(c, entry, i) for i, c in enumerate(commands)),
        )

    def ordered_source(self) -> str:
        """Concatenate cell commands by ascending position (last duplicate wins)."""
        by_position: dict[int, str] = {}
        for cell in self.commands:
            by_position[cell.position] = cell.command
        return "".join(by_position[p] for p in sorted(by_position))


def _parse_cell(cell: Any, entry: str, index: int) -> NotebookCell:
    where = f"{entry}: command #{index}"
    if not isinstance(cell, dict):
        raise InvalidPayload(f"{where} must be an object")
    if "position" not in cell or "command" not in cell:
        raise InvalidPayload(f"{where} needs 'position' and 'command'")
    position = cell["position"]
    command = cell["command"]
    # JSON numbers may arrive as floats (1.0); booleans are not positions
    if isinstance(position, bool) or not isinstance(position, (int, float)):
        raise InvalidPayload(f"{where} has a non-numeric position")
    if isinstance(position, float):
        if not position.is_integer():
            raise InvalidPayload(f"{where} has a fractional position")
        position = int(position)
    if not isinstance(command, str):
        raise InvalidPayload(f"{where} has a non-string command")
    return NotebookCell(position=position, command=command)


def _checksum(data: bytes) -> int:
    return zlib.crc32(data) & 0xFFFFFFFF


def decode_payload(payload_b64: str) -> bytes:
    """Strictly decode a base64 payload."""
    try:
        return base64.b64decode(payload_b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidEncoding(f"content is not valid base64: {exc}") from exc


def dbc_checksum(archive: bytes) -> int:
    """
    Sum the per-notebook checksums of a DBC archive.

    Raises:
        InvalidPayload: If the archive or any descriptor cannot be read.
    """
    try:
        bundle = zipfile.ZipFile(io.BytesIO(archive))
    except (zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
        raise InvalidPayload(f"content is not a DBC archive: {exc}") from exc

    total = 0
    with bundle:
        for info in bundle.infolist():
            if info.is_dir():
                continue
            try:
                raw = bundle.read(info)
            except (zipfile.BadZipFile, zlib.error, EOFError, OSError, RuntimeError) as exc:
                raise InvalidPayload(f"{info.filename}: unreadable entry: {exc}") from exc
            descriptor = NotebookDescriptor.from_json(raw, entry=info.filename)
            total += _checksum(descriptor.ordered_source().encode("utf-8"))
    return total


def fingerprint(payload_b64: str, fmt: ExportFormat | str) -> str:
    """
    Return the fingerprint of a base64 payload in the given export format.

    Raises:
        InvalidEncoding: If the payload is not valid base64.
        InvalidPayload: If a DBC payload is not a readable archive.
    """
    fmt = ExportFormat(fmt)
    raw = decode_payload(payload_b64)
    if fmt.is_bundle:
        return str(dbc_checksum(raw))
    return str(_checksum(raw))


def encode_file(path: str | Path) -> str:
    """Return the base64 encoding of a local file."""
    return base64.b64encode(Path(path).read_bytes()).decode("ascii")


def fingerprint_file(path: str | Path, fmt: ExportFormat | str) -> str:
    """Return the fingerprint of a local notebook file."""
    return fingerprint(encode_file(path), fmt)
