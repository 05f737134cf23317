"""Workspace tree listing.

Lists the remote namespace either one level deep or as the full closure of
non-directory objects below a root. The remote namespace is a tree by
construction, so no cycle detection or depth bound is applied.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from wsops.core.models import ObjectKind, ObjectStatus, require_path

logger = logging.getLogger(__name__)


class ListingAdapter(Protocol):
    """Interface for directory listing used by the lister."""

    def list_children(self, path: str) -> list[ObjectStatus]:
        """Return the immediate children of a directory, in remote order."""
        ...


def list_objects(
    adapter: ListingAdapter,
    root: str,
    *,
    recursive: bool = False,
) -> list[ObjectStatus]:
    """
    List workspace objects below a root path.

    Non-recursive listings return the root's children exactly as the remote
    store reports them. Recursive listings expand every directory in place,
    depth-first, and return only non-directory objects.

    Any failing list call aborts the whole traversal and its exception is
    propagated unchanged; a truncated tree is never returned.

    Args:
        adapter: Workspace adapter used to list directories.
        root: Absolute workspace path to list.
        recursive: Expand directories into their contents.

    Returns:
        A list of ObjectStatus entries.
    """
    require_path(root)
    if not recursive:
        return adapter.list_children(root)

    leaves: list[ObjectStatus] = []
    _collect(adapter, root, leaves)
    return leaves


def _collect(adapter: ListingAdapter, path: str, leaves: list[ObjectStatus]) -> None:
    for obj in adapter.list_children(path):
        if obj.is_directory:
            logger.debug("expanding directory %s", obj.path)
            _collect(adapter, obj.path, leaves)
        else:
            leaves.append(obj)


def filter_by_kind(
    objects: Iterable[ObjectStatus],
    kinds: Iterable[ObjectKind | str] | None,
) -> list[ObjectStatus]:
    """Keep only objects of the given kinds (or all objects if kinds is empty)."""
    wanted = {_kind_name(k) for k in kinds or ()}
    if not wanted:
        return list(objects)
    return [o for o in objects if _kind_value(o) in wanted]


def _kind_name(kind: ObjectKind | str | None) -> str:
    if isinstance(kind, ObjectKind):
        return kind.value
    return str(kind or "").upper()


def _kind_value(obj: ObjectStatus) -> str:
    return _kind_name(obj.object_type)
