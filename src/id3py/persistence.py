"""Serialization of decision trees and the storage sinks that receive them.

Trees are written as a small JSON document::

    {"format": "id3py-tree", "version": 1,
     "tree": {"feature": "no-surfacing",
              "branches": [{"value": 0, "node": {"label": "no"}}, ...]}}

Branch values are stored next to their subtree rather than as object keys, so
ints, floats and strings survive a round trip with their types intact.

A sink is anything with ``write(data, destination)`` and ``read(source)``
methods moving ``bytes``.  Sinks signal failure by raising ``OSError``.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from typing import Any, Final, Protocol

from id3py.exceptions import TreeStorageError
from id3py.tree import Leaf, Node, SplitNode, check_value

__all__ = [
    "FORMAT_NAME",
    "FORMAT_VERSION",
    "FileSink",
    "MemorySink",
    "TreeSink",
    "dumps_tree",
    "load_tree",
    "loads_tree",
    "store_tree",
    "tree_from_dict",
    "tree_to_dict",
    "tree_to_nested_dict",
]

FORMAT_NAME: Final[str] = "id3py-tree"
FORMAT_VERSION: Final[int] = 1


def tree_to_dict(tree: Node) -> dict[str, Any]:
    """Convert a tree to JSON-compatible dictionaries."""
    if isinstance(tree, Leaf):
        return {"label": tree.label}
    return {
        "feature": tree.feature,
        "branches": [{"value": v, "node": tree_to_dict(child)} for v, child in tree.children.items()],
    }


def tree_from_dict(data: dict[str, Any]) -> Node:
    """
    Rebuild a tree from the output of :func:`tree_to_dict`.

    Raises
    ------
    ValueError
        If ``data`` is not a well-formed tree description.
    """
    if not isinstance(data, dict):
        raise ValueError(f"tree node must be an object, got {type(data).__name__}")
    if "label" in data:
        return Leaf(check_value(data["label"]))
    if "feature" not in data or "branches" not in data:
        raise ValueError(f"tree node needs either 'label' or 'feature' and 'branches', got {sorted(data)}")
    if not isinstance(data["branches"], list):
        raise ValueError(f"'branches' must be a list, got {type(data['branches']).__name__}")
    children = {}
    for branch in data["branches"]:
        try:
            value, node = branch["value"], branch["node"]
        except (KeyError, TypeError):
            raise ValueError(f"malformed branch {branch!r}") from None
        children[check_value(value)] = tree_from_dict(node)
    return SplitNode(str(data["feature"]), children)


def tree_to_nested_dict(tree: Node) -> Any:
    """Render a tree as ``{feature: {value: subtree_or_label}}``.

    This is the classic plain-dict representation of an ID3 tree; a leaf is
    rendered as its bare label.  It is meant for display and interop and
    cannot be read back by :func:`tree_from_dict`.
    """
    if isinstance(tree, Leaf):
        return tree.label
    return {tree.feature: {v: tree_to_nested_dict(child) for v, child in tree.children.items()}}


def dumps_tree(tree: Node) -> bytes:
    document = {"format": FORMAT_NAME, "version": FORMAT_VERSION, "tree": tree_to_dict(tree)}
    return json.dumps(document, ensure_ascii=False).encode("utf-8")


def loads_tree(data: bytes | str) -> Node:
    """
    Parse a document produced by :func:`dumps_tree`.

    Raises
    ------
    ValueError
        If ``data`` is not valid JSON or not an id3py tree document.
    """
    document = json.loads(data)
    if not isinstance(document, dict) or document.get("format") != FORMAT_NAME:
        raise ValueError("not an id3py tree document")
    if document.get("version") != FORMAT_VERSION:
        raise ValueError(f"unsupported tree document version {document.get('version')!r}")
    if "tree" not in document:
        raise ValueError("tree document has no 'tree' entry")
    return tree_from_dict(document["tree"])


class TreeSink(Protocol):
    """Storage capability injected into :class:`~id3py.model.DecisionTreeModel`."""

    def write(self, data: bytes, destination: str) -> None: ...

    def read(self, source: str) -> bytes: ...


class FileSink:
    """Store serialized trees as files on the local filesystem.

    Writes go to a temporary file in the destination directory which is then
    renamed over the destination, so readers never see a partial file.  The
    directory must already exist.
    """

    def write(self, data: bytes, destination: str) -> None:
        directory = os.path.dirname(os.path.abspath(destination))
        fd, tmp_path = tempfile.mkstemp(prefix=".id3py-", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, destination)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)
            raise

    def read(self, source: str) -> bytes:
        with open(source, "rb") as f:
            return f.read()


class MemorySink:
    """Keep serialized trees in a dictionary keyed by destination."""

    def __init__(self) -> None:
        self.store: dict[str, bytes] = {}

    def write(self, data: bytes, destination: str) -> None:
        self.store[destination] = bytes(data)

    def read(self, source: str) -> bytes:
        try:
            return self.store[source]
        except KeyError:
            raise FileNotFoundError(f"no tree stored at {source!r}") from None


def store_tree(tree: Node, destination: str, sink: TreeSink) -> str:
    """
    Serialize ``tree`` and hand it to ``sink``.

    Returns
    -------
    str
        ``destination``, once the sink accepted the write.

    Raises
    ------
    TreeStorageError
        If the sink failed.
    """
    data = dumps_tree(tree)
    try:
        sink.write(data, destination)
    except TreeStorageError:
        raise
    except OSError as exc:
        raise TreeStorageError(f"could not store tree at {destination!r}: {exc}", location=destination) from exc
    return destination


def load_tree(source: str, sink: TreeSink) -> Node:
    """
    Read a tree previously written with :func:`store_tree`.

    Raises
    ------
    TreeStorageError
        If the sink failed or the stored bytes are not a tree.
    """
    try:
        data = sink.read(source)
    except TreeStorageError:
        raise
    except OSError as exc:
        raise TreeStorageError(f"could not read tree from {source!r}: {exc}", location=source) from exc
    try:
        return loads_tree(data)
    except ValueError as exc:
        raise TreeStorageError(f"{source!r} does not hold a valid tree: {exc}", location=source) from exc
