"""Lookups, updates, exports and imports over Merkle-prefix trees."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from zebra import hashing
from zebra.errors import BranchUnknownError, MapIncompatibleError
from zebra.map_store import EMPTY, Empty, Internal, Leaf, Node, Stub, Wrap
from zebra.paths import Direction, Path


@dataclass(frozen=True)
class Update:
    """A pending insertion (``value`` set) or removal (``value`` is None) along ``path``."""

    path: Path
    key: Wrap | None = None
    value: Wrap | None = None

    @classmethod
    def insert(cls, key: object, value: object) -> Update:
        key_wrap = Wrap(key)
        return cls(Path(key_wrap.digest), key_wrap, Wrap(value))

    @classmethod
    def remove(cls, key: object) -> Update:
        return cls(Path(hashing.digest(key)))

    @property
    def is_removal(self) -> bool:
        return self.value is None


def get(root: Node, path: Path) -> Leaf | None:
    """The leaf reached by ``path``, or None if the tree proves it absent."""
    node, depth = root, 0
    while True:
        match node:
            case Empty():
                return None
            case Internal(left=left, right=right):
                node = left if path[depth] is Direction.LEFT else right
                depth += 1
            case Leaf(key=key):
                return node if path.reaches(key.digest) else None
            case Stub():
                raise BranchUnknownError()
            case _:
                raise TypeError(f"not a tree node: {node!r}")


def _branch(
    left: Node, right: Node, depth: int, update: Update
) -> tuple[Node, Leaf | None]:
    if update.path[depth] is Direction.LEFT:
        left, previous = _recur(left, depth + 1, update)
    else:
        right, previous = _recur(right, depth + 1, update)

    match left, right:
        case Empty(), Empty():
            return EMPTY, previous
        case Leaf(), Empty():
            return left, previous
        case Empty(), Leaf():
            return right, previous
        case _:
            return Internal.new(left, right), previous


def _recur(node: Node, depth: int, update: Update) -> tuple[Node, Leaf | None]:
    match node:
        case Empty():
            if update.is_removal:
                return EMPTY, None
            return Leaf.new(update.key, update.value), None
        case Internal(left=left, right=right):
            return _branch(left, right, depth, update)
        case Leaf(key=key) if update.path.reaches(key.digest):
            if update.is_removal:
                return EMPTY, node
            return Leaf.new(key, update.value), node
        case Leaf() if update.is_removal:
            return node, None
        case Leaf(key=key):
            if Path(key.digest)[depth] is Direction.LEFT:
                return _branch(node, EMPTY, depth, update)
            return _branch(EMPTY, node, depth, update)
        case Stub():
            raise BranchUnknownError()
        case _:
            raise TypeError(f"not a tree node: {node!r}")


def apply(root: Node, update: Update) -> tuple[Node, Leaf | None]:
    """Apply ``update`` and return the new root with the leaf it replaced, if any."""
    return _recur(root, 0, update)


def _export(node: Node, depth: int, paths: list[Path]) -> Node:
    match node:
        case Internal(hash=label, left=left, right=right) if paths:
            left_paths = [path for path in paths if path[depth] is Direction.LEFT]
            right_paths = [path for path in paths if path[depth] is Direction.RIGHT]
            return Internal(
                label,
                _export(left, depth + 1, left_paths),
                _export(right, depth + 1, right_paths),
            )
        case Leaf() if paths:
            return node
        case Stub() if paths:
            raise BranchUnknownError()
        case Empty():
            return EMPTY
        case _:
            return Stub(node.hash)


def export(root: Node, paths: Iterable[Path]) -> Node:
    """A copy of the tree keeping only the branches along ``paths``; the rest become stubs."""
    return _export(root, 0, list(paths))


def _merge(destination: Node, source: Node) -> Node:
    match destination, source:
        case Stub(), _:
            return source
        case Internal(hash=label, left=left, right=right), Internal():
            return Internal(label, _merge(left, source.left), _merge(right, source.right))
        case _:
            return destination


def import_into(destination: Node, source: Node) -> Node:
    """Fill the stubs of ``destination`` with what ``source`` knows; both must share a root."""
    if destination.hash != source.hash:
        raise MapIncompatibleError()
    return _merge(destination, source)