"""A key-value map over a Merkle-prefix tree with existence and deniability proofs."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from zebra import hashing
from zebra.map_interact import Update, apply, export, get, import_into
from zebra.map_store import EMPTY, Empty, Internal, Leaf, Node, Stub, check
from zebra.paths import Path


class Map:
    """A map whose layout depends only on its contents.

    Each key-value pair sits along the path spelled by the digest of its key,
    so any set of pairs has exactly one tree and one commitment. A map can be
    exported partially, with the excluded branches replaced by stubs, and the
    parts merged back with ``import_map``.
    """

    __slots__ = ("root",)

    def __init__(self, root: Node | None = None) -> None:
        self.root: Node = EMPTY if root is None else root

    @classmethod
    def root_stub(cls, commitment: bytes) -> Map:
        """A map known only by its commitment."""
        return cls(Stub(bytes(commitment)))

    def commit(self) -> bytes:
        """A cryptographic commitment to the contents of the map."""
        return self.root.hash

    def get(self, key: object) -> object | None:
        """The value stored under ``key``, or None if the map proves it absent.

        Raises ``BranchUnknownError`` if the key's path runs into a stub.
        """
        leaf = get(self.root, Path(hashing.digest(key)))
        return None if leaf is None else leaf.value.inner

    def insert(self, key: object, value: object) -> object | None:
        """Associate ``value`` with ``key`` and return the previous value, if any."""
        return self._update(Update.insert(key, value))

    def remove(self, key: object) -> object | None:
        """Remove ``key`` and return the value it had, if any."""
        return self._update(Update.remove(key))

    def _update(self, update: Update) -> object | None:
        self.root, previous = apply(self.root, update)
        return None if previous is None else previous.value.inner

    def export(self, keys: Iterable[object]) -> Map:
        """A map with the same commitment that keeps only the branches along ``keys``."""
        paths = sorted(
            (Path(hashing.digest(key)) for key in keys), key=lambda path: path.digest
        )
        return Map(export(self.root, paths))

    def import_map(self, other: Map) -> None:
        """Fill this map's stubs with what ``other`` knows.

        Raises ``MapIncompatibleError`` if the commitments differ.
        """
        self.root = import_into(self.root, other.root)

    def check(self) -> None:
        """Raise a ``TopologyError`` if the tree is not a valid map."""
        check(self.root)

    def records(self) -> dict[object, object]:
        """The key-value pairs held locally, leaving out what stubs hide."""
        return {leaf.key.inner: leaf.value.inner for leaf in self._leaves(self.root)}

    @staticmethod
    def _leaves(node: Node) -> Iterator[Leaf]:
        stack = [node]
        while stack:
            current = stack.pop()
            if isinstance(current, Internal):
                stack.append(current.right)
                stack.append(current.left)
            elif isinstance(current, Leaf):
                yield current
            elif not isinstance(current, (Empty, Stub)):
                raise TypeError(f"not a tree node: {current!r}")

    def copy(self) -> Map:
        """An independent map with the same contents."""
        return Map(self.root)

    def __repr__(self) -> str:
        return f"Map(commitment: {self.commit().hex()})"