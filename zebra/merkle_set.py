"""A set over a Merkle-prefix tree, with the same proofs as a map."""

from __future__ import annotations

from collections.abc import Iterable

from zebra import hashing
from zebra.map import Map
from zebra.map_interact import Update, apply, get
from zebra.paths import Path


class MerkleSet:
    """A set whose commitment depends only on its items.

    Items are stored as keys of a map with no values, so a set can be
    exported partially and merged back exactly like a map.
    """

    __slots__ = ("_map",)

    def __init__(self, map_: Map | None = None) -> None:
        self._map = Map() if map_ is None else map_

    @classmethod
    def root_stub(cls, commitment: bytes) -> MerkleSet:
        """A set known only by its commitment."""
        return cls(Map.root_stub(commitment))

    @property
    def map(self) -> Map:
        """The underlying map, holding each item as a key mapped to None."""
        return self._map

    def commit(self) -> bytes:
        """A cryptographic commitment to the contents of the set."""
        return self._map.commit()

    def contains(self, item: object) -> bool:
        """Whether ``item`` is in the set.

        Raises ``BranchUnknownError`` if the item's path runs into a stub.
        """
        return get(self._map.root, Path(hashing.digest(item))) is not None

    def __contains__(self, item: object) -> bool:
        return self.contains(item)

    def insert(self, item: object) -> bool:
        """Add ``item``; True if it was not already present."""
        self._map.root, previous = apply(self._map.root, Update.insert(item, None))
        return previous is None

    def remove(self, item: object) -> bool:
        """Remove ``item``; True if it was present."""
        self._map.root, previous = apply(self._map.root, Update.remove(item))
        return previous is not None

    def export(self, items: Iterable[object]) -> MerkleSet:
        """A set with the same commitment that keeps only the branches along ``items``."""
        return MerkleSet(self._map.export(items))

    def import_set(self, other: MerkleSet) -> None:
        """Fill this set's stubs with what ``other`` knows.

        Raises ``MapIncompatibleError`` if the commitments differ.
        """
        self._map.import_map(other._map)

    def items(self) -> set[object]:
        """The items held locally, leaving out what stubs hide."""
        return set(self._map.records())

    def __repr__(self) -> str:
        return f"Set(commitment: {self.commit().hex()})"