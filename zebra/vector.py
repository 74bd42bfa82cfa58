"""A fixed-length sequence committed to by a Merkle tree."""

from __future__ import annotations

from collections.abc import Iterable

from zebra import hashing
from zebra.errors import DeserializeError, HashError
from zebra.paths import Direction
from zebra.proof import Proof, _decode


def _pairs(layer: list[bytes]) -> list[bytes]:
    return [hashing.pair_hash(left, right) for left, right in zip(layer[0::2], layer[1::2])]


class Vector:
    """A list of items with a Merkle root and inclusion proofs.

    With ``packing`` greater than one, consecutive items are grouped into
    chunks of that size and each chunk forms a single leaf.
    """

    __slots__ = ("_items", "_packing", "_layers")

    def __init__(self, items: Iterable[object], packing: int = 1) -> None:
        if isinstance(packing, bool) or not isinstance(packing, int) or packing < 1:
            raise ValueError("packing must be a positive integer")
        self._items = list(items)
        if not self._items:
            raise ValueError("cannot build a vector with no items")
        self._packing = packing
        self._layers = self._build()

    @property
    def packing(self) -> int:
        return self._packing

    def _chunk_hash(self, start: int) -> bytes:
        chunk = self._items[start:start + self._packing]
        if self._packing == 1:
            return hashing.item_hash(chunk[0])
        return hashing.packed_hash(chunk)

    def _build(self) -> list[list[bytes]]:
        nodes = [
            self._chunk_hash(start) for start in range(0, len(self._items), self._packing)
        ]
        count = len(nodes)
        half = max(1, (1 << (count - 1).bit_length()) // 2)
        last_layer = max(1, 2 * (count - half))

        layers: list[list[bytes]] = []
        if count > last_layer:
            bottom, rest = nodes[:last_layer], nodes[last_layer:]
            layers.append(bottom)
            layer = _pairs(bottom) + rest
        else:
            layer = nodes

        while len(layer) > 1:
            layers.append(layer)
            layer = _pairs(layer)
        layers.append(layer)
        return layers

    def _start(self, index: int) -> tuple[int, int]:
        node_index = index // self._packing
        first = len(self._layers[0])
        if node_index < first:
            return 0, node_index
        return 1, node_index - first // 2

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._items):
            raise IndexError(f"index {index} out of range for vector of {len(self._items)}")

    def set(self, index: int, item: object) -> None:
        """Replace the item at ``index`` and update the hashes above it."""
        self._check_index(index)
        previous = self._items[index]
        self._items[index] = item
        try:
            current = self._chunk_hash(index - index % self._packing)
        except HashError:
            self._items[index] = previous
            raise

        start, position = self._start(index)
        for layer in self._layers[start:]:
            layer[position] = current
            if len(layer) > 1:
                if position % 2 == 0:
                    current = hashing.pair_hash(current, layer[position + 1])
                else:
                    current = hashing.pair_hash(layer[position - 1], current)
            position //= 2

    def __len__(self) -> int:
        return len(self._items)

    def root(self) -> bytes:
        """The Merkle root committing to all items."""
        return self._layers[-1][0]

    def items(self) -> list[object]:
        """A copy of the items."""
        return list(self._items)

    def layers(self) -> list[list[bytes]]:
        """A copy of the tree's layers, from the bottom up to the root."""
        return [list(layer) for layer in self._layers]

    def prove(self, index: int) -> Proof:
        """A proof that the item at ``index`` belongs to this vector."""
        self._check_index(index)
        path: list[Direction] = []
        hashes: list[bytes] = []

        start, position = self._start(index)
        for layer in self._layers[start:]:
            if len(layer) > 1:
                if position % 2 == 0:
                    path.append(Direction.LEFT)
                    hashes.append(layer[position + 1])
                else:
                    path.append(Direction.RIGHT)
                    hashes.append(layer[position - 1])
            position //= 2

        if self._packing == 1:
            return Proof(tuple(path), tuple(hashes))

        chunk_start = index - index % self._packing
        chunk = self._items[chunk_start:chunk_start + self._packing]
        siblings = tuple(
            item for offset, item in enumerate(chunk, chunk_start) if offset != index
        )
        return Proof(tuple(path), tuple(hashes), siblings, index % self._packing)

    def to_bytes(self) -> bytes:
        """Serialize the items; the tree is rebuilt when reading."""
        return hashing.encode(self._items)

    @classmethod
    def from_bytes(cls, data: bytes, packing: int = 1) -> Vector:
        """Rebuild a vector from ``to_bytes`` output; raise ``DeserializeError`` if malformed."""
        items = _decode(data)
        if not isinstance(items, list):
            raise DeserializeError("serialized vector must hold a list of items")
        return cls(items, packing)

    def __repr__(self) -> str:
        return f"Vector(len: {len(self._items)}, root: {self.root().hex()})"