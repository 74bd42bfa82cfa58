"""Inclusion proofs for items of a Merkle vector."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from zebra import hashing
from zebra.errors import DeserializeError, RootMismatchError
from zebra.paths import Direction


class _Reader:
    __slots__ = ("_data", "_offset")

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._offset = 0

    def take(self, count: int) -> bytes:
        end = self._offset + count
        if end > len(self._data):
            raise DeserializeError("unexpected end of data")
        chunk = self._data[self._offset:end]
        self._offset = end
        return chunk

    def length(self) -> int:
        return struct.unpack("<Q", self.take(8))[0]

    @property
    def exhausted(self) -> bool:
        return self._offset == len(self._data)

    def value(self) -> object:
        tag = self.take(1)
        if tag == b"N":
            return None
        if tag == b"T":
            return True
        if tag == b"F":
            return False
        if tag == b"I":
            return int.from_bytes(self.take(self.length()), "little", signed=True)
        if tag == b"D":
            return struct.unpack("<d", self.take(8))[0]
        if tag == b"S":
            try:
                return self.take(self.length()).decode("utf-8")
            except UnicodeDecodeError as error:
                raise DeserializeError("invalid text value") from error
        if tag == b"B":
            return self.take(self.length())
        if tag == b"L":
            return [self.value() for _ in range(self.length())]
        if tag == b"U":
            return tuple(self.value() for _ in range(self.length()))
        if tag == b"M":
            result = {}
            for _ in range(self.length()):
                key = self.value()
                item = self.value()
                try:
                    result[key] = item
                except TypeError as error:
                    raise DeserializeError("unhashable mapping key") from error
            return result
        if tag == b"E":
            try:
                return frozenset(self.value() for _ in range(self.length()))
            except TypeError as error:
                raise DeserializeError("unhashable set element") from error
        raise DeserializeError(f"unknown value tag {tag!r}")


def _decode(data: bytes) -> object:
    """Decode bytes produced by ``hashing.encode``; raise ``DeserializeError`` if malformed."""
    reader = _Reader(data)
    try:
        value = reader.value()
    except RecursionError as error:
        raise DeserializeError("data nested too deeply") from error
    if not reader.exhausted:
        raise DeserializeError("trailing bytes after value")
    return value


@dataclass(frozen=True)
class Proof:
    """The path from an item's leaf to the root, with the sibling hash at each step.

    For packed vectors, ``siblings`` holds the other items of the item's chunk
    and ``position`` is where the item goes among them.
    """

    path: tuple[Direction, ...]
    hashes: tuple[bytes, ...]
    siblings: tuple[object, ...] | None = None
    position: int = 0

    def verify(self, root: bytes, item: object) -> None:
        """Raise ``RootMismatchError`` unless ``item`` leads to ``root`` along this proof."""
        if self.siblings is None:
            current = hashing.item_hash(item)
        else:
            chunk = list(self.siblings)
            chunk.insert(self.position, item)
            current = hashing.packed_hash(chunk)

        for direction, sibling in zip(self.path, self.hashes):
            if direction is Direction.LEFT:
                current = hashing.pair_hash(current, sibling)
            else:
                current = hashing.pair_hash(sibling, current)

        if current != bytes(root):
            raise RootMismatchError()

    def to_bytes(self) -> bytes:
        """Serialize the proof."""
        return hashing.encode(
            (
                [direction is Direction.LEFT for direction in self.path],
                [bytes(sibling) for sibling in self.hashes],
                None if self.siblings is None else list(self.siblings),
                self.position,
            )
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> Proof:
        """Rebuild a proof from ``to_bytes`` output; raise ``DeserializeError`` if malformed."""
        decoded = _decode(data)
        if not isinstance(decoded, tuple) or len(decoded) != 4:
            raise DeserializeError("malformed proof")
        path, hashes, siblings, position = decoded
        if not isinstance(path, list) or not all(isinstance(bit, bool) for bit in path):
            raise DeserializeError("malformed proof path")
        if not isinstance(hashes, list) or not all(
            isinstance(sibling, bytes) for sibling in hashes
        ):
            raise DeserializeError("malformed proof hashes")
        if siblings is not None and not isinstance(siblings, list):
            raise DeserializeError("malformed proof siblings")
        if isinstance(position, bool) or not isinstance(position, int) or position < 0:
            raise DeserializeError("malformed proof position")
        if position > (0 if siblings is None else len(siblings)):
            raise DeserializeError("proof position out of range")
        return cls(
            tuple(Direction.LEFT if bit else Direction.RIGHT for bit in path),
            tuple(hashes),
            None if siblings is None else tuple(siblings),
            position,
        )