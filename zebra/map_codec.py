"""Binary serialization of maps.

Only the shape of the tree and the fields of its leaves are written; the
labels of internal nodes and leaves are recomputed when reading, and the
topology of the result is checked. Data that was tampered with therefore
either yields a correct map or fails to load.
"""

from __future__ import annotations

import struct

from zebra import hashing
from zebra.errors import DeserializeError, TopologyError
from zebra.map import Map
from zebra.map_store import EMPTY, Empty, Internal, Leaf, Node, Stub, Wrap, check

_EMPTY = 0
_INTERNAL = 1
_LEAF = 2
_STUB = 3

_MAX_DEPTH = hashing.DIGEST_SIZE * 8


def _write_node(node: Node, out: bytearray) -> None:
    match node:
        case Empty():
            out.append(_EMPTY)
        case Internal(left=left, right=right):
            out.append(_INTERNAL)
            _write_node(left, out)
            _write_node(right, out)
        case Leaf(key=key, value=value):
            out.append(_LEAF)
            out += hashing.encode(key.inner)
            out += hashing.encode(value.inner)
        case Stub(hash=label):
            if len(label) != hashing.DIGEST_SIZE:
                raise ValueError(
                    f"stub label must be {hashing.DIGEST_SIZE} bytes, got {len(label)}"
                )
            out.append(_STUB)
            out += label
        case _:
            raise TypeError(f"not a tree node: {node!r}")


def dumps(map_: Map) -> bytes:
    """Serialize ``map_``, stubs included."""
    out = bytearray()
    _write_node(map_.root, out)
    return bytes(out)


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

    def byte(self) -> int:
        return self.take(1)[0]

    def length(self) -> int:
        return struct.unpack("<Q", self.take(8))[0]

    @property
    def exhausted(self) -> bool:
        return self._offset == len(self._data)


def _read_field(reader: _Reader) -> object:
    tag = reader.take(1)
    if tag == b"N":
        return None
    if tag == b"T":
        return True
    if tag == b"F":
        return False
    if tag == b"I":
        return int.from_bytes(reader.take(reader.length()), "little", signed=True)
    if tag == b"D":
        return struct.unpack("<d", reader.take(8))[0]
    if tag == b"S":
        raw = reader.take(reader.length())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as error:
            raise DeserializeError("invalid text field") from error
    if tag == b"B":
        return reader.take(reader.length())
    if tag == b"L":
        return [_read_field(reader) for _ in range(reader.length())]
    if tag == b"U":
        return tuple(_read_field(reader) for _ in range(reader.length()))
    if tag == b"M":
        result = {}
        for _ in range(reader.length()):
            key = _read_field(reader)
            value = _read_field(reader)
            try:
                result[key] = value
            except TypeError as error:
                raise DeserializeError("unhashable mapping key") from error
        return result
    if tag == b"E":
        try:
            return frozenset(_read_field(reader) for _ in range(reader.length()))
        except TypeError as error:
            raise DeserializeError("unhashable set element") from error
    raise DeserializeError(f"unknown field tag {tag!r}")


def _read_node(reader: _Reader, depth: int) -> Node:
    tag = reader.byte()
    if tag == _EMPTY:
        return EMPTY
    if tag == _INTERNAL:
        if depth >= _MAX_DEPTH:
            raise DeserializeError("tree deeper than a key path")
        left = _read_node(reader, depth + 1)
        right = _read_node(reader, depth + 1)
        return Internal.new(left, right)
    if tag == _LEAF:
        key = _read_field(reader)
        value = _read_field(reader)
        return Leaf.new(Wrap(key), Wrap(value))
    if tag == _STUB:
        return Stub(reader.take(hashing.DIGEST_SIZE))
    raise DeserializeError(f"unknown node tag {tag}")


def loads(data: bytes) -> Map:
    """Rebuild a map from ``dumps`` output, recomputing labels and checking topology.

    Raises ``DeserializeError`` on malformed data or a flawed tree.
    """
    reader = _Reader(data)
    try:
        root = _read_node(reader, 0)
    except RecursionError as error:
        raise DeserializeError("data nested too deeply") from error
    if not reader.exhausted:
        raise DeserializeError("trailing bytes after map")
    try:
        check(root)
    except TopologyError as error:
        raise DeserializeError(f"Flawed topology: {error}") from error
    return Map(root)