"""Deterministic encoding of values and the hashes that label tree nodes."""

from __future__ import annotations

import hashlib
import struct
from collections.abc import Iterable

from zebra.errors import HashError

DIGEST_SIZE = 32


def _length(count: int) -> bytes:
    return struct.pack("<Q", count)


def _encode_into(value: object, out: bytearray) -> None:
    if value is None:
        out += b"N"
    elif value is True:
        out += b"T"
    elif value is False:
        out += b"F"
    elif isinstance(value, int):
        size = (value.bit_length() + 8) // 8
        out += b"I" + _length(size) + value.to_bytes(size, "little", signed=True)
    elif isinstance(value, float):
        out += b"D" + struct.pack("<d", value)
    elif isinstance(value, str):
        data = value.encode("utf-8")
        out += b"S" + _length(len(data)) + data
    elif isinstance(value, (bytes, bytearray, memoryview)):
        data = bytes(value)
        out += b"B" + _length(len(data)) + data
    elif isinstance(value, list):
        out += b"L" + _length(len(value))
        for element in value:
            _encode_into(element, out)
    elif isinstance(value, tuple):
        out += b"U" + _length(len(value))
        for element in value:
            _encode_into(element, out)
    elif isinstance(value, dict):
        pairs = sorted((encode(key), encode(item)) for key, item in value.items())
        out += b"M" + _length(len(pairs))
        for key, item in pairs:
            out += key + item
    elif isinstance(value, (set, frozenset)):
        elements = sorted(encode(element) for element in value)
        out += b"E" + _length(len(elements))
        for element in elements:
            out += element
    else:
        raise HashError(f"cannot encode value of type {type(value).__name__}")


def encode(value: object) -> bytes:
    """Encode ``value`` into bytes that depend only on its contents."""
    out = bytearray()
    _encode_into(value, out)
    return bytes(out)


def _blake(data: bytes, person: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=DIGEST_SIZE, person=person).digest()


def digest(value: object) -> bytes:
    """The digest of a key, value or item."""
    return _blake(encode(value), b"zebra:value")


def empty_hash() -> bytes:
    """The label of an empty subtree."""
    return bytes(DIGEST_SIZE)


def leaf_hash(key_digest: bytes, value_digest: bytes) -> bytes:
    """The label of a map leaf holding the given key and value digests."""
    return _blake(bytes(key_digest) + bytes(value_digest), b"zebra:leaf")


def internal_hash(left: bytes, right: bytes) -> bytes:
    """The label of a map internal node with the given child labels."""
    return _blake(bytes(left) + bytes(right), b"zebra:internal")


def item_hash(item: object) -> bytes:
    """The hash of a single vector item."""
    return _blake(encode(item), b"zebra:item")


def packed_hash(items: Iterable[object]) -> bytes:
    """The hash of a chunk of vector items packed into one leaf."""
    return _blake(encode(list(items)), b"zebra:item")


def pair_hash(left: bytes, right: bytes) -> bytes:
    """The hash of an internal vector node over two child hashes."""
    return _blake(bytes(left) + bytes(right), b"zebra:pair")