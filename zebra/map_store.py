"""Nodes of a Merkle-prefix tree and the check of its topology."""

from __future__ import annotations

from dataclasses import dataclass

from zebra import hashing
from zebra.errors import CompactnessViolationError, PathViolationError
from zebra.paths import Path, Prefix


class Wrap:
    """A field together with its digest; two wraps are equal when their digests are."""

    __slots__ = ("inner", "digest")

    def __init__(self, inner: object) -> None:
        self.inner = inner
        self.digest = hashing.digest(inner)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Wrap):
            return NotImplemented
        return self.digest == other.digest

    def __hash__(self) -> int:
        return hash(self.digest)

    def __repr__(self) -> str:
        return f"Wrap({self.inner!r})"


@dataclass(frozen=True)
class Empty:
    """An empty subtree."""

    @property
    def hash(self) -> bytes:
        return hashing.empty_hash()


EMPTY = Empty()


@dataclass(frozen=True)
class Internal:
    """A node with two children, labelled by the hash stored in ``hash``."""

    hash: bytes
    left: Node
    right: Node

    @classmethod
    def new(cls, left: Node, right: Node) -> Internal:
        return cls(hashing.internal_hash(left.hash, right.hash), left, right)


@dataclass(frozen=True)
class Leaf:
    """A key-value association, labelled by the hash stored in ``hash``."""

    hash: bytes
    key: Wrap
    value: Wrap

    @classmethod
    def new(cls, key: Wrap, value: Wrap) -> Leaf:
        return cls(hashing.leaf_hash(key.digest, value.digest), key, value)


@dataclass(frozen=True)
class Stub:
    """A subtree known only by its hash."""

    hash: bytes


Node = Empty | Internal | Leaf | Stub


def node_hash(node: Node) -> bytes:
    """The label of ``node``."""
    return node.hash


def _check(node: Node, location: Prefix) -> None:
    match node:
        case Internal(left=left, right=right):
            if isinstance(left, (Empty, Leaf)) and isinstance(right, (Empty, Leaf)) and not (
                isinstance(left, Leaf) and isinstance(right, Leaf)
            ):
                raise CompactnessViolationError()
            _check(left, location.left())
            _check(right, location.right())
        case Leaf(key=key):
            if not location.contains(Path(key.digest)):
                raise PathViolationError()
        case _:
            pass


def check(node: Node) -> None:
    """Raise a ``TopologyError`` if the tree under ``node`` is not a valid map."""
    _check(node, Prefix.root())