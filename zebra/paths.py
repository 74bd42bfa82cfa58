"""Bit paths derived from digests and the prefixes that locate tree nodes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Direction(Enum):
    """A step in a binary tree: a clear bit goes left, a set bit goes right."""

    LEFT = 0
    RIGHT = 1


class Path:
    """The sequence of directions spelled by the bits of a digest, most significant first."""

    __slots__ = ("digest",)

    def __init__(self, digest: bytes) -> None:
        self.digest = bytes(digest)

    def __getitem__(self, depth: int) -> Direction:
        if depth < 0 or depth >= len(self.digest) * 8:
            raise IndexError(f"depth {depth} outside of path")
        byte = self.digest[depth // 8]
        bit = (byte >> (7 - depth % 8)) & 1
        return Direction.RIGHT if bit else Direction.LEFT

    def __len__(self) -> int:
        return len(self.digest) * 8

    def reaches(self, digest: bytes) -> bool:
        """Whether this path ends at the node placed for ``digest``."""
        return self.digest == bytes(digest)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Path):
            return NotImplemented
        return self.digest == other.digest

    def __hash__(self) -> int:
        return hash(self.digest)

    def __repr__(self) -> str:
        return f"Path({self.digest.hex()})"


@dataclass(frozen=True)
class Prefix:
    """The location of a node: the directions taken from the root to reach it."""

    directions: tuple[Direction, ...] = ()

    @classmethod
    def root(cls) -> Prefix:
        return cls()

    @property
    def depth(self) -> int:
        return len(self.directions)

    def left(self) -> Prefix:
        return Prefix(self.directions + (Direction.LEFT,))

    def right(self) -> Prefix:
        return Prefix(self.directions + (Direction.RIGHT,))

    def contains(self, path: Path) -> bool:
        """Whether ``path`` passes through this location."""
        return all(
            path[depth] is direction for depth, direction in enumerate(self.directions)
        )