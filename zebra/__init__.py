"""Merkle-prefix maps and sets, Merkle vectors with proofs, and a write-ahead log."""

__version__ = "0.1.0"

__all__ = [
    "errors",
    "paths",
    "hashing",
    "map_store",
    "map_interact",
    "map",
    "map_codec",
    "merkle_set",
    "proof",
    "vector",
    "wal",
]