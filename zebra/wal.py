"""An append-only write-ahead log of key-value operations."""

from __future__ import annotations

import os
import time
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

_LENGTH_SIZE = 8
_TIMESTAMP_SIZE = 16
_WAL_EXT = "wal"


@dataclass(frozen=True)
class WALEntry:
    """One logged operation: a set carries a value, a delete is a tombstone."""

    key: bytes
    value: bytes | None
    timestamp: int
    deleted: bool


def files_with_ext(directory: str | os.PathLike[str], ext: str) -> list[Path]:
    """The paths in ``directory`` whose extension is ``ext``."""
    suffix = "." + ext
    return [path for path in Path(directory).iterdir() if path.suffix == suffix]


def _length(count: int) -> bytes:
    return count.to_bytes(_LENGTH_SIZE, "little")


def _timestamp(timestamp: int) -> bytes:
    if not 0 <= timestamp < 1 << (8 * _TIMESTAMP_SIZE):
        raise ValueError(f"timestamp {timestamp} does not fit in 128 unsigned bits")
    return timestamp.to_bytes(_TIMESTAMP_SIZE, "little")


def _read_exact(reader: BinaryIO, count: int) -> bytes | None:
    data = reader.read(count)
    return data if len(data) == count else None


def read_entries(path: str | os.PathLike[str]) -> Iterator[WALEntry]:
    """Yield the entries of the log at ``path``, stopping at the first incomplete one."""
    with open(path, "rb") as reader:
        while True:
            raw = _read_exact(reader, _LENGTH_SIZE)
            if raw is None:
                return
            key_len = int.from_bytes(raw, "little")

            flag = _read_exact(reader, 1)
            if flag is None:
                return
            deleted = flag[0] != 0

            value: bytes | None = None
            if deleted:
                key = _read_exact(reader, key_len)
                if key is None:
                    return
            else:
                raw = _read_exact(reader, _LENGTH_SIZE)
                if raw is None:
                    return
                value_len = int.from_bytes(raw, "little")
                key = _read_exact(reader, key_len)
                if key is None:
                    return
                value = _read_exact(reader, value_len)
                if value is None:
                    return

            raw = _read_exact(reader, _TIMESTAMP_SIZE)
            if raw is None:
                return
            yield WALEntry(key, value, int.from_bytes(raw, "little"), deleted)


class WAL:
    """An append-only file recording the operations applied to a table.

    Writes are buffered; call ``flush`` to push them to disk.
    """

    __slots__ = ("path", "_file")

    def __init__(self, path: Path, file: BinaryIO) -> None:
        self.path = path
        self._file = file

    @classmethod
    def create(cls, directory: str | os.PathLike[str]) -> WAL:
        """A new, empty log in ``directory`` named after the current time in microseconds."""
        stamp = time.time_ns() // 1000
        while True:
            path = Path(directory) / f"{stamp}.{_WAL_EXT}"
            try:
                file = open(path, "xb")
            except FileExistsError:
                stamp += 1
                continue
            return cls(path, file)

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> WAL:
        """A log appending to ``path``, which is created if missing."""
        path = Path(path)
        return cls(path, open(path, "ab"))

    @classmethod
    def load_from_dir(cls, directory: str | os.PathLike[str]) -> WAL:
        """Merge the logs in ``directory`` into a new one and remove the old files.

        Logs are replayed in the order of their file names, which follows their creation time.
        """
        wal_files = sorted(files_with_ext(directory, _WAL_EXT))
        new_wal = cls.create(directory)
        for wal_file in wal_files:
            try:
                entries = list(read_entries(wal_file))
            except OSError:
                continue
            for entry in entries:
                if entry.deleted:
                    new_wal.delete(entry.key, entry.timestamp)
                else:
                    new_wal.set(entry.key, entry.value, entry.timestamp)
        new_wal.flush()
        for wal_file in wal_files:
            wal_file.unlink()
        return new_wal

    def set(self, key: bytes, value: bytes, timestamp: int) -> None:
        """Append the setting of ``key`` to ``value``."""
        key, value = bytes(key), bytes(value)
        self._file.write(
            _length(len(key)) + b"\x00" + _length(len(value)) + key + value
            + _timestamp(timestamp)
        )

    def delete(self, key: bytes, timestamp: int) -> None:
        """Append a tombstone for ``key``."""
        key = bytes(key)
        self._file.write(_length(len(key)) + b"\x01" + key + _timestamp(timestamp))

    def flush(self) -> None:
        """Push buffered writes to disk."""
        self._file.flush()

    def close(self) -> None:
        """Flush and close the underlying file."""
        self._file.close()

    def __iter__(self) -> Iterator[WALEntry]:
        if not self._file.closed:
            self.flush()
        return read_entries(self.path)

    def __enter__(self) -> WAL:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"WAL({str(self.path)!r})"