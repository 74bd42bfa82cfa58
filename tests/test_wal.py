import io

import pytest

from zebra.wal import WAL, WALEntry, files_with_ext, read_entries

ENTRIES = [
    (b"Apple", b"Apple Smoothie"),
    (b"Lime", b"Lime Smoothie"),
    (b"Orange", b"Orange Smoothie"),
]


def check_entry(reader, key, value, timestamp, deleted):
    key_len = int.from_bytes(reader.read(8), "little")
    assert key_len == len(key)
    assert (reader.read(1)[0] != 0) == deleted
    if deleted:
        assert reader.read(key_len) == key
    else:
        value_len = int.from_bytes(reader.read(8), "little")
        assert value_len == len(value)
        assert reader.read(key_len) == key
        assert reader.read(value_len) == value
    assert int.from_bytes(reader.read(16), "little") == timestamp


def test_write_one(tmp_path):
    with WAL.create(tmp_path) as wal:
        wal.set(b"Lime", b"Lime Smoothie", 12345)
        wal.flush()
        with open(wal.path, "rb") as reader:
            check_entry(reader, b"Lime", b"Lime Smoothie", 12345, False)
            assert reader.read() == b""


def test_write_many(tmp_path):
    with WAL.create(tmp_path) as wal:
        for key, value in ENTRIES:
            wal.set(key, value, 77)
        wal.flush()
        with open(wal.path, "rb") as reader:
            for key, value in ENTRIES:
                check_entry(reader, key, value, 77, False)


def test_write_delete(tmp_path):
    with WAL.create(tmp_path) as wal:
        for key, value in ENTRIES:
            wal.set(key, value, 9)
        for key, _ in ENTRIES:
            wal.delete(key, 9)
        wal.flush()
        with open(wal.path, "rb") as reader:
            for key, value in ENTRIES:
                check_entry(reader, key, value, 9, False)
            for key, _ in ENTRIES:
                check_entry(reader, key, None, 9, True)


def test_exact_layout_of_set():
    buffer = io.BytesIO()
    wal = WAL(None, buffer)
    wal.set(b"k", b"vv", 1)
    assert buffer.getvalue() == (
        (1).to_bytes(8, "little") + b"\x00" + (2).to_bytes(8, "little")
        + b"kvv" + (1).to_bytes(16, "little")
    )


def test_iterate_round_trip(tmp_path):
    wal = WAL.create(tmp_path)
    wal.set(b"a", b"1", 1)
    wal.delete(b"a", 2)
    assert list(wal) == [
        WALEntry(b"a", b"1", 1, False),
        WALEntry(b"a", None, 2, True),
    ]
    wal.close()


def test_truncated_entry_is_skipped(tmp_path):
    with WAL.create(tmp_path) as wal:
        wal.set(b"a", b"1", 1)
        wal.set(b"b", b"2", 2)
    data = wal.path.read_bytes()
    wal.path.write_bytes(data[:-3])
    assert [entry.key for entry in read_entries(wal.path)] == [b"a"]


def test_timestamp_out_of_range(tmp_path):
    with WAL.create(tmp_path) as wal:
        with pytest.raises(ValueError):
            wal.set(b"a", b"1", -1)
        with pytest.raises(ValueError):
            wal.delete(b"a", 1 << 128)


def test_from_path_appends(tmp_path):
    path = tmp_path / "log.wal"
    with WAL.from_path(path) as wal:
        wal.set(b"x", b"1", 1)
    with WAL.from_path(path) as wal:
        wal.set(b"y", b"2", 2)
    assert [(entry.key, entry.value) for entry in read_entries(path)] == [
        (b"x", b"1"),
        (b"y", b"2"),
    ]


def test_read_wal_none(tmp_path):
    with WAL.load_from_dir(tmp_path) as new_wal:
        assert new_wal.path.stat().st_size == 0
        assert files_with_ext(tmp_path, "wal") == [new_wal.path]


def test_read_wal_one(tmp_path):
    with WAL.create(tmp_path) as wal:
        for index, (key, value) in enumerate(ENTRIES):
            wal.set(key, value, index)
    with WAL.load_from_dir(tmp_path) as new_wal:
        assert not wal.path.exists()
        with open(new_wal.path, "rb") as reader:
            for index, (key, value) in enumerate(ENTRIES):
                check_entry(reader, key, value, index, False)
        assert files_with_ext(tmp_path, "wal") == [new_wal.path]


def test_read_wal_multiple(tmp_path):
    second_entries = [
        (b"Strawberry", b"Strawberry Smoothie"),
        (b"Blueberry", b"Blueberry Smoothie"),
        (b"Orange", b"Orange Milkshake"),
    ]
    with WAL.create(tmp_path) as first:
        for index, (key, value) in enumerate(ENTRIES):
            first.set(key, value, index)
    with WAL.create(tmp_path) as second:
        for index, (key, value) in enumerate(second_entries):
            second.set(key, value, index + 3)
    assert first.path != second.path

    with WAL.load_from_dir(tmp_path) as new_wal:
        with open(new_wal.path, "rb") as reader:
            for index, (key, value) in enumerate(ENTRIES):
                check_entry(reader, key, value, index, False)
            for index, (key, value) in enumerate(second_entries):
                check_entry(reader, key, value, index + 3, False)
            assert reader.read() == b""
        assert files_with_ext(tmp_path, "wal") == [new_wal.path]


def test_load_keeps_tombstones(tmp_path):
    with WAL.create(tmp_path) as wal:
        wal.set(b"a", b"1", 1)
        wal.delete(b"a", 2)
    with WAL.load_from_dir(tmp_path) as new_wal:
        assert list(new_wal) == [
            WALEntry(b"a", b"1", 1, False),
            WALEntry(b"a", None, 2, True),
        ]


def test_files_with_ext(tmp_path):
    (tmp_path / "one.wal").write_bytes(b"")
    (tmp_path / "two.wal").write_bytes(b"")
    (tmp_path / "other.txt").write_bytes(b"")
    (tmp_path / "plain").write_bytes(b"")
    found = sorted(path.name for path in files_with_ext(tmp_path, "wal"))
    assert found == ["one.wal", "two.wal"]