import pytest

from zebra import hashing
from zebra.errors import BranchUnknownError, DeserializeError
from zebra.map import Map
from zebra.map_codec import dumps, loads
from zebra.map_store import Internal


def _filled(count: int) -> Map:
    map_ = Map()
    for i in range(count):
        map_.insert(i, i)
    return map_


def _rebuild_left(node, depth, transform):
    assert isinstance(node, Internal)
    if depth == 0:
        return transform(node)
    return Internal.new(_rebuild_left(node.left, depth - 1, transform), node.right)


def _small() -> Map:
    map_ = Map()
    map_.insert(3, 3)
    map_.insert(4, 4)
    return map_


def test_serialize_empty():
    original = Map()
    deserialized = loads(dumps(original))
    assert deserialized.commit() == original.commit()
    deserialized.check()
    assert deserialized.records() == {}


def test_serialize_full():
    original = _filled(1024)
    deserialized = loads(dumps(original))
    assert deserialized.commit() == original.commit()
    deserialized.check()
    assert deserialized.records() == {i: i for i in range(1024)}


def test_serialize_half():
    original = _filled(1024)
    export = original.export(range(512))
    deserialized = loads(dumps(export))
    assert deserialized.commit() == original.commit()
    deserialized.check()
    assert deserialized.records() == {i: i for i in range(512)}
    with pytest.raises(BranchUnknownError):
        for key in range(512, 1024):
            deserialized.get(key)


def test_serialize_mislabled_small():
    original = _small()
    commitment = original.commit()
    root = original.root
    original.root = Internal(hashing.empty_hash(), root.left, root.right)

    deserialized = loads(dumps(original))
    assert deserialized.commit() == commitment
    deserialized.check()
    assert deserialized.records() == {3: 3, 4: 4}


def test_serialize_flawed_small():
    original = _small()
    root = original.root
    original.root = Internal.new(root.right, root.left)
    with pytest.raises(DeserializeError):
        loads(dumps(original))


def test_serialize_flawed_mislabled_small():
    original = _small()
    root = original.root
    original.root = Internal(root.hash, root.right, root.left)
    with pytest.raises(DeserializeError):
        loads(dumps(original))


def test_serialize_mislabled_big():
    original = _filled(1024)
    commitment = original.commit()
    original.root = _rebuild_left(
        original.root,
        4,
        lambda node: Internal(hashing.empty_hash(), node.left, node.right),
    )

    deserialized = loads(dumps(original))
    assert deserialized.commit() == commitment
    deserialized.check()
    assert deserialized.records() == {i: i for i in range(1024)}


def test_serialize_flawed_big():
    original = _filled(1024)
    original.root = _rebuild_left(
        original.root, 4, lambda node: Internal.new(node.right, node.left)
    )
    with pytest.raises(DeserializeError):
        loads(dumps(original))


def test_serialize_flawed_mislabled_big():
    original = _filled(1024)
    original.root = _rebuild_left(
        original.root, 4, lambda node: Internal(node.hash, node.right, node.left)
    )
    with pytest.raises(DeserializeError):
        loads(dumps(original))


def test_round_trip_various_fields():
    original = Map()
    records = {
        "alice": [1, "x", None],
        b"raw": {"a": 1, "b": (2, 3)},
        (1, 2): 1.5,
        -7: True,
        10**30: frozenset({1, 2}),
    }
    for key, value in records.items():
        original.insert(key, value)

    deserialized = loads(dumps(original))
    assert deserialized.commit() == original.commit()
    assert deserialized.records() == records


def test_round_trip_root_stub():
    commitment = _filled(8).commit()
    deserialized = loads(dumps(Map.root_stub(commitment)))
    assert deserialized.commit() == commitment
    with pytest.raises(BranchUnknownError):
        deserialized.get(0)


def test_empty_data_rejected():
    with pytest.raises(DeserializeError):
        loads(b"")


def test_unknown_tag_rejected():
    with pytest.raises(DeserializeError):
        loads(b"\x09")


def test_trailing_bytes_rejected():
    with pytest.raises(DeserializeError):
        loads(dumps(_filled(4)) + b"\x00")


def test_truncated_data_rejected():
    with pytest.raises(DeserializeError):
        loads(dumps(_filled(4))[:-1])


def test_short_stub_rejected_on_dump():
    with pytest.raises(ValueError):
        dumps(Map.root_stub(b"short"))