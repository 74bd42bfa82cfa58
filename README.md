# zebra

Authenticated data structures built on BLAKE2b hashes, using only the standard library:

- `zebra.map.Map`: a key-value map stored in a Merkle-prefix tree. Every set of
  records has exactly one tree shape, so a map's commitment proves both that a
  key is present and that a key is absent. Parts of a map can be exported (the
  rest replaced by stubs that keep the commitment) and merged back together.
- `zebra.merkle_set.MerkleSet`: the same structure holding items without values.
- `zebra.vector.Vector`: an ordered list of items under a Merkle root, with
  `zebra.proof.Proof` inclusion proofs, optionally packing several items per leaf.
- `zebra.wal.WAL`: an append-only write-ahead log of set and delete operations.

Keys, values and items are hashed through a deterministic encoding
(`zebra.hashing.encode`) that accepts `None`, `bool`, `int`, `float`, `str`,
`bytes`, and lists, tuples, dicts and sets of these. Any other type raises
`zebra.errors.HashError`. All errors derive from `zebra.errors.ZebraError`.

## Installation

```
pip install .
```

## Maps

```python
from zebra.map import Map
from zebra.errors import BranchUnknownError

colors = Map()
colors.insert("Alice", "red")
colors.insert("Bob", "green")
colors.insert("Charlie", "blue")

assert colors.get("Alice") == "red"
assert colors.remove("Bob") == "green"
assert colors.insert("Charlie", "cyan") == "blue"

# Keep only the branch leading to "Alice"; the commitment is unchanged.
part = colors.export(["Alice"])
assert part.commit() == colors.commit()
assert part.get("Alice") == "red"
try:
    part.get("Charlie")
except BranchUnknownError:
    pass  # that branch was replaced by a stub

# Fill the stubs back in from another export of the same map.
part.import_map(colors.export(["Charlie"]))
assert part.get("Charlie") == "cyan"
```

`import_map` raises `MapIncompatibleError` when the two commitments differ.
`Map.root_stub(commitment)` builds a map known only by its commitment,
`records()` returns the pairs held locally, `check()` raises a `TopologyError`
if the tree shape is invalid, and `copy()` returns an independent map.

Maps can be serialized with `zebra.map_codec.dumps` and read back with
`zebra.map_codec.loads`; loading recomputes every hash and raises
`DeserializeError` for malformed data or a tree whose shape is invalid.

## Sets

```python
from zebra.merkle_set import MerkleSet

members = MerkleSet()
assert members.insert(7)       # True: newly added
assert 7 in members
assert members.remove(7)       # True: it was present
```

`MerkleSet` also offers `commit`, `export`, `import_set`, `root_stub` and `items`.

## Vectors and proofs

```python
from zebra.proof import Proof
from zebra.vector import Vector

vector = Vector([10, 20, 30], packing=1)
proof = vector.prove(1)
proof.verify(vector.root(), 20)  # raises RootMismatchError on failure

vector.set(1, 25)
vector.prove(1).verify(vector.root(), 25)

same = Proof.from_bytes(proof.to_bytes())
restored = Vector.from_bytes(vector.to_bytes(), packing=1)
assert restored.root() == vector.root()
```

A vector must hold at least one item; an empty one raises `ValueError`.
Indices out of range raise `IndexError`.

## Write-ahead log

```python
from zebra.wal import WAL

with WAL.create("data") as wal:   # "data" must be an existing directory
    wal.set(b"Lime", b"Lime Smoothie", 1)
    wal.delete(b"Lime", 2)
    for entry in wal:
        print(entry.key, entry.value, entry.timestamp, entry.deleted)
```

`WAL.create` names the file after the current time in microseconds with a
`.wal` extension. `WAL.from_path` appends to an existing file.
`WAL.load_from_dir` replays every `.wal` file in a directory, in file-name
order, into a new log, and then deletes the old files. `zebra.wal.read_entries`
reads a log file without opening it for writing.

## What this package does not do

The log only records operations. The package keeps no in-memory table built
from them, and `WAL.load_from_dir` returns just the merged log. There is no
database layer, no syncing of tables between peers, and no command-line tool.

## Running the tests

```
pip install .[test]
pytest
```