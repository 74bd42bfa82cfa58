"""Exception hierarchy for maps, sets and vectors."""


class ZebraError(Exception):
    """Base class of every error raised by this package."""

    description = "Unspecified error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.description)


class MapError(ZebraError):
    """An operation on a map failed."""

    description = "Map operation failed"


class VectorError(ZebraError):
    """An operation on a vector failed."""

    description = "Vector operation failed"


class ProofError(ZebraError):
    """A proof failed to verify."""

    description = "Proof verification failed"


class HashError(MapError, VectorError, ProofError):
    """A value could not be hashed."""

    description = "Failed to hash field"


class BranchUnknownError(MapError):
    """The operation reached a part of the tree that is only known by its hash."""

    description = "Attempted to operate on an unknown branch"


class MapIncompatibleError(MapError):
    """Two maps with different commitments were combined."""

    description = "Attempted to import incompatible map"


class TopologyError(ZebraError):
    """A tree violates the structural invariants of a map."""

    description = "Flawed topology"


class CompactnessViolationError(TopologyError):
    """An internal node has children that should have been collapsed."""

    description = "Children violate compactness"


class PathViolationError(TopologyError):
    """A leaf sits outside of the path of its key."""

    description = "Leaf outside of its key path"


class DeserializeError(ZebraError):
    """Serialized data could not be turned back into a valid structure."""

    description = "Failed to deserialize"


class RootMismatchError(ProofError):
    """A proof leads to a root different from the expected one."""

    description = "Root mismatch"