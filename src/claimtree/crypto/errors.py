"""
Claimtree - Merkle Errors

Exception types raised while encoding leaves, building trees and
extracting proofs. All of them are construction-time failures: a call
that raises leaves no partially built state behind.
"""


class MerkleError(Exception):
    """Base exception for Merkle commitment errors."""

    pass


class EncodingError(MerkleError, ValueError):
    """Malformed address, amount or digest."""

    pass


class EmptyTreeError(MerkleError, ValueError):
    """Tree build requested with zero leaves."""

    pass


class IndexOutOfRangeError(MerkleError, IndexError):
    """Leaf or proof requested for an index outside the tree."""

    pass


class SnapshotVerificationError(MerkleError):
    """A generated proof did not reproduce the tree root."""

    pass
