"""
Claimtree

Off-chain Merkle commitments and inclusion proofs for (address, amount)
entitlement snapshots, compatible with a SHA3-256 on-chain verifier that
hashes sibling pairs in canonical byte order.
"""

from claimtree.crypto import (
    EmptyTreeError,
    EncodingError,
    IndexOutOfRangeError,
    MerkleError,
    MerkleTree,
    SnapshotVerificationError,
    combine,
    compute_root_from_proof,
    encode_leaf,
    verify_proof,
)
from claimtree.services import ClaimProof, Snapshot, SnapshotBuilder, SnapshotEntry, build_snapshot

__version__ = "1.0.0"

__all__ = [
    "ClaimProof",
    "EmptyTreeError",
    "EncodingError",
    "IndexOutOfRangeError",
    "MerkleError",
    "MerkleTree",
    "Snapshot",
    "SnapshotBuilder",
    "SnapshotEntry",
    "SnapshotVerificationError",
    "build_snapshot",
    "combine",
    "compute_root_from_proof",
    "encode_leaf",
    "verify_proof",
]
