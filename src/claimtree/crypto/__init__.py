"""
Claimtree - Cryptographic Utilities

Provides leaf encoding, Merkle tree construction, proof generation, and
off-chain proof checking.
"""

from claimtree.crypto.errors import (
    EmptyTreeError,
    EncodingError,
    IndexOutOfRangeError,
    MerkleError,
    SnapshotVerificationError,
)
from claimtree.crypto.leaf import encode_leaf, normalize_address, parse_address, parse_amount
from claimtree.crypto.merkle import (
    MerkleTree,
    combine,
    compute_root_from_proof,
    verify_proof,
)

__all__ = [
    "MerkleTree",
    "MerkleError",
    "EncodingError",
    "EmptyTreeError",
    "IndexOutOfRangeError",
    "SnapshotVerificationError",
    "combine",
    "compute_root_from_proof",
    "encode_leaf",
    "normalize_address",
    "parse_address",
    "parse_amount",
    "verify_proof",
]
