"""
Claimtree - Merkle Tree Implementation

Provides deterministic Merkle tree construction with SHA3-256 hashing and
inclusion proof generation for entitlement snapshots.

Conventions shared with the on-chain verifier:
- Leaves are SHA3-256 digests of ``address (32) || amount_le (8)``
- Internal nodes hash the two children in canonical order: the
  byte-lexicographically smaller digest goes first
- Leaves keep their input order; they are never sorted

Because pairs are ordered canonically, a proof is just the list of
sibling digests. No left/right direction is recorded.

For odd-length levels, the last node is promoted (not duplicated) to the
next level, and proofs carry no element for that level.
"""

import hashlib
from collections.abc import Iterable, Sequence
from decimal import Decimal

from claimtree.crypto.errors import EmptyTreeError, EncodingError, IndexOutOfRangeError
from claimtree.crypto.leaf import DIGEST_LENGTH, HEX_RE, encode_leaf

Digest = bytes


def to_digest(value: bytes | str) -> Digest:
    """
    Coerce a digest given as bytes or hex string into 32 raw bytes.

    Raises:
        EncodingError: If the value is not a 32-byte digest
    """
    if isinstance(value, (bytes, bytearray)):
        digest = bytes(value)
    elif isinstance(value, str):
        hex_str = value[2:] if value[:2] in ("0x", "0X") else value
        if not HEX_RE.match(hex_str) or len(hex_str) % 2:
            raise EncodingError(f"Digest is not hexadecimal: {value!r}")
        digest = bytes.fromhex(hex_str)
    else:
        raise EncodingError(f"Unsupported digest type: {type(value).__name__}")

    if len(digest) != DIGEST_LENGTH:
        raise EncodingError(
            f"Digest is {len(digest)} bytes, expected {DIGEST_LENGTH}"
        )
    return digest


def combine(a: Digest, b: Digest) -> Digest:
    """
    Compute the parent digest of two sibling nodes.

    The smaller digest (byte-lexicographic order) is hashed first, so
    ``combine(a, b) == combine(b, a)``. The verifier must apply the same
    rule or roots silently diverge.

    Args:
        a: One child digest
        b: The other child digest

    Returns:
        SHA3-256 of ``first || second``
    """
    first, second = (a, b) if a <= b else (b, a)

    hasher = hashlib.sha3_256()
    hasher.update(first)
    hasher.update(second)
    return hasher.digest()


class MerkleTree:
    """
    Merkle tree over an ordered sequence of leaf digests.

    Features:
    - Deterministic construction from ordered leaves
    - Canonical-order pair hashing
    - Odd node promotion instead of duplication
    - Immutable after construction

    Example:
        >>> tree = MerkleTree.from_entries([("0x11", 100), ("0x22", 200)])
        >>> proof = tree.get_proof(0)
        >>> verify_proof(tree.get_leaf(0), proof, tree.root)
        True
    """

    def __init__(self, levels: Sequence[Sequence[Digest]]) -> None:
        """
        Initialize Merkle tree (internal use).

        Use build() or from_entries() to construct trees.
        """
        self._levels = tuple(tuple(level) for level in levels)

    @classmethod
    def build(cls, leaves: Iterable[bytes | str]) -> "MerkleTree":
        """
        Construct a Merkle tree from leaf digests.

        Args:
            leaves: Ordered leaf digests (32 raw bytes or hex strings)

        Returns:
            Constructed MerkleTree

        Raises:
            EmptyTreeError: If leaves is empty
            EncodingError: If a leaf is not a 32-byte digest
        """
        current_level = [to_digest(leaf) for leaf in leaves]
        if not current_level:
            raise EmptyTreeError("Cannot create Merkle tree from empty leaves")

        levels = [current_level]

        while len(current_level) > 1:
            next_level = []

            for i in range(0, len(current_level), 2):
                if i + 1 < len(current_level):
                    next_level.append(combine(current_level[i], current_level[i + 1]))
                else:
                    # Odd case: promote the last node
                    next_level.append(current_level[i])

            levels.append(next_level)
            current_level = next_level

        return cls(levels)

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[tuple[str | bytes, int | str | float | Decimal]],
    ) -> "MerkleTree":
        """
        Construct a Merkle tree from (address, amount) entitlements.

        Raises:
            EmptyTreeError: If entries is empty
            EncodingError: If any entry is malformed
        """
        return cls.build(encode_leaf(address, amount) for address, amount in entries)

    @property
    def levels(self) -> tuple[tuple[Digest, ...], ...]:
        """All levels, leaves first and root last."""
        return self._levels

    @property
    def leaves(self) -> tuple[Digest, ...]:
        """Get all leaf digests in input order."""
        return self._levels[0]

    @property
    def leaf_count(self) -> int:
        """Get the number of leaves."""
        return len(self._levels[0])

    @property
    def depth(self) -> int:
        """Number of hashing levels above the leaves."""
        return len(self._levels) - 1

    @property
    def root(self) -> Digest:
        """Get the root digest (Merkle root)."""
        return self._levels[-1][0]

    @property
    def root_hex(self) -> str:
        """Root digest as ``0x``-prefixed hex."""
        return "0x" + self.root.hex()

    def get_root(self) -> Digest:
        return self.root

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.leaf_count:
            raise IndexOutOfRangeError(
                f"Leaf index {index} out of bounds for {self.leaf_count} leaves"
            )

    def get_leaf(self, index: int) -> Digest:
        """
        Get the digest of a leaf by index.

        Raises:
            IndexOutOfRangeError: If index out of bounds
        """
        self._check_index(index)
        return self._levels[0][index]

    def get_proof(self, index: int) -> list[Digest]:
        """
        Generate inclusion proof for a leaf.

        Walks the levels bottom-up and collects the sibling digest at each
        level where the node has one. A promoted odd node contributes
        nothing at that level.

        Args:
            index: Index of the leaf to prove

        Returns:
            Sibling digests ordered from leaf to root

        Raises:
            IndexOutOfRangeError: If index out of bounds
        """
        self._check_index(index)

        proof = []
        current_index = index

        for level in self._levels[:-1]:
            sibling_index = current_index ^ 1
            if sibling_index < len(level):
                proof.append(level[sibling_index])
            current_index //= 2

        return proof

    def get_proof_hex(self, index: int) -> list[str]:
        """Proof for a leaf as ``0x``-prefixed hex strings."""
        return ["0x" + digest.hex() for digest in self.get_proof(index)]

    def get_proof_bytes(self, index: int) -> list[list[int]]:
        """Proof for a leaf as lists of byte values (``vector<vector<u8>>``)."""
        return [list(digest) for digest in self.get_proof(index)]

    def get_all_proofs(self) -> list[list[Digest]]:
        """
        Generate proofs for all leaves.

        Returns:
            List of proofs, one per leaf in input order
        """
        return [self.get_proof(i) for i in range(self.leaf_count)]


def compute_root_from_proof(leaf: bytes | str, proof: Iterable[bytes | str]) -> Digest:
    """
    Compute the root digest from a leaf and its proof.

    Folds combine() over the proof elements, which is exactly what the
    on-chain verifier does.

    Args:
        leaf: Leaf digest
        proof: Sibling digests ordered from leaf to root

    Returns:
        Computed root digest
    """
    current = to_digest(leaf)

    for element in proof:
        current = combine(current, to_digest(element))

    return current


def verify_proof(
    leaf: bytes | str,
    proof: Iterable[bytes | str],
    expected_root: bytes | str,
) -> bool:
    """
    Verify a proof against a specific root digest.

    Args:
        leaf: Leaf digest
        proof: Sibling digests ordered from leaf to root
        expected_root: Published Merkle root

    Returns:
        True if proof reconstructs to expected root
    """
    return compute_root_from_proof(leaf, proof) == to_digest(expected_root)
