"""
Claimtree - Snapshot Service

Builds the published commitment for an entitlement snapshot:
1. Validate and normalize the (address, amount) records
2. Encode leaves and build the Merkle tree
3. Self-check every proof against the root
4. Package the root and per-entry claim proofs for distribution

A single malformed record fails the whole snapshot. The root is order and
content sensitive, so skipping or repairing a record would silently
commit to a different set.
"""

import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from claimtree.core.config import settings
from claimtree.crypto.errors import (
    EmptyTreeError,
    EncodingError,
    SnapshotVerificationError,
)
from claimtree.crypto.leaf import encode_leaf, normalize_address, parse_amount
from claimtree.crypto.merkle import Digest, MerkleTree, to_digest, verify_proof
from claimtree.metrics import SnapshotMetrics, get_snapshot_metrics

logger = structlog.get_logger(__name__)

RecordLike = Mapping[str, Any] | tuple[str | bytes, int | str | float | Decimal]


class SnapshotEntry(BaseModel):
    """One entitlement record with a canonical address and a u64 amount."""

    model_config = ConfigDict(frozen=True)

    address: str
    amount: int

    @field_validator("address", mode="before")
    @classmethod
    def canonical_address(cls, value: Any) -> str:
        return normalize_address(value)

    @field_validator("amount", mode="before")
    @classmethod
    def u64_amount(cls, value: Any) -> int:
        return parse_amount(value)

    @property
    def leaf(self) -> Digest:
        """Leaf digest of this entry."""
        return encode_leaf(self.address, self.amount)


@dataclass
class ClaimProof:
    """
    Everything a claimant needs to prove one entitlement on chain.

    Attributes:
        index: Position of the entry in the snapshot
        address: Canonical account address
        amount: Entitled amount
        leaf: Leaf digest of (address, amount)
        proof: Sibling digests ordered from leaf to root
        root: Published Merkle root
    """

    index: int
    address: str
    amount: int
    leaf: Digest
    proof: list[Digest]
    root: Digest

    def verify(self) -> bool:
        """
        Recompute the leaf from (address, amount) and walk the proof.

        Returns:
            True if the claim reproduces the root, False if it does not or
            if its fields no longer encode
        """
        try:
            leaf = encode_leaf(self.address, self.amount)
            if leaf != self.leaf:
                return False
            return verify_proof(leaf, self.proof, self.root)
        except EncodingError:
            return False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for distribution."""
        return {
            "index": self.index,
            "address": self.address,
            # String keeps u64 values exact for JSON consumers
            "amount": str(self.amount),
            "leaf": "0x" + self.leaf.hex(),
            "proof": ["0x" + p.hex() for p in self.proof],
            "root": "0x" + self.root.hex(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClaimProof":
        """Deserialize claim from dictionary."""
        return cls(
            index=int(data["index"]),
            address=normalize_address(data["address"]),
            amount=parse_amount(data["amount"]),
            leaf=to_digest(data["leaf"]),
            proof=[to_digest(p) for p in data["proof"]],
            root=to_digest(data["root"]),
        )

    def to_move_args(self) -> dict[str, Any]:
        """Claim arguments shaped for a Move call: proof as ``vector<vector<u8>>``."""
        return {
            "address": self.address,
            "amount": self.amount,
            "proof": [list(p) for p in self.proof],
        }


@dataclass(frozen=True)
class Snapshot:
    """A built snapshot commitment: the tree plus the entries it commits to."""

    tree: MerkleTree
    entries: tuple[SnapshotEntry, ...]

    def __post_init__(self) -> None:
        if len(self.entries) != self.tree.leaf_count:
            raise SnapshotVerificationError(
                f"Snapshot has {len(self.entries)} entries for a "
                f"{self.tree.leaf_count}-leaf tree"
            )

    @property
    def root(self) -> Digest:
        return self.tree.root

    @property
    def root_hex(self) -> str:
        return self.tree.root_hex

    @property
    def entry_count(self) -> int:
        return len(self.entries)

    def claim(self, index: int) -> ClaimProof:
        """
        Build the claim proof for one entry.

        Raises:
            IndexOutOfRangeError: If index is outside the snapshot
        """
        proof = self.tree.get_proof(index)
        entry = self.entries[index]
        return ClaimProof(
            index=index,
            address=entry.address,
            amount=entry.amount,
            leaf=self.tree.get_leaf(index),
            proof=proof,
            root=self.tree.root,
        )

    def claims(self) -> list[ClaimProof]:
        """Claim proofs for every entry, in snapshot order."""
        return [self.claim(i) for i in range(self.entry_count)]

    def claims_for_address(self, address: str | bytes) -> list[ClaimProof]:
        """
        Claim proofs for every entry belonging to an address.

        Entries are not deduplicated, so an address may hold several.
        """
        target = normalize_address(address)
        return [
            self.claim(i)
            for i, entry in enumerate(self.entries)
            if entry.address == target
        ]

    def to_dict(self) -> dict[str, Any]:
        """Serialize root and all claims to a JSON-compatible dictionary."""
        return {
            "root": self.root_hex,
            "entry_count": self.entry_count,
            "claims": [c.to_dict() for c in self.claims()],
        }


class SnapshotBuilder:
    """
    Builds snapshot commitments from raw entitlement records.

    Records may be mappings with ``address``/``amount`` keys, two-item
    ``(address, amount)`` tuples, or SnapshotEntry instances.
    """

    def __init__(
        self,
        verify_proofs: bool | None = None,
        metrics: SnapshotMetrics | None = None,
    ) -> None:
        """
        Initialize snapshot builder.

        Args:
            verify_proofs: Self-check every proof after building
                (defaults to VERIFY_PROOFS_ON_BUILD)
            metrics: Metrics sink (defaults to the global instance when
                METRICS_ENABLED)
        """
        if verify_proofs is None:
            verify_proofs = settings.VERIFY_PROOFS_ON_BUILD
        if metrics is None and settings.METRICS_ENABLED:
            metrics = get_snapshot_metrics()

        self._verify_proofs = verify_proofs
        self._metrics = metrics

    @staticmethod
    def _to_entry(record: RecordLike | SnapshotEntry) -> SnapshotEntry:
        if isinstance(record, SnapshotEntry):
            return record
        if isinstance(record, Mapping):
            return SnapshotEntry.model_validate(record)
        if isinstance(record, (tuple, list)) and len(record) == 2:
            address, amount = record
            return SnapshotEntry(address=address, amount=amount)
        raise EncodingError(f"Unsupported record: {record!r}")

    def parse_entries(
        self,
        records: Iterable[RecordLike | SnapshotEntry],
    ) -> list[SnapshotEntry]:
        """
        Validate and normalize snapshot records.

        Raises:
            EncodingError: On the first malformed record
        """
        entries = []

        for index, record in enumerate(records):
            try:
                entries.append(self._to_entry(record))
            except (ValidationError, EncodingError) as e:
                if self._metrics:
                    self._metrics.record_encoding_failure()
                logger.warning(
                    "Rejected snapshot record",
                    index=index,
                    error=str(e),
                )
                if isinstance(e, ValidationError):
                    message = "; ".join(err["msg"] for err in e.errors())
                else:
                    message = str(e)
                raise EncodingError(
                    f"Invalid snapshot record at index {index}: {message}"
                ) from e

        return entries

    def build(self, records: Iterable[RecordLike | SnapshotEntry]) -> Snapshot:
        """
        Build a snapshot commitment.

        Args:
            records: Ordered entitlement records

        Returns:
            Snapshot with root and claim proofs

        Raises:
            EncodingError: If any record is malformed
            EmptyTreeError: If there are no records
            SnapshotVerificationError: If a proof fails the self-check
        """
        build_start = time.perf_counter()

        try:
            entries = self.parse_entries(records)
            tree_start = time.perf_counter()
            tree = MerkleTree.build(entry.leaf for entry in entries)
            tree_duration = time.perf_counter() - tree_start
            snapshot = Snapshot(tree=tree, entries=tuple(entries))

            if self._verify_proofs:
                self._verify_all(snapshot)

        except EncodingError:
            self._record_failure("encoding")
            raise
        except EmptyTreeError:
            logger.warning("Snapshot has no entries")
            self._record_failure("empty")
            raise
        except SnapshotVerificationError:
            self._record_failure("verification")
            raise

        duration = time.perf_counter() - build_start
        if self._metrics:
            self._metrics.record_build(duration, snapshot.entry_count, tree_duration)

        logger.info(
            "Snapshot commitment built",
            root=snapshot.root_hex,
            entry_count=snapshot.entry_count,
            depth=tree.depth,
            duration_ms=round(duration * 1000, 2),
        )

        return snapshot

    def _verify_all(self, snapshot: Snapshot) -> None:
        """Check that every proof reproduces the root."""
        tree = snapshot.tree

        for index, proof in enumerate(tree.get_all_proofs()):
            valid = verify_proof(tree.leaves[index], proof, tree.root)
            if self._metrics:
                self._metrics.record_merkle_verification(valid)
            if not valid:
                logger.error(
                    "Proof self-check failed",
                    index=index,
                    root=tree.root_hex,
                )
                raise SnapshotVerificationError(
                    f"Proof for leaf {index} does not reproduce root {tree.root_hex}"
                )

        if self._metrics:
            self._metrics.record_proofs_generated(tree.leaf_count)

    def _record_failure(self, reason: str) -> None:
        if self._metrics:
            self._metrics.record_build_failed(reason)


def build_snapshot(
    records: Iterable[RecordLike | SnapshotEntry],
    verify_proofs: bool | None = None,
) -> Snapshot:
    """Build a snapshot commitment with a default-configured builder."""
    return SnapshotBuilder(verify_proofs=verify_proofs).build(records)
