"""
Claimtree - Services Package

Provides snapshot commitment building on top of the Merkle primitives.
"""

from claimtree.services.snapshot import (
    ClaimProof,
    Snapshot,
    SnapshotBuilder,
    SnapshotEntry,
    build_snapshot,
)

__all__ = [
    "ClaimProof",
    "Snapshot",
    "SnapshotBuilder",
    "SnapshotEntry",
    "build_snapshot",
]
