"""
Claimtree - Metrics Module

Prometheus metrics for snapshot commitment builds.

Exports:
- Snapshot build counters
- Merkle tree build times and sizes
- Proof verification counters
"""

from claimtree.metrics.snapshot_metrics import (
    SnapshotMetrics,
    get_snapshot_metrics,
)

__all__ = [
    "SnapshotMetrics",
    "get_snapshot_metrics",
]
