"""
Claimtree - Snapshot Metrics

Prometheus metrics for snapshot commitment builds.

Metrics Categories:
- Snapshot builds and failures
- Merkle tree building
- Proof self-verification
"""

import time

import structlog
from prometheus_client import Counter, Gauge, Histogram, Info

from claimtree.core.config import settings

logger = structlog.get_logger(__name__)


class SnapshotMetrics:
    """
    Centralized metrics for snapshot commitment builds.

    Provides visibility into:
    - Build success/failure
    - Merkle tree size and build time
    - Proof generation and verification
    """

    def __init__(self) -> None:
        """Initialize all snapshot metrics."""
        self._init_build_metrics()
        self._init_merkle_metrics()
        self._init_info_metrics()

    def _init_build_metrics(self) -> None:
        """Initialize snapshot build metrics."""
        self.snapshot_builds = Counter(
            "claimtree_snapshot_builds_total",
            "Total snapshot commitment builds",
            ["result"],
        )

        self.encoding_failures = Counter(
            "claimtree_snapshot_encoding_failures_total",
            "Snapshot records rejected by the leaf encoder",
        )

        self.entries_committed = Counter(
            "claimtree_snapshot_entries_committed_total",
            "Total entries committed across all snapshots",
        )

        self.snapshot_build_duration = Histogram(
            "claimtree_snapshot_build_duration_seconds",
            "Snapshot build time, including parsing and proof self-check",
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0],
        )

        self.last_root_timestamp = Gauge(
            "claimtree_snapshot_last_root_timestamp",
            "Timestamp of last successful snapshot build (Unix epoch)",
        )

    def _init_merkle_metrics(self) -> None:
        """Initialize Merkle tree metrics."""
        self.merkle_build_duration = Histogram(
            "claimtree_merkle_build_duration_seconds",
            "Merkle tree build time",
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
        )

        self.merkle_tree_size = Histogram(
            "claimtree_merkle_tree_size",
            "Number of leaves in Merkle tree",
            buckets=[10, 50, 100, 500, 1000, 5000, 10000, 50000],
        )

        self.proofs_generated = Counter(
            "claimtree_merkle_proofs_generated_total",
            "Merkle proofs generated",
        )

        self.merkle_verifications = Counter(
            "claimtree_merkle_verifications_total",
            "Merkle proof self-verifications",
            ["result"],
        )

    def _init_info_metrics(self) -> None:
        """Initialize info metrics."""
        self.service_info = Info(
            "claimtree_service",
            "Claimtree service information",
        )

    # Convenience methods

    def record_build(
        self,
        duration: float,
        tree_size: int,
        tree_duration: float,
    ) -> None:
        """Record successful snapshot build."""
        self.snapshot_builds.labels(result="success").inc()
        self.snapshot_build_duration.observe(duration)
        self.merkle_build_duration.observe(tree_duration)
        self.merkle_tree_size.observe(tree_size)
        self.entries_committed.inc(tree_size)
        self.last_root_timestamp.set(time.time())

    def record_build_failed(self, reason: str) -> None:
        """Record failed snapshot build."""
        self.snapshot_builds.labels(result=reason).inc()

    def record_encoding_failure(self) -> None:
        """Record a record rejected by the encoder."""
        self.encoding_failures.inc()

    def record_proofs_generated(self, count: int) -> None:
        """Record proof generation."""
        self.proofs_generated.inc(count)

    def record_merkle_verification(self, valid: bool) -> None:
        """Record Merkle proof verification."""
        result = "valid" if valid else "invalid"
        self.merkle_verifications.labels(result=result).inc()

    def set_service_info(self, version: str, environment: str) -> None:
        """Set service info labels."""
        self.service_info.info({
            "version": version,
            "environment": environment,
        })


# Singleton instance
_snapshot_metrics: SnapshotMetrics | None = None


def get_snapshot_metrics() -> SnapshotMetrics:
    """Get global snapshot metrics instance."""
    global _snapshot_metrics
    if _snapshot_metrics is None:
        _snapshot_metrics = SnapshotMetrics()
        _snapshot_metrics.set_service_info(
            version=settings.VERSION,
            environment=settings.ENV,
        )
        logger.debug("Snapshot metrics registered")
    return _snapshot_metrics
