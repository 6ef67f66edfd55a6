"""
Pytest configuration and shared fixtures for claimtree tests.
"""

import pytest

from claimtree.crypto.leaf import encode_leaf
from claimtree.services.snapshot import SnapshotBuilder

ADDRESS_A = "0x" + "11" * 32
ADDRESS_B = "0x" + "22" * 32
ADDRESS_C = "0x" + "33" * 32


@pytest.fixture
def sample_entries() -> list[tuple[str, int]]:
    """Three entitlements, odd count."""
    return [
        (ADDRESS_A, 100),
        (ADDRESS_B, 200),
        (ADDRESS_C, 300),
    ]


@pytest.fixture
def sample_leaves(sample_entries: list[tuple[str, int]]) -> list[bytes]:
    """Leaf digests of the sample entitlements."""
    return [encode_leaf(address, amount) for address, amount in sample_entries]


@pytest.fixture
def sample_records() -> list[dict[str, str]]:
    """Snapshot records as delivered by a snapshot export."""
    return [
        {"address": ADDRESS_A, "amount": "100"},
        {"address": ADDRESS_B, "amount": "200"},
        {"address": ADDRESS_C, "amount": "300"},
        {"address": "0x4", "amount": "18446744073709551615"},
        {"address": ADDRESS_A, "amount": "50"},
    ]


@pytest.fixture
def snapshot_builder() -> SnapshotBuilder:
    """Create a snapshot builder with proof self-check enabled."""
    return SnapshotBuilder(verify_proofs=True)
