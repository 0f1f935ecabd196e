"""
Shared pytest fixtures used across the modular test suite.
"""

from __future__ import annotations

from typing import Callable, Dict
from unittest.mock import AsyncMock

import pytest

from microsoc.core.errors import ReputationLookupFailure
from microsoc.core.models import EngineConfig, Operator, RawEvent, ReputationRecord, Role
from microsoc.engine import CommandCenter, EventPipeline
from microsoc.reputation import ReputationResolver
from microsoc.store import OperatorDirectory

BASE_TS = 1_700_000_000.0


@pytest.fixture
def make_raw() -> Callable[..., RawEvent]:
    """Factory for RawEvents at a fixed base timestamp."""

    def _make(address: str, ts: float = BASE_TS, attack_type: str = "SQLi") -> RawEvent:
        return RawEvent(
            source_address=address,
            attack_type=attack_type,
            target_system="Zord Control",
            received_at=ts,
        )

    return _make


@pytest.fixture
def config() -> EngineConfig:
    """Default detection thresholds with a fast maintenance loop."""
    return EngineConfig(
        window_seconds=10.0,
        spike_threshold=5,
        sweep_interval_seconds=0.05,
        circuit_breaker_threshold=3,
        circuit_breaker_cooldown_seconds=60.0,
        subscriber_queue_size=16,
    )


@pytest.fixture
def reputation_table() -> Dict[str, ReputationRecord]:
    """Address -> record served by ``mock_client``; unknown addresses fail."""
    return {}


@pytest.fixture
def mock_client(reputation_table: Dict[str, ReputationRecord]) -> AsyncMock:
    def _lookup(address: str) -> ReputationRecord:
        if address not in reputation_table:
            raise ReputationLookupFailure(f"no data for {address}")
        return reputation_table[address]

    client = AsyncMock()
    client.lookup = AsyncMock(side_effect=_lookup)
    return client


@pytest.fixture
def resolver(mock_client: AsyncMock, config: EngineConfig) -> ReputationResolver:
    return ReputationResolver(client=mock_client, config=config)


@pytest.fixture
def pipeline(config: EngineConfig, resolver: ReputationResolver) -> EventPipeline:
    return EventPipeline(config=config, resolver=resolver)


@pytest.fixture
def directory() -> OperatorDirectory:
    return OperatorDirectory(
        [
            Operator(id="op1", name="Red Ranger", role=Role.ADMIN),
            Operator(id="op2", name="Alpha 5", role=Role.ANALYST),
        ]
    )


@pytest.fixture
def center(pipeline: EventPipeline, directory: OperatorDirectory) -> CommandCenter:
    return CommandCenter(pipeline, directory)
