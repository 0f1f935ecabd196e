"""Reputation layer: external lookup transport, circuit breaker and the caching resolver."""

from .circuit_breaker import CircuitBreaker
from .client import AbuseIPDBClient, ReputationClient
from .resolver import (
    FALLBACK_REGIONS,
    LOCAL_NETWORK,
    ReputationResolver,
    fallback_record,
    is_local_address,
)

__all__ = [
    "AbuseIPDBClient",
    "CircuitBreaker",
    "FALLBACK_REGIONS",
    "LOCAL_NETWORK",
    "ReputationClient",
    "ReputationResolver",
    "fallback_record",
    "is_local_address",
]
