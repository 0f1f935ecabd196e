from __future__ import annotations

from typing import Any, Optional, Protocol

import httpx

from ..core.errors import ReputationLookupFailure
from ..core.models import EngineConfig, ReputationRecord


class ReputationClient(Protocol):
    """Transport to an external reputation service."""

    async def lookup(self, address: str) -> ReputationRecord:
        """Return the reputation of ``address`` or raise ReputationLookupFailure."""
        ...


class AbuseIPDBClient:
    """
    Looks addresses up against the AbuseIPDB v2 ``check`` endpoint.

    The request timeout is owned here; the resolver only sees a record or a
    ReputationLookupFailure. ``transport`` lets callers plug in an
    ``httpx.MockTransport`` or a custom connection pool.
    """

    DEFAULT_BASE_URL = "https://api.abuseipdb.com/api/v2"
    MAX_AGE_DAYS = 90

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(
        cls,
        api_key: str,
        config: EngineConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AbuseIPDBClient":
        """Build a client whose request timeout is ``config.lookup_timeout_seconds``."""
        return cls(api_key, timeout=config.lookup_timeout_seconds, transport=transport)

    async def lookup(self, address: str) -> ReputationRecord:
        """
        Query AbuseIPDB for ``address``.

        Raises
        ------
        ReputationLookupFailure
            On timeouts, connection errors, non-2xx statuses (quota exhaustion
            is a 429), undecodable bodies, or missing fields.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.get(
                    f"{self._base_url}/check",
                    params={"ipAddress": address, "maxAgeInDays": self.MAX_AGE_DAYS},
                    headers={"Key": self._api_key, "Accept": "application/json"},
                )
                response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise ReputationLookupFailure(f"lookup for {address} failed: {exc}") from exc
        except ValueError as exc:
            raise ReputationLookupFailure(f"malformed response for {address}") from exc

        return self.normalize(address, payload)

    @staticmethod
    def normalize(address: str, payload: Any) -> ReputationRecord:
        """Turn an AbuseIPDB ``check`` payload into a ReputationRecord."""
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise ReputationLookupFailure(f"response for {address} has no data object")

        region = data.get("countryName") or data.get("countryCode")
        score = data.get("abuseConfidenceScore")
        if not isinstance(region, str) or not region.strip():
            raise ReputationLookupFailure(f"response for {address} has no country")
        # bool is an int subclass; reject it explicitly
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise ReputationLookupFailure(f"response for {address} has no abuse score")

        return ReputationRecord(
            origin_region=region.strip(),
            abuse_score=max(0, min(100, int(score))),
        )
