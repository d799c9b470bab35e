"""
Section Data Access Layer.

Fetches each section from the remote analytics endpoint and substitutes the
synthetic generator output on any failure, so the dashboard always has
something to show.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

import httpx
import numpy as np

from ..errors import TransportFailure
from ..sections import ALL_SECTIONS, SectionId
from ..synthetic import GENERATORS
from .models import SectionPayload, parse_payload

logger = logging.getLogger("sast.connector.loader")

LIVE = "live"
SYNTHETIC = "synthetic"


@dataclass(frozen=True)
class SectionResult:
    section: SectionId
    payload: SectionPayload
    source: str  # "live" or "synthetic"
    reason: Optional[str] = None


class SectionLoader:
    """
    Loads section payloads concurrently.

    No retries are attempted: a failure degrades straight to synthetic data.
    The only timeout is the transport-level one passed at construction.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rng: Optional[np.random.Generator] = None,
        path: str = "/analytics",
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.path = path
        self._transport = transport
        self._rng = rng
        self.sources: Dict[SectionId, str] = {}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    async def fetch(self, client: httpx.AsyncClient, section: SectionId) -> SectionPayload:
        """Fetch one section; raises TransportFailure on any failure."""
        try:
            response = await client.get(self.path, params={"section": section.value})
        except httpx.HTTPError as exc:
            raise TransportFailure(f"{type(exc).__name__}: {exc}") from exc

        if not response.is_success:
            raise TransportFailure(f"HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as exc:
            raise TransportFailure("body is not JSON") from exc

        return parse_payload(section, body)

    def synthesize(self, section: SectionId) -> SectionPayload:
        return parse_payload(section, GENERATORS[section](self._rng))

    async def fetch_or_fallback(self, client: httpx.AsyncClient, section: SectionId) -> SectionResult:
        """
        Remote payload for ``section``, or its synthetic substitute.

        Never raises for environmental failures; the result always carries a
        valid payload.
        """
        try:
            payload = await self.fetch(client, section)
        except TransportFailure as exc:
            logger.warning(f"Section '{section.value}' unavailable ({exc}); using synthetic data")
            return SectionResult(section, self.synthesize(section), SYNTHETIC, str(exc))

        logger.debug(f"Section '{section.value}' loaded from remote")
        return SectionResult(section, payload, LIVE)

    async def load_all(
        self,
        sections: Iterable = ALL_SECTIONS,
        client: Optional[httpx.AsyncClient] = None,
    ) -> Dict[SectionId, SectionPayload]:
        """Load every requested section concurrently and join on completion."""
        wanted = sorted({SectionId.parse(s) for s in sections}, key=lambda s: s.value)
        logger.info(f"Loading {len(wanted)} sections from {self.base_url}")

        if client is None:
            async with self._client() as owned:
                results = await asyncio.gather(*(self.fetch_or_fallback(owned, s) for s in wanted))
        else:
            results = await asyncio.gather(*(self.fetch_or_fallback(client, s) for s in wanted))

        for result in results:
            self.sources[result.section] = result.source

        synthetic = [r.section.value for r in results if r.source == SYNTHETIC]
        if synthetic:
            logger.info(f"Synthetic fallback used for: {', '.join(synthetic)}")
        return {r.section: r.payload for r in results}

    def load_all_sync(self, sections: Iterable = ALL_SECTIONS) -> Dict[SectionId, SectionPayload]:
        """Blocking wrapper for callers without a running event loop."""
        return asyncio.run(self.load_all(sections))
