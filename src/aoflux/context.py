"""Process-wide context shared, read-only, by every tool invocation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from aoflux.bridge.correlator import ResultCorrelator
from aoflux.network.client import DispatchClient
from aoflux.signing.signer import load_signer

if TYPE_CHECKING:
    from aoflux.config.schema import FluxConfig
    from aoflux.signing.signer import Signer


@dataclass(frozen=True)
class FluxContext:
    """Signer, network clients and settings for one server instance."""

    config: FluxConfig
    signer: Signer
    client: DispatchClient
    correlator: ResultCorrelator
    http: httpx.AsyncClient

    @classmethod
    def create(
        cls,
        config: FluxConfig,
        *,
        signer: Signer | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> FluxContext:
        """Build a context; loads or generates the wallet unless one is given."""
        # Resolved first: a bad wallet must not leave clients open.
        signer = signer or load_signer(config.wallet)
        client = DispatchClient(config.network, transport=transport)
        return cls(
            config=config,
            signer=signer,
            client=client,
            correlator=ResultCorrelator(client, config.settle),
            http=httpx.AsyncClient(
                timeout=config.network.timeout,
                follow_redirects=True,
                transport=transport,
            ),
        )

    async def __aenter__(self) -> FluxContext:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()
        await self.http.aclose()
