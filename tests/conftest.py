"""Shared test fixtures for aoflux."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from aoflux.config.schema import FluxConfig
from aoflux.context import FluxContext
from aoflux.signing.signer import Signer
from tests.fixtures.network import FakeAONetwork

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


@pytest.fixture(scope="session")
def signer() -> Signer:
    """One RSA-4096 wallet for the whole run; key generation is slow."""
    return Signer.generate()


@pytest.fixture
def network() -> FakeAONetwork:
    """In-memory MU/CU whose messages settle with an empty result by default."""
    return FakeAONetwork()


@pytest.fixture
def config() -> FluxConfig:
    """Defaults, with no settle delay so tests run fast."""
    return FluxConfig(settle={"delay_ms": 0})  # type: ignore[arg-type]


@pytest.fixture
async def ctx(
    config: FluxConfig, signer: Signer, network: FakeAONetwork
) -> AsyncIterator[FluxContext]:
    """A FluxContext wired to the fake network."""
    context = FluxContext.create(config, signer=signer, transport=network.transport)
    yield context
    await context.aclose()
