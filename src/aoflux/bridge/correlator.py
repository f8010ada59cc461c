"""Result correlation: submit a message, let it settle, classify the outcome.

The network computes message results asynchronously, so a result is not
available the instant a submission is confirmed. The correlator waits a
settle interval before fetching. With the default ``fixed`` strategy the
fetch happens exactly once; a missing result surfaces as
:class:`NotFoundError` and the caller decides whether to re-invoke. The
``backoff`` strategy polls on :class:`NotFoundError` with bounded
exponential backoff instead.

Every fetched result classifies into exactly one of:

- ``Failure(ERROR)``: the result carries an ``Error``
- ``Success``: the first emitted message's ``Data``
- :class:`EmptyResultError`: neither an error nor any message
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from aoflux.bridge.normalize import normalize
from aoflux.core.errors import EmptyResultError, FluxError, NetworkError, NotFoundError
from aoflux.core.retry import PollConfig, poll_until_ready

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from aoflux.config.schema import SettleConfig
    from aoflux.network.client import DispatchClient
    from aoflux.network.models import MessageId, MessageResult, ProcessId, Tag
    from aoflux.signing.signer import Signer

logger = logging.getLogger(__name__)


class OutcomeKind(enum.Enum):
    SUCCESS = "success"
    ERROR = "error"
    EMPTY = "empty"
    NETWORK = "network"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


@dataclass(frozen=True, slots=True)
class Success:
    """A usable answer, already normalized to text."""

    text: str
    kind: OutcomeKind = OutcomeKind.SUCCESS

    @property
    def is_error(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class Failure:
    """A logical failure rendered as text."""

    kind: OutcomeKind
    text: str

    @property
    def is_error(self) -> bool:
        return True


Outcome = Success | Failure


def classify(
    result: MessageResult, *, message_id: MessageId = "", process_id: ProcessId = ""
) -> Outcome:
    """Classify a settled result.

    Raises:
        EmptyResultError: If the result has no error and no messages.
    """
    if result.has_error:
        return Failure(kind=OutcomeKind.ERROR, text=normalize(result.error))
    if result.messages:
        # Multi-message responses collapse to their first message.
        return Success(text=normalize(result.messages[0].data))
    raise EmptyResultError(message_id, process_id)


def failure_from(error: FluxError) -> Failure:
    """Render a bridge error as a Failure outcome."""
    if isinstance(error, EmptyResultError):
        kind = OutcomeKind.EMPTY
    elif isinstance(error, NotFoundError):
        kind = OutcomeKind.NOT_FOUND
    elif isinstance(error, NetworkError):
        kind = OutcomeKind.NETWORK
    else:
        kind = OutcomeKind.INTERNAL
    return Failure(kind=kind, text=str(error))


class ResultCorrelator:
    """Submits messages through a :class:`DispatchClient` and awaits results."""

    def __init__(self, client: DispatchClient, settle: SettleConfig) -> None:
        self._client = client
        self._settle = settle

    @property
    def client(self) -> DispatchClient:
        return self._client

    async def submit_and_collect(
        self,
        process_id: ProcessId,
        data: str,
        tags: Iterable[Tag | Mapping[str, Any]] | None,
        signer: Signer,
        settle_delay_ms: int | None = None,
    ) -> tuple[MessageId, MessageResult]:
        """Submit, settle, and return the raw result with its message id.

        Submission errors propagate immediately and are never retried here.
        """
        message_id = await self._client.submit_message(process_id, data, tags, signer)

        delay_ms = self._settle.delay_ms if settle_delay_ms is None else settle_delay_ms
        await asyncio.sleep(delay_ms / 1000)

        result = await self._fetch(message_id, process_id)
        return message_id, result

    async def submit_and_await(
        self,
        process_id: ProcessId,
        data: str,
        tags: Iterable[Tag | Mapping[str, Any]] | None,
        signer: Signer,
        settle_delay_ms: int | None = None,
    ) -> Outcome:
        """Submit a message and classify its settled result.

        Raises:
            NetworkError: On submission or fetch failure.
            NotFoundError: If the result has not materialized.
            EmptyResultError: If the result carries neither error nor message.
        """
        message_id, result = await self.submit_and_collect(
            process_id, data, tags, signer, settle_delay_ms
        )
        outcome = classify(result, message_id=message_id, process_id=process_id)
        logger.debug("Message %s settled as %s", message_id, outcome.kind.value)
        return outcome

    async def _fetch(self, message_id: MessageId, process_id: ProcessId) -> MessageResult:
        if self._settle.strategy != "backoff":
            return await self._client.fetch_result(message_id, process_id)
        return await poll_until_ready(
            lambda: self._client.fetch_result(message_id, process_id),
            PollConfig.from_settle(self._settle),
        )
