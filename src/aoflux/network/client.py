"""DispatchClient -- the three network primitives AO tools are built from.

``spawn`` and ``submit_message`` post signed data items to a messenger
unit (MU); ``fetch_result`` reads a message's computed outcome from a
compute unit (CU).
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

import httpx

from aoflux.core.errors import (
    InvalidProcessError,
    NetworkError,
    NotFoundError,
    SigningError,
)
from aoflux.network.models import (
    MessageId,
    MessageResult,
    ModuleVariant,
    ProcessId,
    Tag,
    coerce_tags,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from aoflux.config.schema import NetworkConfig
    from aoflux.signing.dataitem import DataItem
    from aoflux.signing.signer import Signer

logger = logging.getLogger(__name__)

SDK_NAME = "aoflux"
DEFAULT_SPAWN_DATA = "1984"

_ID_RE = re.compile(r"^[A-Za-z0-9_-]{43}$")


def is_valid_id(value: str) -> bool:
    """True for a well-formed 43-character base64url transaction id."""
    return bool(_ID_RE.match(value))


class DispatchClient:
    """Async client for the AO messenger and compute units.

    Usage::

        async with DispatchClient(config.network) as client:
            pid = await client.spawn([Tag("Name", "demo")], signer=signer)
            mid = await client.submit_message(pid, "ping", [], signer)
            result = await client.fetch_result(mid, pid)
    """

    def __init__(
        self,
        config: NetworkConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._mu = httpx.AsyncClient(
            base_url=config.mu_url.rstrip("/"),
            timeout=config.timeout,
            transport=transport,
        )
        self._cu = httpx.AsyncClient(
            base_url=config.cu_url.rstrip("/"),
            timeout=config.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> DispatchClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._mu.aclose()
        await self._cu.aclose()

    def module_for(self, variant: ModuleVariant) -> str:
        if variant is ModuleVariant.SQLITE:
            return self._config.sqlite_module
        return self._config.standard_module

    # -- Primitives ------------------------------------------------------------

    async def spawn(
        self,
        tags: Iterable[Tag | Mapping[str, Any]] | None,
        module_variant: ModuleVariant = ModuleVariant.STANDARD,
        *,
        signer: Signer,
        data: str = DEFAULT_SPAWN_DATA,
    ) -> ProcessId:
        """Spawn a new process and return its id.

        Raises:
            NetworkError: If the MU does not confirm the spawn.
        """
        protocol = [
            Tag("Data-Protocol", "ao"),
            Tag("Variant", "ao.TN.1"),
            Tag("Type", "Process"),
            Tag("Module", self.module_for(module_variant)),
            Tag("Scheduler", self._config.scheduler),
            Tag("SDK", SDK_NAME),
        ]
        item = self._sign(signer, data, [*protocol, *coerce_tags(tags)])
        process_id = await self._post_item(item.to_bytes(), item.id)
        logger.info("Spawned process %s (%s)", process_id, module_variant.value)
        return process_id

    async def submit_message(
        self,
        process_id: ProcessId,
        data: str,
        tags: Iterable[Tag | Mapping[str, Any]] | None,
        signer: Signer,
    ) -> MessageId:
        """Send a signed message to a process and return the message id.

        Raises:
            InvalidProcessError: If the process id is malformed or rejected.
            NetworkError: On any other submission failure.
        """
        if not is_valid_id(process_id):
            raise InvalidProcessError(process_id, "not a 43-character base64url id")
        protocol = [
            Tag("Data-Protocol", "ao"),
            Tag("Variant", "ao.TN.1"),
            Tag("Type", "Message"),
            Tag("SDK", SDK_NAME),
        ]
        item = self._sign(signer, data, [*protocol, *coerce_tags(tags)], target=process_id)
        message_id = await self._post_item(item.to_bytes(), item.id, process_id=process_id)
        logger.debug("Submitted message %s to %s", message_id, process_id)
        return message_id

    async def fetch_result(
        self, message_id: MessageId, process_id: ProcessId
    ) -> MessageResult:
        """Fetch the computed result of a message.

        Raises:
            NotFoundError: If the CU has no result for the message yet.
            NetworkError: On transport failure or an unreadable body.
        """
        try:
            resp = await self._cu.get(
                f"/result/{message_id}", params={"process-id": process_id}
            )
        except httpx.HTTPError as e:
            msg = f"Result fetch failed for {message_id}: {e}"
            raise NetworkError(msg) from e

        if resp.status_code == 404:
            raise NotFoundError(message_id, process_id)
        if resp.status_code >= 400:
            msg = f"CU returned HTTP {resp.status_code} for {message_id}: {_detail(resp)}"
            raise NetworkError(msg)

        try:
            body = resp.json()
        except ValueError as e:
            msg = f"CU returned a non-JSON result for {message_id}"
            raise NetworkError(msg) from e
        if not isinstance(body, dict):
            msg = f"CU returned an unexpected result shape for {message_id}"
            raise NetworkError(msg)
        logger.debug("Fetched result for %s", message_id)
        return MessageResult.from_json(body)

    # -- Internals -------------------------------------------------------------

    @staticmethod
    def _sign(
        signer: Signer, data: str, tags: list[Tag], target: str | None = None
    ) -> DataItem:
        try:
            return signer.create_data_item(data, tags, target=target)
        except SigningError as e:
            msg = f"Could not sign data item: {e}"
            raise NetworkError(msg) from e

    async def _post_item(
        self, payload: bytes, expected_id: str, *, process_id: str | None = None
    ) -> str:
        try:
            resp = await self._mu.post(
                "/",
                content=payload,
                headers={
                    "Content-Type": "application/octet-stream",
                    "Accept": "application/json",
                },
            )
        except httpx.HTTPError as e:
            msg = f"Submission to MU failed: {e}"
            raise NetworkError(msg) from e

        if resp.status_code >= 400:
            detail = _detail(resp)
            if process_id is not None and resp.status_code in (400, 404):
                raise InvalidProcessError(process_id, detail)
            msg = f"MU returned HTTP {resp.status_code}: {detail}"
            raise NetworkError(msg)

        try:
            body = resp.json()
        except ValueError:
            body = {}
        confirmed = body.get("id") if isinstance(body, dict) else None
        if not confirmed:
            msg = "MU did not confirm the submission"
            raise NetworkError(msg)
        if confirmed != expected_id:
            logger.warning("MU confirmed id %s, expected %s", confirmed, expected_id)
        return str(confirmed)


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return str(body.get("error") or body.get("message") or body)
    return str(body)
