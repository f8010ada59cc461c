"""In-memory AO network for deterministic testing.

Serves the MU, the CU, and arbitrary blueprint URLs through an
``httpx.MockTransport`` so the real client code runs end to end.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx

from aoflux.signing.dataitem import DataItem

MU_HOST = "mu.ao-testnet.xyz"
CU_HOST = "cu.ao-testnet.xyz"

PROCESS_ID = "P" * 43

Responder = Callable[[DataItem], dict[str, Any] | None]


def tag_value(item: DataItem, name: str) -> str | None:
    for tag in item.tags:
        if tag.name == name:
            return tag.value
    return None


class FakeAONetwork:
    """Records submitted data items and serves canned results.

    ``responder`` maps each submitted message to its CU result body;
    returning None makes the CU answer 404 for that message.
    """

    def __init__(self, responder: Responder | None = None) -> None:
        self.responder: Responder = responder or (lambda item: {"Messages": []})
        self.items: list[DataItem] = []
        self.results: dict[str, dict[str, Any] | None] = {}
        self.blueprints: dict[str, str] = {}
        self.result_requests: list[httpx.Request] = []
        self.mu_status = 200
        self.mu_body: Any = None
        self.cu_status: int | None = None
        # Number of leading CU fetches per message answered with 404.
        self.pending_fetches = 0
        self._fetch_counts: dict[str, int] = {}

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    @property
    def last_item(self) -> DataItem:
        return self.items[-1]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        host = request.url.host
        if host == MU_HOST:
            return self._handle_mu(request)
        if host == CU_HOST:
            return self._handle_cu(request)
        url = str(request.url)
        if url in self.blueprints:
            return httpx.Response(200, text=self.blueprints[url])
        return httpx.Response(404, text="Not Found")

    def _handle_mu(self, request: httpx.Request) -> httpx.Response:
        item = DataItem.from_bytes(request.content)
        self.items.append(item)
        if self.mu_status >= 400:
            return httpx.Response(self.mu_status, json={"error": "rejected"})
        if self.mu_body is not None:
            return httpx.Response(200, json=self.mu_body)
        if tag_value(item, "Type") == "Message":
            self.results[item.id] = self.responder(item)
        return httpx.Response(202, json={"id": item.id, "message": "Processing"})

    def _handle_cu(self, request: httpx.Request) -> httpx.Response:
        self.result_requests.append(request)
        if self.cu_status is not None:
            return httpx.Response(self.cu_status, text="unavailable")
        message_id = request.url.path.rsplit("/", 1)[-1]
        seen = self._fetch_counts.get(message_id, 0)
        self._fetch_counts[message_id] = seen + 1
        if seen < self.pending_fetches:
            return httpx.Response(404, json={"error": "not found"})
        body = self.results.get(message_id)
        if body is None:
            return httpx.Response(404, json={"error": "not found"})
        return httpx.Response(200, content=json.dumps(body).encode())
