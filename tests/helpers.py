"""Fake upstream HTTP services shared by the tests.

External HTTP services (analysis backend, search APIs, PDF hosts) are
replaced by :class:`FakeUpstream`, an ``httpx.MockTransport`` handler that
routes requests by method and URL prefix and records every call.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Union

import httpx

BACKEND = "http://backend.test:5000"
S2 = "https://api.semanticscholar.org/graph/v1"

Responder = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeUpstream:
    """Routes mocked HTTP requests by (method, URL prefix)."""

    def __init__(self):
        self.routes: dict[tuple[str, str], Responder] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, prefix: str, responder: Responder) -> None:
        self.routes[(method.upper(), prefix)] = responder

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        # Longest prefix wins (".../paper/search/match" before ".../paper/search")
        for (method, prefix), responder in sorted(
            self.routes.items(), key=lambda item: len(item[0][1]), reverse=True
        ):
            if request.method == method and url.startswith(prefix):
                if callable(responder):
                    return responder(request)
                # fresh copy so a canned response can be served repeatedly
                return httpx.Response(
                    responder.status_code, headers=responder.headers, content=responder.content
                )
        return httpx.Response(404, text="no route")

    def calls(self, prefix: str) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url).startswith(prefix)]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def semantic_parts_reply(concepts: list[str]) -> httpx.Response:
    """Backend reply with the concept list wrapped in a json fence."""
    blob = json.dumps({"main_concepts": concepts})
    return httpx.Response(200, json={"response": f"```json\n{blob}\n```"})


def s2_item(paper_id: str, title: str, pdf_url: str | None = None, **extra: Any) -> dict[str, Any]:
    """A Semantic Scholar search record."""
    item: dict[str, Any] = {
        "paperId": paper_id,
        "title": title,
        "url": f"https://www.semanticscholar.org/paper/{paper_id}",
        "openAccessPdf": {"url": pdf_url} if pdf_url else None,
        "authors": [{"authorId": "a1", "name": "Jane Q Doe"}],
        "year": 2021,
    }
    item.update(extra)
    return item


