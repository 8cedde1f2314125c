"""HTTP-level tests for the FastAPI application."""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from tests.helpers import BACKEND, S2, s2_item, semantic_parts_reply
from thesisbot.api.app import app
from thesisbot.api.state import state

PDF_BYTES = b"%PDF-1.4 fake"


@pytest.fixture
def client(settings, upstream):
    """TestClient whose outgoing HTTP goes to the fake upstream."""
    state.transport = httpx.MockTransport(upstream)
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        state.transport = None


def _s2_by_query(results: dict[str, list[dict]]):
    def respond(request: httpx.Request) -> httpx.Response:
        data = results.get(request.url.params["query"], [])
        return httpx.Response(200, json={"total": len(data), "data": data})
    return respond


class TestHealth:
    def test_reports_configured_backend(self, client):
        body = client.get("/api/health").json()

        assert body["status"] == "ok"
        assert body["analysisUrl"] == BACKEND
        assert body["searchProvider"] == "semantic_scholar"

    def test_startup_does_not_create_export_dir(self, client, settings):
        assert client.get("/api/health").status_code == 200
        assert not settings.export_dir.exists()


class TestThesisSearchFlow:
    """Thesis search followed by bulk upload of the selected papers."""

    def test_search_then_upload_reports_partial_failure(self, client, upstream):
        upstream.add("POST", f"{BACKEND}/semantic_parts",
                     semantic_parts_reply(["smoking health effects", "tobacco policy"]))
        upstream.add("GET", f"{S2}/paper/search", _s2_by_query({
            "smoking health effects": [s2_item("s1", "Smoking A", "http://example.com/a.pdf")],
            "tobacco policy": [s2_item("t1", "Tobacco B", "http://example.com/b.pdf")],
        }))
        upstream.add("GET", "http://example.com/a.pdf", httpx.Response(200, content=PDF_BYTES))
        upstream.add("GET", "http://example.com/b.pdf", httpx.Response(404))
        upstream.add("POST", f"{BACKEND}/upload_pdf", httpx.Response(200, json={"status": "ok"}))

        search = client.post("/api/theses/search", json={"thesis": "effects of smoking on health"})

        assert search.status_code == 200
        body = search.json()
        assert body["status"] == "success"
        assert [g["concept"] for g in body["groups"]] == ["smoking health effects", "tobacco policy"]
        assert body["totalResults"] == 2

        selected = [g["papers"][0] for g in body["groups"]]
        upload = client.post("/api/upload-batch", json={"papers": selected})

        assert upload.status_code == 200
        report = upload.json()
        assert report["summary"] == "1 succeeded, 1 failed"
        assert [(o["paperId"], o["status"]) for o in report["outcomes"]] == [
            ("s1", "success"),
            ("t1", "error"),
        ]
        assert len(upstream.calls(f"{BACKEND}/upload_pdf")) == 1

    def test_malformed_concepts_give_error_state(self, client, upstream):
        upstream.add("POST", f"{BACKEND}/semantic_parts",
                     httpx.Response(200, json={"response": "not json at all"}))

        response = client.post("/api/theses/search", json={"thesis": "effects of smoking"})

        assert response.status_code == 502
        body = response.json()
        assert body["status"] == "error"
        assert body["message"].startswith("Search failed")
        assert body["groups"] == []
        assert upstream.calls(S2) == []

    def test_blank_thesis(self, client):
        assert client.post("/api/theses/search", json={"thesis": "  "}).status_code == 400

    def test_upload_batch_skips_papers_without_pdf(self, client, upstream):
        response = client.post("/api/upload-batch", json={"papers": [{"paperId": "x", "title": "No PDF"}]})

        assert response.json()["outcomes"] == []
        assert response.json()["summary"] == "0 succeeded, 0 failed"
        assert upstream.requests == []


class TestSearchRoutes:
    def test_semantic_parts_requires_query(self, client):
        response = client.post("/api/semanticparts", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing user_query"}

    def test_semantic_parts_passthrough(self, client, upstream):
        upstream.add("POST", f"{BACKEND}/semantic_parts", semantic_parts_reply(["a"]))

        response = client.post("/api/semanticparts", json={"user_query": "a thesis"})

        assert response.status_code == 200
        assert "main_concepts" in response.json()["response"]

    def test_semantic_parts_backend_failure(self, client, upstream):
        upstream.add("POST", f"{BACKEND}/semantic_parts", httpx.Response(500))

        response = client.post("/api/semanticparts", json={"user_query": "a thesis"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to get semantic parts"}

    def test_library_page(self, client, upstream):
        upstream.add("GET", f"{S2}/paper/search", _s2_by_query({
            "smoking": [s2_item("s1", "Smoking A", "http://example.com/a.pdf")],
        }))

        body = client.post("/api/library", json={"query": "smoking", "limit": 3, "offset": 0}).json()

        assert body["papers"][0]["paperId"] == "s1"
        assert body["hasMore"] is True
        assert body["nextOffset"] == 3

    def test_search_papers_no_open_access(self, client, upstream):
        upstream.add("GET", f"{S2}/paper/search/match", httpx.Response(200, json={"data": []}))

        assert client.post("/api/search-papers", json={"query": "closed"}).status_code == 404

    def test_library_malformed_upstream_body(self, client, upstream):
        upstream.add("GET", f"{S2}/paper/search", httpx.Response(200, text="<html>rate limited</html>"))

        response = client.post("/api/library", json={"query": "smoking"})

        assert response.status_code == 500
        assert response.json() == {"error": "Semantic Scholar returned invalid JSON"}

    def test_search_papers_malformed_upstream_body(self, client, upstream):
        upstream.add("GET", f"{S2}/paper/search/match", httpx.Response(200, text="oops"))

        response = client.post("/api/search-papers", json={"query": "closed"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to search for papers"}


class TestPdfRoutes:
    def test_proxy_returns_pdf_bytes(self, client, upstream):
        upstream.add("GET", "http://example.com/a.pdf", httpx.Response(200, content=PDF_BYTES))

        response = client.post("/api/proxy-pdf", json={"pdfUrl": "http://example.com/a.pdf"})

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content == PDF_BYTES

    def test_proxy_failure(self, client, upstream):
        upstream.add("GET", "http://example.com/a.pdf", httpx.Response(403))

        response = client.post("/api/proxy-pdf", json={"pdfUrl": "http://example.com/a.pdf"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch PDF"}

    def test_analyze_pdf(self, client, upstream):
        upstream.add("GET", "http://example.com/a.pdf", httpx.Response(200, content=PDF_BYTES))
        upstream.add("POST", f"{BACKEND}/upload_pdf_get_sum_graph", httpx.Response(200, json={
            "status": "success",
            "data": {"summary": "S", "visualization": {"data": {}, "image": "img"}},
        }))

        response = client.post("/api/analyzepdf", data={"pdfUrl": "http://example.com/a.pdf"})

        assert response.status_code == 200
        assert response.json()["data"]["summary"] == "S"


class TestCollectionRoutes:
    def test_crud_and_papers(self, client):
        created = client.post("/api/collections", json={"name": "Smoking", "thesis": "effects"})
        assert created.status_code == 201
        cid = created.json()["id"]

        paper = {"paperId": "p1", "title": "Smoking and Health", "url": "https://example.com/p1",
                 "year": 2021, "authors": [{"id": "a1", "name": "Jane Q Doe"}], "selected": True}
        added = client.post(f"/api/collections/{cid}/papers", json={"papers": [paper, paper]})
        assert added.json() == {"added": 1, "message": "Added 1 paper to your collection"}

        listed = client.get("/api/collections").json()
        assert [(c["id"], c["papersCount"]) for c in listed] == [(cid, 1)]

        stored = client.get(f"/api/collections/{cid}/papers/p1").json()
        assert "selected" not in stored

        citations = client.get(f"/api/collections/{cid}/citations", params={"style": "APA"}).json()
        assert citations["citations"] == [
            "Doe, J. Q. (2021). Smoking and Health. Retrieved from https://example.com/p1"
        ]

        assert client.delete(f"/api/collections/{cid}").status_code == 200
        assert client.get(f"/api/collections/{cid}").status_code == 404

    def test_unknown_collection_is_404(self, client):
        response = client.post("/api/collections/nope/papers", json={"papers": [{"paperId": "p1"}]})

        assert response.status_code == 404
        assert response.json()["status"] == "error"

    def test_blank_name(self, client):
        assert client.post("/api/collections", json={"name": " "}).status_code == 400

    def test_unknown_citation_style(self, client):
        cid = client.post("/api/collections", json={"name": "C"}).json()["id"]

        assert client.get(f"/api/collections/{cid}/citations", params={"style": "Harvard"}).status_code == 400


class TestChatRoutes:
    def test_chat_turn_is_stored(self, client, upstream):
        upstream.add("POST", f"{BACKEND}/chatbot", httpx.Response(200, json={"response": "Hi!"}))
        cid = client.post("/api/collections", json={"name": "C"}).json()["id"]

        response = client.post("/api/chat", json={"prompt": "hello", "collectionId": cid, "paperId": "p1"})

        assert response.status_code == 200
        assert response.json()["message"]["content"] == "Hi!"
        history = client.get(f"/api/collections/{cid}/messages", params={"paper_id": "p1"}).json()
        assert [(m["content"], m["isUser"]) for m in history] == [("hello", True), ("Hi!", False)]
        assert client.get(f"/api/collections/{cid}/messages").json() == []

    def test_chatbot_failure(self, client, upstream):
        upstream.add("POST", f"{BACKEND}/chatbot", httpx.Response(200, json={}))

        response = client.post("/api/chat", json={"prompt": "hello"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process message"}

    def test_unknown_collection_skips_backend(self, client, upstream):
        upstream.add("POST", f"{BACKEND}/chatbot", httpx.Response(200, json={"response": "Hi!"}))

        response = client.post("/api/chat", json={"prompt": "hello", "collectionId": "nope"})

        assert response.status_code == 404
        assert upstream.calls(f"{BACKEND}/chatbot") == []
