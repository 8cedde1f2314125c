"""Unit tests for the analysis backend client."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from tests.helpers import BACKEND
from thesisbot.exceptions import AnalysisError, PdfFetchError
from thesisbot.services.analysis_service import AnalysisClient

GOOD_ANALYSIS = {
    "status": "success",
    "message": "done",
    "data": {
        "summary": "A short summary.",
        "visualization": {"data": {"nodes": []}, "image": "aGVsbG8=", "extra": 1},
    },
}


def _client(settings, upstream) -> AnalysisClient:
    return AnalysisClient(settings, upstream.client())


class TestAnalyzePdf:
    """Tests for AnalysisClient.analyze_pdf."""

    def test_reshapes_backend_answer(self, settings, upstream):
        upstream.add("POST", f"{BACKEND}/upload_pdf_get_sum_graph", httpx.Response(200, json=GOOD_ANALYSIS))

        result = asyncio.run(_client(settings, upstream).analyze_pdf("document_1.pdf", b"%PDF"))

        assert result == {
            "status": "success",
            "message": "done",
            "data": {
                "summary": "A short summary.",
                "visualization": {"data": {"nodes": []}, "image": "aGVsbG8="},
            },
        }

    def test_malformed_answer_is_retried(self, settings, upstream):
        replies = iter([
            httpx.Response(200, json={"status": "success", "data": {}}),
            httpx.Response(200, json=GOOD_ANALYSIS),
        ])
        upstream.add("POST", f"{BACKEND}/upload_pdf_get_sum_graph", lambda request: next(replies))

        result = asyncio.run(_client(settings, upstream).analyze_pdf("document_1.pdf", b"%PDF"))

        assert result["data"]["summary"] == "A short summary."
        assert len(upstream.calls(f"{BACKEND}/upload_pdf_get_sum_graph")) == 2

    def test_persistently_malformed_answer_fails(self, settings, upstream):
        upstream.add("POST", f"{BACKEND}/upload_pdf_get_sum_graph", httpx.Response(200, json=["not", "a", "dict"]))

        with pytest.raises(AnalysisError, match="Invalid response structure"):
            asyncio.run(_client(settings, upstream).analyze_pdf("document_1.pdf", b"%PDF"))
        assert len(upstream.calls(f"{BACKEND}/upload_pdf_get_sum_graph")) == 3


class TestUploadPdf:
    def test_uses_configured_backend_url(self, settings, upstream):
        settings.update(analysis_url="http://other-backend.test:9000/")
        upstream.add("POST", "http://other-backend.test:9000/upload_pdf", httpx.Response(200, json={"ok": True}))

        assert asyncio.run(_client(settings, upstream).upload_pdf("a.pdf", b"%PDF")) == {"ok": True}
        assert upstream.requests[0].url.path == "/upload_pdf"

    def test_unreachable_backend_raises_after_retries(self, settings, upstream):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        upstream.add("POST", f"{BACKEND}/upload_pdf", refuse)

        with pytest.raises(AnalysisError, match="unreachable"):
            asyncio.run(_client(settings, upstream).upload_pdf("a.pdf", b"%PDF"))
        assert len(upstream.calls(f"{BACKEND}/upload_pdf")) == 3


class TestChat:
    def test_returns_reply_text(self, settings, upstream):
        upstream.add("POST", f"{BACKEND}/chatbot", httpx.Response(200, json={"response": "Hello there"}))

        reply = asyncio.run(_client(settings, upstream).chat("hi"))

        assert reply == "Hello there"
        assert json.loads(upstream.requests[0].content) == {"prompt": "hi"}

    def test_missing_response_field_fails(self, settings, upstream):
        upstream.add("POST", f"{BACKEND}/chatbot", httpx.Response(200, json={"answer": "x"}))

        with pytest.raises(AnalysisError, match="Invalid response from chatbot"):
            asyncio.run(_client(settings, upstream).chat("hi"))

    def test_clear_history(self, settings, upstream):
        upstream.add("POST", f"{BACKEND}/clear_history", httpx.Response(200, json={"status": "cleared"}))

        assert asyncio.run(_client(settings, upstream).clear_history()) == {"status": "cleared"}


class TestFetchDocument:
    def test_asks_for_pdf(self, settings, upstream):
        upstream.add("GET", "http://example.com/a.pdf", httpx.Response(200, content=b"%PDF-1.7"))

        data = asyncio.run(_client(settings, upstream).fetch_document("http://example.com/a.pdf"))

        assert data == b"%PDF-1.7"
        assert "application/pdf" in upstream.requests[0].headers["Accept"]

    def test_empty_body_fails(self, settings, upstream):
        upstream.add("GET", "http://example.com/a.pdf", httpx.Response(200, content=b""))

        with pytest.raises(PdfFetchError, match="empty"):
            asyncio.run(_client(settings, upstream).fetch_document("http://example.com/a.pdf"))
