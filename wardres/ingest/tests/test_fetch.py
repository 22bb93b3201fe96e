import pytest
import requests

from wardres.ingest import fetch as fetch_mod
from wardres.ingest.fetch import fetch_document


class _FakeResponse:
    def __init__(self, content: bytes, status: int = 200):
        self.content = content
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_fetch_writes_document(tmp_path, monkeypatch):
    calls = {}

    def fake_get(url, timeout):
        calls["url"] = url
        calls["timeout"] = timeout
        return _FakeResponse(b"%PDF-1.4 results")

    monkeypatch.setattr(fetch_mod.requests, "get", fake_get)
    dest = tmp_path / "data" / "results.pdf"

    out = fetch_document("https://example.org/results.pdf", dest, timeout_s=5.0)

    assert out == dest
    assert dest.read_bytes() == b"%PDF-1.4 results"
    assert calls == {"url": "https://example.org/results.pdf", "timeout": 5.0}
    # no temp files left behind
    assert [p.name for p in dest.parent.iterdir()] == ["results.pdf"]


def test_fetch_raises_on_http_error(tmp_path, monkeypatch):
    monkeypatch.setattr(
        fetch_mod.requests, "get", lambda url, timeout: _FakeResponse(b"", 404)
    )
    dest = tmp_path / "results.pdf"
    with pytest.raises(requests.HTTPError):
        fetch_document("https://example.org/missing.pdf", dest)
    assert not dest.exists()
