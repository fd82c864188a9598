from __future__ import annotations

import io
from http.client import BadStatusLine, IncompleteRead
from urllib import request
from urllib.error import HTTPError, URLError

import pytest

from cutlists.ingest.http_fetch import FetchError, build_url, fetch_bytes, iter_remote_chunks


class _FakeResponse(io.BytesIO):
    def __enter__(self) -> _FakeResponse:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def test_build_url_encodes_query_values() -> None:
    assert build_url("http://www.cutlist.at/", "getxml.php", name="a b&c.avi") == (
        "http://www.cutlist.at/getxml.php?name=a+b%26c.avi"
    )
    assert build_url("http://www.cutlist.at", "/getfile.php", id="12") == "http://www.cutlist.at/getfile.php?id=12"


def test_iter_remote_chunks_streams_body(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def _urlopen(req: request.Request, timeout: int) -> _FakeResponse:
        captured["agent"] = req.get_header("User-agent")
        captured["timeout"] = timeout
        return _FakeResponse(b"abcdefghij")

    monkeypatch.setattr(request, "urlopen", _urlopen)

    chunks = list(iter_remote_chunks("http://x/", timeout_seconds=3, user_agent="test-agent", chunk_size=4))

    assert chunks == [b"abcd", b"efgh", b"ij"]
    assert captured == {"agent": "test-agent", "timeout": 3}


def test_fetch_bytes_wraps_http_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def _urlopen(req: request.Request, timeout: int) -> _FakeResponse:
        raise HTTPError(req.full_url, 404, "Not Found", hdrs=None, fp=None)  # type: ignore[arg-type]

    monkeypatch.setattr(request, "urlopen", _urlopen)

    with pytest.raises(FetchError, match="HTTP status 404"):
        fetch_bytes("http://x/getfile.php?id=1")


def test_fetch_bytes_wraps_network_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def _urlopen(req: request.Request, timeout: int) -> _FakeResponse:
        raise URLError("name resolution failed")

    monkeypatch.setattr(request, "urlopen", _urlopen)

    with pytest.raises(FetchError, match="name resolution failed"):
        fetch_bytes("http://x/")


def test_fetch_bytes_wraps_garbled_status_line(monkeypatch: pytest.MonkeyPatch) -> None:
    def _urlopen(req: request.Request, timeout: int) -> _FakeResponse:
        raise BadStatusLine("garbage")

    monkeypatch.setattr(request, "urlopen", _urlopen)

    with pytest.raises(FetchError, match="garbage"):
        fetch_bytes("http://x/getfile.php?id=1")


def test_iter_remote_chunks_wraps_errors_raised_mid_body(monkeypatch: pytest.MonkeyPatch) -> None:
    class _ShortResponse(_FakeResponse):
        def read(self, size: int | None = -1) -> bytes:
            data = super().read(size)
            if not data:
                raise IncompleteRead(b"", 100)
            return data

    monkeypatch.setattr(request, "urlopen", lambda req, timeout: _ShortResponse(b"<cutlists>"))

    stream = iter_remote_chunks("http://x/", chunk_size=4)

    assert next(stream) == b"<cut"
    with pytest.raises(FetchError):
        list(stream)


def test_fetch_bytes_wraps_invalid_urls() -> None:
    with pytest.raises(FetchError, match="unknown url type"):
        fetch_bytes("getfile.php?id=1")
