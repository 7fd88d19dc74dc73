import asyncio
import json

import aiohttp
import pytest

from rootbyte.fetchers import newsapi
from rootbyte.fetchers.newsapi import NewsApiClient
from rootbyte.utils.http import HttpError, get_json


class FakeResponse:
    def __init__(self, text, status=200):
        self._text = text
        self.status = status

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    def __init__(self, text=None, status=200, error=None):
        self.text = text
        self.status = status
        self.error = error
        self.requests = []

    def get(self, url, params=None):
        self.requests.append((url, params))
        if self.error:
            raise self.error
        return FakeResponse(self.text, self.status)


class TestGetJson:
    def test_decodes_body(self):
        session = FakeSession(text='{"status": "ok"}')
        assert asyncio.run(get_json(session, "https://api.example", params={"q": 1})) == {"status": "ok"}
        assert session.requests == [("https://api.example", {"q": 1})]

    def test_non_json_body(self):
        session = FakeSession(text="<html>Bad gateway</html>", status=502)
        with pytest.raises(HttpError, match="502"):
            asyncio.run(get_json(session, "https://api.example"))

    def test_transport_error(self):
        session = FakeSession(error=aiohttp.ClientConnectionError("refused"))
        with pytest.raises(HttpError, match="refused"):
            asyncio.run(get_json(session, "https://api.example"))


def _client(session):
    return NewsApiClient(api_key="key", endpoint="https://newsapi.example/top", session=session)


class TestNewsApiClient:
    def test_parses_articles_and_drops_removed(self):
        payload = {"status": "ok", "articles": [
            {"title": "OpenAI ships - Wire", "description": "d", "source": {"name": "Wire"},
             "url": "https://w/1", "publishedAt": "2026-10-19T09:00:00Z"},
            {"title": "[Removed]", "source": {"name": None}},
            {"title": None, "description": "no title"},
        ]}
        session = FakeSession(text=json.dumps(payload))
        result = asyncio.run(_client(session).fetch_top_headlines(30))

        assert result.ok
        assert [item.title for item in result.items] == ["OpenAI ships - Wire"]
        assert result.items[0].source_name == "Wire"
        assert result.items[0].published_at == "2026-10-19T09:00:00Z"
        url, params = session.requests[0]
        assert url == "https://newsapi.example/top"
        assert params == {"category": "technology", "language": "en", "pageSize": 30, "apiKey": "key"}

    def test_error_status_is_failure(self):
        session = FakeSession(text='{"status": "error", "message": "apiKeyInvalid"}', status=401)
        result = asyncio.run(_client(session).fetch_top_headlines(20))
        assert not result.ok
        assert "apiKeyInvalid" in result.error

    def test_http_error_is_failure(self, monkeypatch):
        async def broken(*args, **kwargs):
            raise HttpError("timed out")

        monkeypatch.setattr(newsapi, "get_json", broken)
        result = asyncio.run(_client(FakeSession()).fetch_top_headlines(20))
        assert not result.ok
        assert result.error == "timed out"

    def test_unconfigured_client_makes_no_request(self):
        session = FakeSession(text="{}")
        client = NewsApiClient(api_key="", session=session)
        result = asyncio.run(client.fetch_top_headlines(20))
        assert not client.configured
        assert not result.ok
        assert session.requests == []
