from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import pytest

from rootbyte.config import config
from rootbyte.core.article import NewsItem
from rootbyte.fetchers.gemini import GenerationResult
from rootbyte.fetchers.newsapi import FetchResult

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def write_article(directory: Path, slug: str, body: str = "Body text.", **meta) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    lines = ["---"] + [f"{key}: {value}" for key, value in meta.items()] + ["---", "", body]
    path = directory / f"{slug}.md"
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def news(title: str, description: str = "", source: str = "Wire") -> NewsItem:
    return NewsItem(title=title, description=description, source_name=source,
                    url=f"https://news.example/{abs(hash(title))}", published_at="2026-10-19T10:00:00Z")


class FakeNewsClient:
    def __init__(self, items: Optional[List[NewsItem]] = None, ok: bool = True, configured: bool = True):
        self.items = items or []
        self.ok = ok
        self.configured = configured
        self.calls = []

    async def fetch_top_headlines(self, page_size):
        self.calls.append(page_size)
        if not self.ok:
            return FetchResult.failure("boom")
        return FetchResult(ok=True, items=list(self.items))

    async def close_session(self):
        pass


class FakeGenerator:
    def __init__(self, body: str = "<p>Generated brief.</p>", connection: Optional[str] = "Linked to history."):
        self.body = body
        self.connection = connection
        self.body_calls = []
        self.connection_calls = []

    async def generate_body(self, headline, items):
        self.body_calls.append((headline, list(items)))
        return GenerationResult(self.body, fallback=False)

    async def generate_root_connection(self, headline, slug):
        self.connection_calls.append((headline, slug))
        return GenerationResult(self.connection, fallback=self.connection is None)

    async def close(self):
        pass


@pytest.fixture
def site(tmp_path, monkeypatch):
    """Point the configured content paths at a temporary site tree."""
    paths = {
        "site_dir": tmp_path / "src",
        "content_dir": tmp_path / "src" / "content",
        "articles_dir": tmp_path / "src" / "content" / "articles",
        "backup_dir": tmp_path / "backups",
    }
    for key, value in paths.items():
        monkeypatch.setitem(config.config["paths"], key, str(value))
    paths["articles_dir"].mkdir(parents=True)
    return paths
