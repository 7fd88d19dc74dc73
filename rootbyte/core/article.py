"""
Data models for RootByte.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DEFAULT_CATEGORY = "ai"
DEFAULT_STATUS = "published"
REMOVED_MARKER = "[Removed]"


@dataclass
class Article:
    """
    An article read from a Markdown file: its slug, frontmatter and body.
    """
    slug: str
    meta: Dict[str, Any] = field(default_factory=dict)
    body: str = ""

    @property
    def status(self) -> str:
        return str(self.meta.get("status") or DEFAULT_STATUS)

    @property
    def is_published(self) -> bool:
        return self.status == "published"

    @property
    def category(self) -> str:
        return str(self.meta.get("category") or DEFAULT_CATEGORY)

    @property
    def title(self) -> str:
        return str(self.meta.get("title") or "Untitled")


@dataclass
class NewsItem:
    """
    A headline returned by the news API. Never persisted as-is.
    """
    title: str
    description: str = ""
    source_name: Optional[str] = None
    url: Optional[str] = None
    published_at: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "NewsItem":
        source = data.get("source") or {}
        return cls(
            title=data.get("title") or "",
            description=data.get("description") or "",
            source_name=source.get("name") if isinstance(source, dict) else None,
            url=data.get("url"),
            published_at=data.get("publishedAt"),
        )

    @property
    def text(self) -> str:
        """Lowercased title and description, the haystack for keyword matching."""
        return f"{self.title} {self.description}".lower()

    @property
    def usable(self) -> bool:
        return bool(self.title.strip()) and REMOVED_MARKER not in self.title


@dataclass
class BreakingRecord:
    """
    The breaking-news banner persisted in breaking.json.

    There are exactly two shapes: ``inactive()`` with every text field empty,
    and an active record with a headline and a future expiry.
    """
    active: bool
    headline: str = ""
    short: str = ""
    category: str = "tech"
    timestamp: str = ""
    link: str = "breaking.html"
    expires: str = ""
    body: str = ""
    spike_keyword: Optional[str] = None
    spike_count: Optional[int] = None

    @classmethod
    def inactive(cls) -> "BreakingRecord":
        return cls(active=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BreakingRecord":
        if not data.get("active"):
            return cls.inactive()
        return cls(
            active=True,
            headline=data.get("headline") or "",
            short=data.get("short") or "",
            category=data.get("category") or "tech",
            timestamp=data.get("timestamp") or "",
            link=data.get("link") or "breaking.html",
            expires=data.get("expires") or "",
            body=data.get("body") or "",
            spike_keyword=data.get("spike_keyword"),
            spike_count=data.get("spike_count"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "active": self.active,
            "headline": self.headline,
            "short": self.short,
            "category": self.category,
            "timestamp": self.timestamp,
            "link": self.link,
            "expires": self.expires,
            "body": self.body,
        }
        if self.spike_keyword is not None:
            data["spike_keyword"] = self.spike_keyword
            data["spike_count"] = self.spike_count
        return data


@dataclass
class RootArticle:
    """A historical article that current news can be linked back to."""
    slug: str
    keywords: List[str]
    category: str
