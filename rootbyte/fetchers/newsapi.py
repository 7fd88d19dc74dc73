"""
NewsAPI headline fetcher for RootByte.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional
import aiohttp

from rootbyte.config import get_config, news_api_key
from rootbyte.core.article import NewsItem
from rootbyte.utils.http import HttpError, create_session, get_json

# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """
    Outcome of one headline fetch: either items or the reason there are none.
    """
    ok: bool
    items: List[NewsItem] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "FetchResult":
        return cls(ok=False, error=error)


class NewsApiClient:
    """
    Fetches top technology headlines from NewsAPI.

    One attempt per call and no retries; every failure is returned as a
    ``FetchResult`` rather than raised.
    """
    def __init__(self, api_key: Optional[str] = None, endpoint: Optional[str] = None,
                 category: Optional[str] = None, language: Optional[str] = None,
                 timeout: Optional[float] = None, session: Optional[aiohttp.ClientSession] = None):
        self.api_key = api_key if api_key is not None else news_api_key()
        self.endpoint = endpoint or get_config('news_api.endpoint')
        self.category = category or get_config('news_api.category')
        self.language = language or get_config('news_api.language')
        self.timeout = timeout or get_config('news_api.timeout_seconds')
        self._session = session

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def session(self) -> aiohttp.ClientSession:
        """
        Lazy initialization of aiohttp session.

        Returns:
            aiohttp.ClientSession: The HTTP session
        """
        if self._session is None:
            self._session = create_session()
        return self._session

    async def close_session(self):
        """Close aiohttp session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def fetch_top_headlines(self, page_size: int) -> FetchResult:
        """
        Fetch up to ``page_size`` headlines.

        Args:
            page_size: NewsAPI pageSize parameter

        Returns:
            FetchResult with usable items, or ok=False and an error message
        """
        if not self.configured:
            return FetchResult.failure("NEWS_API_KEY not set")

        params = {
            'category': self.category,
            'language': self.language,
            'pageSize': page_size,
            'apiKey': self.api_key,
        }

        try:
            payload = await get_json(self.session, self.endpoint, params=params, timeout=self.timeout)
        except HttpError as e:
            return FetchResult.failure(str(e))

        if not isinstance(payload, dict) or payload.get('status') != 'ok':
            message = payload.get('message') if isinstance(payload, dict) else None
            return FetchResult.failure(f"NewsAPI error: {message or 'unexpected response'}")

        raw_items = payload.get('articles') or []
        items = [NewsItem.from_api(raw) for raw in raw_items if isinstance(raw, dict)]
        usable = [item for item in items if item.usable]
        logger.info(f"Fetched {len(raw_items)} articles from NewsAPI ({len(usable)} usable)")
        return FetchResult(ok=True, items=usable)
