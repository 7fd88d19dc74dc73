"""
Links current headlines to root articles and writes daily-update.json.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import tqdm

from rootbyte.config import get_config
from rootbyte.core.article import NewsItem, RootArticle
from rootbyte.core.index import write_json
from rootbyte.fetchers.gemini import SummaryGenerator
from rootbyte.fetchers.newsapi import NewsApiClient
from rootbyte.utils.nlp import first_keyword, isoformat, strip_source_suffix, utc_now

# Configure logging
logger = logging.getLogger(__name__)

# Declaration order is match priority
KNOWN_ARTICLES = [
    RootArticle(
        slug='chatgpt-neural-network-history',
        keywords=['ai', 'chatgpt', 'openai', 'gpt', 'llm', 'neural', 'machine learning',
                  'artificial intelligence', 'gemini', 'claude', 'anthropic'],
        category='ai',
    ),
    RootArticle(
        slug='wifi-hidden-inventor',
        keywords=['wifi', 'wi-fi', '6ghz', 'wireless', 'csiro', 'broadband', '5g', '6g'],
        category='internet',
    ),
    RootArticle(
        slug='first-touchscreen-1965',
        keywords=['touchscreen', 'touch', 'ipad', 'iphone', 'apple', 'samsung display', 'haptic'],
        category='devices',
    ),
    RootArticle(
        slug='first-hard-drive-ibm',
        keywords=['hard drive', 'ssd', 'storage', 'data center', 'nvme', 'cloud storage',
                  'dna storage', 'flash memory'],
        category='devices',
    ),
]

DEFAULT_TICKER = [
    "ChatGPT turns 3 — what 80 years of AI history built it",
    "Samsung foldable traces to 1994 IBM patent nobody used",
    "The WiFi inventor Australia doesn't know it has — CSIRO 1992",
    "XRP history: RipplePay 2004 Vancouver roots",
    "First hard drive weighed a ton — IBM RAMAC 1956",
    "QWERTY was designed to slow typists down — 1873",
    "The first computer bug was a real moth — Harvard 1947",
    "Apollo 11's computer had less power than your calculator",
]

DEFAULT_STORIES = [
    {"slug": "chatgpt-neural-network-history", "headline": "ChatGPT Is 3 Years Old. The Math Behind It Is 83.",
     "category": "ai", "is_hero": True},
    {"slug": "first-touchscreen-1965", "headline": "The First Touchscreen Wasn't Apple — It Was Made in 1965",
     "category": "devices", "is_hero": False},
    {"slug": "wifi-hidden-inventor", "headline": "The WiFi Inventor Australia Doesn't Know It Has",
     "category": "internet", "is_hero": False},
    {"slug": "first-hard-drive-ibm", "headline": "IBM's First Hard Drive Weighed a Ton. Its Inventor Was Almost Erased.",
     "category": "devices", "is_hero": False},
]

TOMORROW_TEASER = {
    "headline": "The Forgotten Inventor of the First Hard Drive — Erased From History",
    "preview": "IBM's RAMAC 350 weighed a full ton and stored 5 megabytes. We dig up Reynold Johnson.",
    "topics": ["Storage History", "IBM RAMAC 1956", "Reynold Johnson", "DNA Storage Future"],
}


def find_root_match(title: str, description: str = "",
                    known: Sequence[RootArticle] = KNOWN_ARTICLES) -> Optional[RootArticle]:
    """
    Return the first root article with a keyword in the headline text.

    Articles are tried in declaration order and keywords in list order; the
    first hit wins.

    Args:
        title: News headline
        description: News description
        known: Root articles to search

    Returns:
        The matching RootArticle, or None
    """
    text = f"{title or ''} {description or ''}"
    for article in known:
        if first_keyword(text, article.keywords):
            return article
    return None


def build_ticker(items: Sequence[NewsItem], limit: int) -> List[str]:
    titles = (strip_source_suffix(item.title) for item in items[:limit])
    return [title for title in titles if title]


class TrendingBuilder:
    """
    Fetches headlines, matches them to root articles and writes the
    daily-update snapshot.
    """
    def __init__(self, path: Optional[Path] = None, news_client: Optional[NewsApiClient] = None,
                 summary_generator: Optional[SummaryGenerator] = None, dry_run: bool = False,
                 known: Sequence[RootArticle] = KNOWN_ARTICLES):
        self.path = Path(path or Path(get_config('paths.content_dir')) / 'daily-update.json')
        self.news_client = news_client or NewsApiClient()
        self.summary_generator = summary_generator or SummaryGenerator()
        self.dry_run = dry_run
        self.known = known
        self.page_size = get_config('trending.page_size', 20)
        self.max_stories = get_config('trending.max_stories', 4)
        self.max_ticker = get_config('trending.max_ticker', 8)

    def load_previous(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load previous snapshot: {e}")
            return None
        return data if isinstance(data, dict) else None

    async def match_stories(self, items: Sequence[NewsItem]) -> List[Dict[str, Any]]:
        """
        Turn matched headlines into top stories, one generation call at a time.
        """
        stories = []
        with tqdm.tqdm(total=len(items), desc="Matching headlines", disable=None) as pbar:
            for item in items:
                if len(stories) >= self.max_stories:
                    break
                match = find_root_match(item.title, item.description, self.known)
                if match:
                    logger.info(f'Matched: "{item.title[:60]}" -> {match.slug}')
                    connection = await self.summary_generator.generate_root_connection(item.title, match.slug)
                    stories.append({
                        "slug": match.slug,
                        "headline": item.title,
                        "category": match.category,
                        "root_year": None,
                        "is_hero": not stories,
                        "root_connection": connection.text,
                        "news_source": item.source_name,
                        "published_at": item.published_at,
                    })
                pbar.update(1)
        logger.info(f"Found {len(stories)} ROOT matches.")
        return stories

    def fallback(self) -> Dict[str, List[Any]]:
        """Stories and ticker from the previous snapshot, else the defaults."""
        previous = self.load_previous() or {}
        stories = previous.get("top_stories") or [dict(story) for story in DEFAULT_STORIES]
        ticker = previous.get("ticker") or list(DEFAULT_TICKER)
        return {"top_stories": stories, "ticker": ticker}

    async def build(self) -> Dict[str, Any]:
        """
        Assemble the snapshot without writing it.
        """
        now = utc_now()
        stories = []
        ticker = []

        if not self.news_client.configured:
            logger.warning("NEWS_API_KEY not set. Using fallback data.")
        else:
            result = await self.news_client.fetch_top_headlines(self.page_size)
            if result.ok:
                ticker = build_ticker(result.items, self.max_ticker)
                stories = await self.match_stories(result.items)
            else:
                logger.error(f"NewsAPI failed: {result.error} -- using previous data.")

        if not stories or not ticker:
            fallback = self.fallback()
            stories = stories or fallback["top_stories"]
            ticker = ticker or fallback["ticker"]

        return {
            "generated": isoformat(now),
            "top_stories": stories[:self.max_stories],
            "ticker": ticker[:self.max_ticker],
            "tomorrow_teaser": dict(TOMORROW_TEASER),
        }

    async def run(self) -> Dict[str, Any]:
        snapshot = await self.build()
        if self.dry_run:
            logger.info(f"[DRY RUN] Would write to {self.path}:\n{json.dumps(snapshot, indent=2, ensure_ascii=False)}")
        else:
            write_json(self.path, snapshot)
            logger.info(f"Written to {self.path}")
        return snapshot
