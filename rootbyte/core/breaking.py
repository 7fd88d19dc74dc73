"""
Breaking-news spike detection and the breaking.json state machine.
"""
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from rootbyte.config import REPLACE_POLICIES, get_config
from rootbyte.core.article import BreakingRecord, NewsItem
from rootbyte.core.errors import ConfigError
from rootbyte.core.index import write_json
from rootbyte.fetchers.gemini import SummaryGenerator
from rootbyte.fetchers.newsapi import NewsApiClient
from rootbyte.formatters.html import paragraphs
from rootbyte.utils.nlp import isoformat, parse_isoformat, strip_source_suffix, utc_now

# Configure logging
logger = logging.getLogger(__name__)

TECH_SPIKE_KEYWORDS = [
    'chatgpt', 'openai', 'google', 'apple', 'microsoft', 'nvidia', 'tesla',
    'meta', 'x twitter', 'spacex', 'elon musk', 'sam altman', 'anthropic',
    'samsung', 'qualcomm', 'arm', 'tiktok', 'bytedance', 'security breach',
    'hack', 'data leak', 'cyberattack', 'ai model', 'regulation', 'ban',
    'acquisition', 'bankruptcy', 'layoff', 'shutdown'
]

SPIKE_THRESHOLD = 4
EXPIRES_HOURS = 12
MONITORING_NOTE = "This story is being monitored. Check back for updates."


@dataclass
class Spike:
    keyword: str
    articles: List[NewsItem]

    @property
    def count(self) -> int:
        return len(self.articles)


def keyword_buckets(items: Sequence[NewsItem], keywords: Sequence[str]) -> Dict[str, List[NewsItem]]:
    """Items per keyword, with keywords in the order they were first hit."""
    buckets = {}
    for item in items:
        text = item.text
        for keyword in keywords:
            if keyword in text:
                buckets.setdefault(keyword, []).append(item)
    return buckets


def detect_spike(items: Sequence[NewsItem], keywords: Sequence[str] = TECH_SPIKE_KEYWORDS,
                 threshold: int = SPIKE_THRESHOLD) -> Optional[Spike]:
    """
    Find the keyword mentioned by the most items, if it reaches ``threshold``.

    Ties go to the keyword that was hit first.

    Args:
        items: One batch of news items
        keywords: Keywords matched as lowercase substrings
        threshold: Minimum bucket size for a spike

    Returns:
        The winning Spike, or None
    """
    top = None
    for keyword, bucket in keyword_buckets(items, keywords).items():
        if len(bucket) >= threshold and (top is None or len(bucket) > top.count):
            top = Spike(keyword=keyword, articles=bucket)
    return top


def is_expired(record: BreakingRecord, now: datetime) -> bool:
    """
    An active record past its expiry. An active record without a headline
    or a parseable expiry is malformed and counts as expired.
    """
    if not record.active:
        return False
    if not record.headline.strip():
        return True
    expires = parse_isoformat(record.expires)
    return expires is None or now > expires


class BreakingNewsManager:
    """
    Owns breaking.json and moves it between the inactive and active shapes.

    Every write replaces the whole record. Concurrent runs are not
    coordinated: the last writer wins.
    """
    def __init__(self, path: Optional[Path] = None, news_client: Optional[NewsApiClient] = None,
                 summary_generator: Optional[SummaryGenerator] = None,
                 now: Callable[[], datetime] = utc_now, dry_run: bool = False,
                 replace_policy: Optional[str] = None):
        self.path = Path(path or Path(get_config('paths.content_dir')) / 'breaking.json')
        self.news_client = news_client or NewsApiClient()
        self.summary_generator = summary_generator or SummaryGenerator()
        self.now = now
        self.dry_run = dry_run
        self.replace_policy = replace_policy or get_config('breaking.replace_policy', 'always')
        if self.replace_policy not in REPLACE_POLICIES:
            raise ConfigError(f"Unknown replace policy: {self.replace_policy!r}")
        self.threshold = get_config('breaking.spike_threshold', SPIKE_THRESHOLD)
        self.expires_hours = get_config('breaking.expires_hours', EXPIRES_HOURS)
        self.page_size = get_config('breaking.page_size', 30)
        self.last_written: Optional[BreakingRecord] = None

    def load(self) -> BreakingRecord:
        """Read the current record; a missing or corrupt file means inactive."""
        if not self.path.exists():
            return BreakingRecord.inactive()
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {self.path.name} ({e}), treating as inactive")
            return BreakingRecord.inactive()
        if not isinstance(data, dict):
            return BreakingRecord.inactive()
        return BreakingRecord.from_dict(data)

    def write(self, record: BreakingRecord) -> None:
        self.last_written = record
        if self.dry_run:
            logger.info(f"[DRY RUN] Would write breaking.json:\n{json.dumps(record.to_dict(), indent=2)}")
            return
        write_json(self.path, record.to_dict())
        logger.info(f"Wrote {self.path.name}")

    def deactivate(self, force: bool = False) -> bool:
        """
        Write the inactive record unless it is already inactive.

        Returns:
            True when a write happened
        """
        if not force and not self.load().active:
            return False
        self.write(BreakingRecord.inactive())
        logger.info("Breaking news deactivated.")
        return True

    def clear(self) -> None:
        self.deactivate(force=True)

    def _active_record(self, headline: str, short: str, body: str,
                       spike: Optional[Spike] = None) -> BreakingRecord:
        now = self.now()
        return BreakingRecord(
            active=True,
            headline=headline,
            short=short,
            timestamp=isoformat(now),
            expires=isoformat(now + timedelta(hours=self.expires_hours)),
            body=body,
            spike_keyword=spike.keyword if spike else None,
            spike_count=spike.count if spike else None,
        )

    def set_manual(self, headline: str) -> BreakingRecord:
        """
        Activate the banner with an operator-supplied headline.

        Raises:
            ValueError: If the headline is blank
        """
        headline = headline.strip()
        if not headline:
            raise ValueError("A manual breaking headline must not be empty")
        record = self._active_record(
            headline=headline,
            short=headline[:100],
            body=paragraphs(headline, MONITORING_NOTE),
        )
        self.write(record)
        logger.info(f"Manual breaking news set. Expires: {record.expires}")
        return record

    def should_replace(self, current: BreakingRecord, spike: Spike) -> bool:
        """Decide whether a spike overwrites a story that is still active."""
        if not current.active or self.replace_policy == 'always':
            return True
        if current.spike_keyword == spike.keyword:
            return True
        return spike.count >= (current.spike_count or 0)

    async def activate_from_spike(self, spike: Spike) -> BreakingRecord:
        lead = spike.articles[0]
        headline = f"BREAKING: {strip_source_suffix(lead.title)}".strip()
        short = lead.description[:120] if lead.description else headline
        result = await self.summary_generator.generate_body(headline, spike.articles)
        if result.fallback:
            logger.info("Using templated breaking body")
        record = self._active_record(headline=headline, short=short, body=result.text, spike=spike)
        self.write(record)
        return record

    async def check(self) -> int:
        """
        Run one scheduled check.

        Returns:
            Process exit code: 1 when headlines could not be fetched, else 0
        """
        current = self.load()
        if is_expired(current, self.now()):
            logger.info("Current breaking news expired. Deactivating.")
            self.deactivate()
            return 0
        if current.active:
            logger.info("Breaking news currently active. Checking for stronger story...")

        if not self.news_client.configured:
            logger.warning("NEWS_API_KEY not set. Skipping API check.")
            return 0

        result = await self.news_client.fetch_top_headlines(self.page_size)
        if not result.ok:
            logger.error(f"Headline fetch failed: {result.error}")
            return 1

        spike = detect_spike(result.items, threshold=self.threshold)
        if spike is None:
            if current.active:
                logger.info(f"No spike detected (threshold: {self.threshold}). Keeping active story until it expires.")
            else:
                logger.info(f"No spike detected (threshold: {self.threshold}).")
            return 0

        logger.info(f'SPIKE DETECTED: "{spike.keyword}" in {spike.count} articles!')
        if not self.should_replace(current, spike):
            logger.info(
                f'Keeping current story ("{current.spike_keyword}", {current.spike_count} articles); '
                f'new spike is weaker'
            )
            return 0

        await self.activate_from_spike(spike)
        return 0
