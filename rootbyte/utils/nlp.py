"""
Text helpers shared by the content and news pipelines.
"""
import math
import re
from datetime import datetime, timezone
from typing import Iterable, Optional

# Only the last " - Publisher" segment; hyphenated words like Wi-Fi survive
SOURCE_SUFFIX_RE = re.compile(r'\s+-\s+(?!.*\s-\s).*$')
SLUG_RE = re.compile(r'[^a-z0-9]+')


def slugify(text: str) -> str:
    """
    Turn a title into a URL slug.

    Args:
        text: Free text

    Returns:
        Lowercase words joined by single hyphens
    """
    return SLUG_RE.sub('-', text.lower()).strip('-')


def strip_source_suffix(title: str) -> str:
    """Drop the `` - Publisher`` tail that news APIs append to headlines."""
    return SOURCE_SUFFIX_RE.sub('', title or '').strip()


def first_keyword(text: str, keywords: Iterable[str]) -> Optional[str]:
    """
    Return the first keyword contained in ``text``.

    Matching is plain substring containment on lowercased text, so ``arm``
    also matches ``alarm``.
    """
    haystack = text.lower()
    for keyword in keywords:
        if keyword in haystack:
            return keyword
    return None


def word_count(text: str) -> int:
    return len(text.split())


def estimate_reading_time(text: str, words_per_minute: int = 200) -> int:
    return math.ceil(word_count(text) / words_per_minute)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(moment: datetime) -> str:
    """Format an aware datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def parse_isoformat(value: str) -> Optional[datetime]:
    """
    Parse an ISO timestamp, accepting a trailing ``Z``.

    Naive timestamps are taken to be UTC. Returns None for anything that does
    not parse.
    """
    if not value:
        return None
    try:
        moment = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    except ValueError:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment
