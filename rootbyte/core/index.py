"""
Builds the JSON indices and sitemap from the article archive.
"""
import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from rootbyte.config import get_config
from rootbyte.core.article import Article
from rootbyte.core.errors import ContentError
from rootbyte.core.frontmatter import parse_frontmatter

# Configure logging
logger = logging.getLogger(__name__)

STATIC_PAGES = [
    {"url": "/", "priority": "1.0", "freq": "daily"},
    {"url": "/roots-archive.html", "priority": "0.7", "freq": "weekly"},
    {"url": "/did-you-know.html", "priority": "0.7", "freq": "weekly"},
    {"url": "/on-this-day.html", "priority": "0.8", "freq": "daily"},
    {"url": "/breaking.html", "priority": "0.9", "freq": "hourly"},
    {"url": "/about.html", "priority": "0.5", "freq": "monthly"},
    {"url": "/advertise.html", "priority": "0.5", "freq": "monthly"},
    {"url": "/contact.html", "priority": "0.5", "freq": "monthly"},
    {"url": "/privacy.html", "priority": "0.3", "freq": "yearly"},
    {"url": "/terms.html", "priority": "0.3", "freq": "yearly"},
    {"url": "/ad-policy.html", "priority": "0.3", "freq": "monthly"},
]

DEFAULT_READING_TIME = 6


def read_article(path: Path) -> Article:
    text = path.read_text(encoding='utf-8')
    meta, body = parse_frontmatter(text)
    return Article(slug=path.stem, meta=meta, body=body)


def load_articles(articles_dir: Path) -> List[Article]:
    """
    Read every ``*.md`` file in the articles directory.

    Args:
        articles_dir: Directory holding the Markdown articles

    Returns:
        Articles in filename order, drafts included

    Raises:
        ContentError: If the directory does not exist or a file cannot be read
    """
    if not articles_dir.is_dir():
        raise ContentError(f"Articles dir not found: {articles_dir}")

    articles = []
    for path in sorted(articles_dir.glob('*.md')):
        # editor lock files show up as dangling symlinks
        if not path.is_file():
            logger.debug(f"Skipping {path.name}: not a regular file")
            continue
        try:
            articles.append(read_article(path))
        except (OSError, UnicodeDecodeError) as e:
            raise ContentError(f"Could not read {path}: {e}") from e
    return articles


def published(articles: Sequence[Article]) -> List[Article]:
    return [article for article in articles if article.is_published]


def article_summary(article: Article) -> Dict[str, Any]:
    meta = article.meta
    return {
        "slug": article.slug,
        "title": article.title,
        "excerpt": meta.get("excerpt") or "",
        "root_year": meta.get("root_year") or None,
        "root_who": meta.get("root_who") or "",
        "future_year": meta.get("future_year") or "",
        "category": article.category,
        "date": meta.get("date") or None,
        "reading_time": meta.get("reading_time") or DEFAULT_READING_TIME,
        "status": article.status,
    }


def build_category_index(articles: Sequence[Article]) -> Dict[str, Dict[str, Any]]:
    """
    Group published articles by category, in the order they are encountered.

    Args:
        articles: Parsed articles; drafts are skipped

    Returns:
        Mapping of category to ``{"label": ..., "articles": [...]}``
    """
    categories = {}
    for article in published(articles):
        category = article.category
        if category not in categories:
            categories[category] = {"label": category, "articles": []}
        categories[category]["articles"].append(article_summary(article))
    return categories


def build_dyk_json(articles: Sequence[Article], existing: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Append one "did you know" fact per article not already represented.

    Existing entries are never rewritten or reordered; new ids continue the
    ``dyk-NNN`` sequence from the current list length.

    Args:
        articles: Parsed articles; drafts are skipped
        existing: Facts loaded from did-you-know.json

    Returns:
        ``existing`` followed by the new facts
    """
    seen = {fact.get("source_article") for fact in existing if isinstance(fact, dict)}
    new_facts = []
    for article in published(articles):
        fact = article.meta.get("dyk_fact")
        # numbers are coerced by the frontmatter parser, so a bare year is still a fact
        if isinstance(fact, bool) or not isinstance(fact, (str, int, float)):
            continue
        fact = str(fact)
        if not fact.strip() or article.slug in seen:
            continue
        seen.add(article.slug)
        new_facts.append({
            "id": f"dyk-{len(existing) + len(new_facts) + 1:03d}",
            "fact": fact,
            "category": article.category,
            "root_year": article.meta.get("root_year") or None,
            "source_article": article.slug,
        })
    return list(existing) + new_facts


def sitemap_urls(articles: Sequence[Article], categories: Sequence[str]) -> List[Dict[str, str]]:
    urls = list(STATIC_PAGES)
    urls.extend({"url": f"/category.html?cat={category}", "priority": "0.8", "freq": "daily"}
                for category in categories)
    urls.extend({"url": f"/article.html?slug={article.slug}", "priority": "0.8", "freq": "monthly"}
                for article in published(articles))
    return urls


def build_sitemap(articles: Sequence[Article], base_url: Optional[str] = None,
                  categories: Optional[Sequence[str]] = None) -> str:
    """
    Render sitemap.xml for the static pages, category pages and articles.

    URLs are assembled from literal values and slugs without escaping.
    """
    base_url = (base_url or get_config('site.base_url')).rstrip('/')
    if categories is None:
        categories = get_config('site.categories')

    entries = [
        f"  <url>\n"
        f"    <loc>{base_url}{page['url']}</loc>\n"
        f"    <changefreq>{page['freq']}</changefreq>\n"
        f"    <priority>{page['priority']}</priority>\n"
        f"  </url>"
        for page in sitemap_urls(articles, categories)
    ]
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        + "\n".join(entries)
        + "\n</urlset>\n"
    )


def load_json_list(path: Path) -> List[Dict[str, Any]]:
    """Load a JSON array, treating a missing or corrupt file as empty."""
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read {path.name} ({e}), starting empty")
        return []
    if not isinstance(data, list):
        logger.warning(f"{path.name} is not a JSON array, starting empty")
        return []
    return data


def write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding='utf-8')


@dataclass
class BuildSummary:
    articles: int
    published: int
    new_facts: int
    total_facts: int
    sitemap_urls: int


class IndexBuilder:
    """
    Runs the full index build: categories.json, did-you-know.json and
    sitemap.xml.
    """
    def __init__(self, articles_dir: Optional[Path] = None, content_dir: Optional[Path] = None,
                 site_dir: Optional[Path] = None):
        self.articles_dir = Path(articles_dir or get_config('paths.articles_dir'))
        self.content_dir = Path(content_dir or get_config('paths.content_dir'))
        self.site_dir = Path(site_dir or get_config('paths.site_dir'))

    @property
    def dyk_path(self) -> Path:
        return self.content_dir / 'did-you-know.json'

    def run(self) -> BuildSummary:
        logger.info("Starting RootByte build...")

        articles = load_articles(self.articles_dir)
        logger.info(f"Found {len(articles)} article files.")

        live = published(articles)
        logger.info(f"Published articles: {len(live)}")

        write_json(self.content_dir / 'categories.json', build_category_index(live))
        logger.info("Written categories.json")

        existing = load_json_list(self.dyk_path)
        facts = build_dyk_json(live, existing)
        added = len(facts) - len(existing)
        if added:
            write_json(self.dyk_path, facts)
            logger.info(f"Added {added} new DYK facts.")

        categories = get_config('site.categories')
        sitemap = build_sitemap(live, categories=categories)
        self.site_dir.mkdir(parents=True, exist_ok=True)
        (self.site_dir / 'sitemap.xml').write_text(sitemap, encoding='utf-8')
        url_count = len(STATIC_PAGES) + len(categories) + len(live)
        logger.info(f"Written sitemap.xml with {url_count} URLs.")

        return BuildSummary(
            articles=len(articles),
            published=len(live),
            new_facts=added,
            total_facts=len(facts),
            sitemap_urls=url_count,
        )

    def snapshot(self) -> Dict[str, float]:
        """Modification times of the article files, used to detect edits."""
        if not self.articles_dir.is_dir():
            return {}
        mtimes = {}
        for path in self.articles_dir.glob('*.md'):
            try:
                mtimes[str(path)] = path.stat().st_mtime
            except OSError:
                # dangling symlink, or deleted since the glob
                continue
        return mtimes

    async def watch(self, interval: float = 1.0, max_rebuilds: Optional[int] = None) -> int:
        """
        Rebuild whenever an article is added, removed or modified.

        Runs until cancelled, or until ``max_rebuilds`` rebuilds have happened.

        Returns:
            Number of rebuilds performed
        """
        logger.info("Watching for changes... (Ctrl+C to stop)")
        previous = self.snapshot()
        rebuilds = 0
        while max_rebuilds is None or rebuilds < max_rebuilds:
            await asyncio.sleep(interval)
            current = self.snapshot()
            if current == previous:
                continue
            previous = current
            logger.info("Change detected. Rebuilding...")
            try:
                self.run()
            except (ContentError, OSError) as e:
                logger.error(f"Rebuild failed: {e}")
            rebuilds += 1
        return rebuilds
