"""
Article management: scaffolding, listing, statistics and status changes.
"""
import logging
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Optional

from rootbyte.config import get_config
from rootbyte.core.errors import ContentError
from rootbyte.core.frontmatter import set_status
from rootbyte.core.index import load_articles, load_json_list
from rootbyte.formatters.markdown import MarkdownFormatter

# Configure logging
logger = logging.getLogger(__name__)

STATUSES = ("published", "draft")


class ContentManager:
    """
    Operates on the Markdown files in the articles directory.
    """
    def __init__(self, articles_dir: Optional[Path] = None, content_dir: Optional[Path] = None,
                 formatter: Optional[MarkdownFormatter] = None):
        self.articles_dir = Path(articles_dir or get_config('paths.articles_dir'))
        self.content_dir = Path(content_dir or get_config('paths.content_dir'))
        self.formatter = formatter or MarkdownFormatter()

    def article_path(self, slug: str) -> Path:
        return self.articles_dir / f"{slug}.md"

    def scaffold(self, slug: str, title: str, category: str, force: bool = False) -> Optional[Path]:
        """
        Write a draft article from the template.

        Args:
            slug: File name without extension
            title: Article title
            category: Category key
            force: Overwrite an existing file

        Returns:
            Path written, or None when the file exists and ``force`` is off
        """
        path = self.article_path(slug)
        if path.exists() and not force:
            logger.warning(f"{path} already exists, not overwriting (use --force)")
            return None

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.formatter.format_article_template(slug, title, category), encoding='utf-8')
        logger.info(f"Article scaffolded: {path}")
        return path

    def list_articles(self) -> str:
        return self.formatter.format_article_list(load_articles(self.articles_dir))

    def stats(self) -> Dict[str, Any]:
        """
        Count articles per category and per root decade, plus DYK facts.
        """
        articles = load_articles(self.articles_dir)
        by_category = Counter(article.category for article in articles)
        by_era = Counter()
        for article in articles:
            year = article.meta.get('root_year')
            if isinstance(year, int) and not isinstance(year, bool):
                by_era[f"{year // 10 * 10}s"] += 1

        return {
            "articles": len(articles),
            "dyk_facts": len(load_json_list(self.content_dir / 'did-you-know.json')),
            "by_category": dict(by_category),
            "by_era": dict(sorted(by_era.items())),
        }

    def set_status(self, slug: str, status: str) -> Path:
        """
        Rewrite an article's status line in place.

        Raises:
            ValueError: For an unknown status
            ContentError: If the article does not exist
        """
        if status not in STATUSES:
            raise ValueError(f"Unknown status: {status}")

        path = self.article_path(slug)
        if not path.exists():
            raise ContentError(f"Article not found: {slug}")

        path.write_text(set_status(path.read_text(encoding='utf-8'), status), encoding='utf-8')
        logger.info(f"{slug} marked as {status}")
        return path
