"""
Markdown formatting utilities for RootByte.
"""
from datetime import date
from typing import Dict, Optional, Sequence

from rootbyte.core.article import Article

ARTICLE_TEMPLATE = """---
title: "{title}"
date: {date}
category: {category}
tags: []
root_year: 1900
root_who: ""
root_where: ""
root_connection: ""
dyk_fact: ""
tomorrow_teaser: false
hero_image: /images/articles/{slug}.webp
reading_time: 6
status: draft
---

## The Modern Story

## ROOT: Going Back to [YEAR]

## Did You Know

## Why It Matters Today
"""


class MarkdownFormatter:
    """
    Formats article scaffolds and archive reports as Markdown.
    """
    def __init__(self, today: Optional[date] = None):
        self.today = today or date.today()

    def format_article_template(self, slug: str, title: str, category: str) -> str:
        """
        Render the starting point for a new article.

        The scaffold is a draft with every required section heading in place.
        """
        return ARTICLE_TEMPLATE.format(
            slug=slug,
            title=title.replace('"', "'"),
            date=self.today.isoformat(),
            category=category,
        )

    def format_article_list(self, articles: Sequence[Article]) -> str:
        """
        Render the archive as a Markdown table with a status column.
        """
        if not articles:
            return "No articles found\n"

        lines = [
            "| Status | Date | Category | Title |",
            "|--------|------|----------|-------|",
        ]
        for article in articles:
            status = "PUB" if article.is_published else "DRAFT"
            article_date = str(article.meta.get("date") or "No date")[:10]
            title = article.title
            if len(title) > 45:
                title = title[:45] + "..."
            lines.append(f"| {status} | {article_date} | {article.category.upper()} | {title} |")

        published = sum(1 for article in articles if article.is_published)
        lines.append("")
        lines.append(f"**Total:** {len(articles)} articles "
                     f"({published} published, {len(articles) - published} drafts)")
        return "\n".join(lines) + "\n"

    def format_stats(self, stats: Dict[str, object]) -> str:
        """
        Render content statistics as Markdown sections.
        """
        lines = [
            "# RootByte Content Statistics",
            "",
            f"- Articles: {stats['articles']}",
            f"- Did You Know facts: {stats['dyk_facts']}",
        ]
        for heading, key in (("By Category", "by_category"), ("By ROOT Era", "by_era")):
            counts = stats.get(key) or {}
            if not counts:
                continue
            lines.extend(["", f"## {heading}", ""])
            lines.extend(f"- {name}: {count}" for name, count in counts.items())
        return "\n".join(lines) + "\n"
