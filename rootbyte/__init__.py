"""
RootByte - content pipeline for a tech-history blog

Builds the article indices, sitemap and "did you know" facts from Markdown
frontmatter, and keeps the breaking-news banner and trending feed in step with
the day's technology headlines.
"""

__version__ = "0.1.0"
