"""
Command-line interface for RootByte.
"""
import sys
import argparse
import logging
import asyncio
from datetime import datetime
from typing import List, Optional
from dotenv import load_dotenv

from rootbyte.config import config
from rootbyte.core.backup import ContentBackup
from rootbyte.core.breaking import BreakingNewsManager
from rootbyte.core.errors import RootByteError
from rootbyte.core.index import IndexBuilder
from rootbyte.core.manager import ContentManager
from rootbyte.core.trending import TrendingBuilder
from rootbyte.core.validator import report, validate_all
from rootbyte.fetchers.gemini import SummaryGenerator
from rootbyte.fetchers.newsapi import NewsApiClient
from rootbyte.utils.nlp import slugify

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, log_file: bool = False) -> None:
    """
    Configure root logging for a CLI run.

    Args:
        verbose: Log at DEBUG instead of INFO
        log_file: Also write to a dated rootbyte_YYYYMMDD.log file
    """
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(f"rootbyte_{datetime.now().strftime('%Y%m%d')}.log"))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True,
    )


def parse_args(argv: Optional[List[str]] = None):
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(prog="rootbyte", description="RootByte content pipeline")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", action="store_true", help="Also log to rootbyte_YYYYMMDD.log")
    commands = parser.add_subparsers(dest="command", required=True)

    new_article = commands.add_parser("new-article", help="Scaffold a draft article")
    new_article.add_argument("slug", help="Article slug (file name without .md)")
    new_article.add_argument("title", nargs="?", default="Article Title Here", help="Article title")
    new_article.add_argument("category", nargs="?", default="ai", help="Category key")
    new_article.add_argument("--force", action="store_true", help="Overwrite an existing file")

    build = commands.add_parser("build", help="Build categories.json, did-you-know.json and sitemap.xml")
    build.add_argument("--watch", action="store_true", help="Rebuild when articles change")
    build.add_argument("--interval", type=float, default=1.0, help="Watch polling interval in seconds")

    breaking = commands.add_parser("breaking-check", help="Update breaking.json from the news API")
    mode = breaking.add_mutually_exclusive_group()
    mode.add_argument("--dry-run", action="store_true", help="Show the record without writing it")
    mode.add_argument("--clear", action="store_true", help="Force deactivate breaking news")
    mode.add_argument("--set", dest="headline", metavar="HEADLINE", help="Manually set breaking news")

    trending = commands.add_parser("fetch-trending", help="Write daily-update.json")
    trending.add_argument("--dry-run", action="store_true", help="Show the snapshot without writing it")

    commands.add_parser("validate", help="Validate every article")

    content = commands.add_parser("content", help="Manage articles")
    actions = content.add_subparsers(dest="action", required=True)
    actions.add_parser("list", help="List all articles with status")
    actions.add_parser("stats", help="Show content statistics")
    for status, action in (("published", "publish"), ("draft", "draft")):
        sub = actions.add_parser(action, help=f"Mark an article as {status}")
        sub.add_argument("slug")
        sub.set_defaults(status=status)

    backup = commands.add_parser("backup", help="Back up the content directory")
    backup.add_argument("--keep", type=int, help="Number of backups to keep")

    args = parser.parse_args(argv)
    if args.command == "breaking-check" and args.headline is not None and not args.headline.strip():
        parser.error("--set needs a non-empty headline")
    if args.command == "new-article" and not slugify(args.slug):
        parser.error("slug must contain letters or digits")
    if args.command == "backup" and args.keep is not None and args.keep < 1:
        parser.error("--keep must be at least 1")
    return args


async def run_build(args) -> int:
    builder = IndexBuilder()
    summary = builder.run()
    logger.info(
        f"Build complete! Articles: {summary.published}, DYK facts: {summary.total_facts}, "
        f"Sitemap URLs: {summary.sitemap_urls}"
    )
    if args.watch:
        await builder.watch(interval=args.interval)
    return 0


async def run_breaking(args) -> int:
    news_client = NewsApiClient()
    generator = SummaryGenerator()
    manager = BreakingNewsManager(news_client=news_client, summary_generator=generator, dry_run=args.dry_run)
    logger.info(f"Starting breaking check{' (DRY RUN)' if args.dry_run else ''}...")
    try:
        if args.clear:
            manager.clear()
            return 0
        if args.headline:
            manager.set_manual(args.headline)
            return 0
        return await manager.check()
    finally:
        await news_client.close_session()
        await generator.close()


async def run_trending(args) -> int:
    news_client = NewsApiClient()
    generator = SummaryGenerator()
    logger.info(f"Starting fetch-trending{' (DRY RUN)' if args.dry_run else ''}...")
    try:
        await TrendingBuilder(news_client=news_client, summary_generator=generator, dry_run=args.dry_run).run()
    finally:
        await news_client.close_session()
        await generator.close()
    return 0


def run_content(args) -> int:
    manager = ContentManager()
    if args.action == "list":
        print(manager.list_articles(), end="")
    elif args.action == "stats":
        print(manager.formatter.format_stats(manager.stats()), end="")
    else:
        manager.set_status(args.slug, args.status)
    return 0


def run_validate(args) -> int:
    summary = report(validate_all())
    if summary["errors"]:
        logger.error("Fix errors before deploying")
        return 1
    logger.info("All content valid!")
    return 0


async def async_main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the application.
    """
    load_dotenv(override=True)
    args = parse_args(argv)
    setup_logging(verbose=args.verbose, log_file=args.log_file)
    config.validate()

    if args.command == "new-article":
        ContentManager().scaffold(args.slug, args.title, args.category, force=args.force)
        return 0
    if args.command == "build":
        return await run_build(args)
    if args.command == "breaking-check":
        return await run_breaking(args)
    if args.command == "fetch-trending":
        return await run_trending(args)
    if args.command == "validate":
        return run_validate(args)
    if args.command == "content":
        return run_content(args)
    if args.command == "backup":
        ContentBackup(keep=args.keep).run()
        return 0
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the command-line script.
    """
    try:
        return asyncio.run(async_main(argv))
    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        return 1
    except RootByteError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.exception(f"An error occurred: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
