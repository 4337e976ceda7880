#!/usr/bin/env python3
# gh_explorer/cli/explorer_cli.py - Command-line interface for the repository explorer
import argparse
import asyncio
import sys
from collections.abc import Callable

from dotenv import load_dotenv

from ..core.config import load_settings
from ..core.exceptions import GHExplorerException
from ..core.logging_config import setup_logging
from ..services.fetch_service import RepositoryFetcher, build_fetcher
from ..services.rate_limit_service import format_reset_time

FetcherFactory = Callable[[], RepositoryFetcher]


async def random_repository(fetcher: RepositoryFetcher, language: str) -> int:
    """Print a random repository for language"""
    print(f"🎲 Picking a random {language} repository...")

    repository = await fetcher.fetch_random_repository(language)
    if repository is None:
        print("⏳ A fetch is already in progress")
        return 1

    print(f"\n📦 {repository.full_name}")
    print(f"   {repository.display_description()}")
    print(f"   ⭐ Stars: {repository.stargazers_count:,}")
    print(f"   🍴 Forks: {repository.forks_count:,}")
    print(f"   🐛 Open Issues: {repository.open_issues_count:,}")
    if repository.html_url:
        print(f"   🔗 {repository.html_url}")

    if fetcher.status.warning:
        print(f"\n⚠️  {fetcher.status.warning}")
    return 0


async def prefetch(fetcher: RepositoryFetcher, language: str) -> int:
    """Warm the cache for language"""
    print(f"📥 Prefetching {language} repositories...")

    if await fetcher.prefetch_repositories(language):
        entry = fetcher.cache.get(language)
        count = len(entry.data) if entry else 0
        print(f"✅ Cached {count} repositories for {language}")
        return 0
    print(f"❌ Prefetch failed for {language}")
    return 1


async def rate_limit(fetcher: RepositoryFetcher) -> int:
    """Show the current quota"""
    print("🔍 Checking rate limit...")

    state = await fetcher.check_rate_limit()
    if not state.is_bounded:
        print("ℹ️  Rate limit unknown")
        return 1

    data = state.to_dict()
    print("\n📊 Rate Limit:")
    print(f"   Limit: {data['limit']}")
    print(f"   Remaining: {data['remaining']}")
    print(f"   Resets at: {format_reset_time(state.reset)}")
    if state.is_exhausted:
        print("   ❌ Exhausted")
    elif state.is_low(fetcher.settings.rate_warning_threshold):
        print("   ⚠️  Running low")
    return 0


async def sweep(fetcher: RepositoryFetcher) -> int:
    """Delete expired cache entries"""
    print("🧹 Sweeping expired cache entries...")

    expired = await fetcher.cache.sweep_expired()
    if not expired:
        print("✅ No expired entries")
    else:
        print(f"✅ Removed {len(expired)} entries: {', '.join(expired)}")
    return 0


def list_languages() -> int:
    """List supported languages"""
    settings = load_settings()
    print(f"📋 Supported languages ({len(settings.languages)}):")
    for language in settings.languages:
        print(f"   {language}")
    return 0


async def run_command(args: argparse.Namespace, fetcher_factory: FetcherFactory) -> int:
    fetcher = fetcher_factory()
    try:
        if args.command == "random":
            return await random_repository(fetcher, args.language)
        if args.command == "prefetch":
            return await prefetch(fetcher, args.language)
        if args.command == "rate-limit":
            return await rate_limit(fetcher)
        if args.command == "sweep":
            return await sweep(fetcher)
        raise ValueError(f"Unknown command: {args.command}")
    except GHExplorerException as e:
        print(f"❌ {fetcher.status.error or e.message}")
        return 1
    finally:
        await fetcher.aclose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="GitHub Repository Explorer CLI")
    parser.add_argument("--log-level", default="WARNING", help="Log level (DEBUG, INFO, ...)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Random command
    random_parser = subparsers.add_parser("random", help="Show a random repository")
    random_parser.add_argument("language", help="Language, e.g. Python")

    # Prefetch command
    prefetch_parser = subparsers.add_parser("prefetch", help="Warm the cache for a language")
    prefetch_parser.add_argument("language", help="Language, e.g. Python")

    # Rate limit command
    subparsers.add_parser("rate-limit", help="Show the current GitHub rate limit")

    # Sweep command
    subparsers.add_parser("sweep", help="Delete expired cache entries")

    # Languages command
    subparsers.add_parser("languages", help="List supported languages")

    return parser


def main(argv: list[str] | None = None, fetcher_factory: FetcherFactory = build_fetcher) -> int:
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(log_level=args.log_level, logger_name="gh_explorer")

    if args.command == "languages":
        return list_languages()
    return asyncio.run(run_command(args, fetcher_factory))


if __name__ == "__main__":
    sys.exit(main())
