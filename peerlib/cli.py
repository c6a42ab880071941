#!/usr/bin/env python3
"""
peerlib Command-Line Interface

Commands:
- serve: Run the API server
- stats: Display network and library statistics
- search: Search the catalogue
- leaderboard: Show the highest scoring accounts

Every command except serve runs against a freshly seeded in-memory library.
"""

import sys
import argparse

from loguru import logger

from peerlib.backends.memory import MemoryStore
from peerlib.reputation.scoring import throttle_multiplier
from peerlib.reputation.service import ReputationService
from peerlib.search.engine import SearchFilters, SearchService
from peerlib.seed import seed_demo_data
from peerlib.services.accounts import AccountService
from peerlib.services.library import LibraryService


class PeerLibCLI:
    """CLI over a seeded in-memory library."""

    def __init__(self):
        self.store = MemoryStore()
        self.accounts = AccountService(self.store)
        self.library = LibraryService(self.store, self.accounts)
        self.reputation = ReputationService(self.store)
        self.search_service = SearchService(self.store)
        self._seeded = False

    def _ensure_seeded(self):
        if not self._seeded:
            seed_demo_data(self.accounts, self.library, self.reputation)
            self._seeded = True

    def serve(self, args):
        """Run the API server."""
        from peerlib import api_server

        logger.info("🚀 Launching peerlib API server")
        api_server.main()
        return 0

    def stats(self, args):
        """Display network and library statistics."""
        self._ensure_seeded()

        network = self.reputation.network_stats()
        library = self.library.statistics()

        print("📊 Network Statistics")
        print("-" * 40)
        print(f"  Total Users:   {network.total_users}")
        print(f"  Contributors:  {network.contributors}")
        print(f"  Neutral:       {network.neutral}")
        print(f"  Leechers:      {network.leechers}")
        print(f"  Average Score: {network.average_score:.2f}")

        print("\n📚 Library Statistics")
        print("-" * 40)
        print(f"  Resources: {library.total_resources}")
        print(f"  Downloads: {library.total_downloads}")
        print(f"  Ratings:   {library.total_ratings}")
        for subject, count in sorted(library.by_subject.items()):
            print(f"    {subject:<20} {count}")

        return 0

    def search(self, args):
        """Search the catalogue."""
        self._ensure_seeded()

        filters = SearchFilters(
            subject=args.subject,
            min_rating=args.min_rating,
            sort_by=args.sort_by,
            sort_order=args.order,
            page=args.page,
            page_size=args.page_size,
        )
        page = self.search_service.search(args.query, filters)

        print(f"🔍 {page.total_count} result(s) for '{args.query}' "
              f"(page {page.page}/{max(page.total_pages, 1)})")
        print("-" * 80)
        print(f"{'Title':<36} {'Subject':<20} {'Rating':<8} {'Peers':<6} {'Relevance'}")
        print("-" * 80)

        for result in page.results:
            resource = result.resource
            print(
                f"{resource.title[:34]:<36} "
                f"{resource.subject[:18]:<20} "
                f"{resource.average_rating:<8.2f} "
                f"{result.available_peers:<6} "
                f"{result.relevance:.1f}"
            )

        return 0

    def leaderboard(self, args):
        """Show the highest scoring accounts."""
        self._ensure_seeded()

        print("🏆 Leaderboard")
        print("-" * 60)
        print(f"{'#':<4} {'Username':<16} {'Score':<8} {'Tier':<12} {'Throttle'}")
        print("-" * 60)

        for rank, account in enumerate(self.reputation.leaderboard(args.limit), start=1):
            print(
                f"{rank:<4} "
                f"{account.username:<16} "
                f"{account.score:<8} "
                f"{account.tier.value:<12} "
                f"{throttle_multiplier(account.tier):.1f}x"
            )

        return 0

    def create_parser(self) -> argparse.ArgumentParser:
        """Create argument parser."""
        parser = argparse.ArgumentParser(
            prog="peerlib",
            description="peerlib P2P academic library CLI",
            formatter_class=argparse.RawDescriptionHelpFormatter
        )

        subparsers = parser.add_subparsers(dest="command", help="Commands")

        subparsers.add_parser("serve", help="Run the API server")

        subparsers.add_parser("stats", help="Display statistics")

        search_parser = subparsers.add_parser("search", help="Search resources")
        search_parser.add_argument("query", nargs="?", default="", help="Search text")
        search_parser.add_argument("--subject", help="Only this subject")
        search_parser.add_argument("--min-rating", type=float, default=0.0, help="Minimum rating")
        search_parser.add_argument("--sort-by", choices=["relevance", "rating", "downloads"])
        search_parser.add_argument("--order", choices=["asc", "desc"], default="desc")
        search_parser.add_argument("--page", type=int, default=1)
        search_parser.add_argument("--page-size", type=int, default=10)

        leaderboard_parser = subparsers.add_parser("leaderboard", help="Top accounts")
        leaderboard_parser.add_argument("--limit", type=int, default=10, help="Number of accounts")

        return parser

    def run(self, argv=None):
        """Run CLI (entry point)."""
        parser = self.create_parser()
        args = parser.parse_args(argv)

        if not args.command:
            parser.print_help()
            return 1

        if args.command == "serve":
            return self.serve(args)
        elif args.command == "stats":
            return self.stats(args)
        elif args.command == "search":
            return self.search(args)
        elif args.command == "leaderboard":
            return self.leaderboard(args)
        else:
            print("❌ Unknown command. Use --help for usage.")
            return 1


def main():
    """CLI entry point."""
    cli = PeerLibCLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
