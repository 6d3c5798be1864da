#!/usr/bin/env python3
"""BookFinder CLI - search Open Library and keep a favorites list."""
import argparse
import asyncio
import sys
import json
from tabulate import tabulate
from bookfinder.async_client import AsyncOpenLibraryClient
from bookfinder.client import OpenLibraryClient
from bookfinder.config import Config
from bookfinder.favorites import FavoritesStore
from bookfinder.models import SEARCH_FIELDS, SORT_MODES, ERROR
from bookfinder.results import (
    cover_url, details, favorite_cover_url, format_year, identity_key,
)
from bookfinder.session import BookFinderSession, AsyncBookFinderSession
from bookfinder.storage import open_storage
import logging

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def _truncate(text: str, width: int) -> str:
    return text[:width] + "..." if len(text) > width else text


def display_results(session: BookFinderSession, format_type: str):
    """Display the current page of results in the given format."""
    state = session.state
    records = state.results

    if state.status == ERROR:
        print(f"Error: {state.error}")
        return
    if not records:
        print("No results yet - try searching for a title or author.")
        return

    if format_type == "table":
        headers = ["#", "Title", "Authors", "First published", "Cover", "Fav"]
        rows = [
            [
                i,
                _truncate(record.title, 50),
                _truncate(record.authors_str, 30),
                format_year(record.first_publish_year),
                "yes" if cover_url(record, session.config.COVERS_URL) else "No cover",
                "*" if session.is_favorite(record) else "",
            ]
            for i, record in enumerate(records, 1)
        ]
        print(f"\nShowing page {state.page} - {state.num_found} results found")
        print(tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        data = {
            "page": state.page,
            "numFound": state.num_found,
            "sort": state.sort,
            "docs": [
                {
                    "key": identity_key(record),
                    "title": record.title,
                    "author_name": record.author_name,
                    "first_publish_year": record.first_publish_year,
                    "cover_url": cover_url(record, session.config.COVERS_URL),
                    "favorite": session.is_favorite(record),
                }
                for record in records
            ],
        }
        print(json.dumps(data, indent=2))

    elif format_type == "compact":
        for i, record in enumerate(records, 1):
            print(f"{i}. {record.title} - {record.authors_str} ({format_year(record.first_publish_year)})")


def display_details(session: BookFinderSession):
    """Print the detail view of the selected record."""
    selected = session.state.selected
    if selected is None or selected.record is None:
        return
    info = details(selected.record, session.config.COVERS_URL)
    rows = [
        ["Title", info["title"]],
        ["Author(s)", info["authors"]],
        ["Publication year", info["year"]],
        ["Publisher", info["publishers"]],
        ["Subjects", info["subjects"]],
        ["Cover", info["cover_url"] or "No cover"],
        ["Key", info["key"]],
        ["Favorite", "yes" if session.is_favorite(selected.record) else "no"],
    ]
    print("\n" + tabulate(rows, tablefmt="grid"))


def display_favorites(favorites: FavoritesStore, format_type: str, covers_url: str):
    """Display saved favorites."""
    if not len(favorites):
        print("No favorites yet - add some from search results.")
        return

    if format_type == "table":
        headers = ["Key", "Title", "Authors", "Year", "Cover"]
        rows = [
            [
                fav.key,
                _truncate(fav.title, 50),
                _truncate(fav.authors_str, 30),
                format_year(fav.year),
                favorite_cover_url(fav, covers_url) or "No cover",
            ]
            for fav in favorites
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        print(json.dumps([fav.to_dict() for fav in favorites], indent=2))

    elif format_type == "compact":
        for i, fav in enumerate(favorites, 1):
            print(f"{i}. {fav.title} - {fav.authors_str} [{fav.key}]")


def _pick(session: BookFinderSession, index: int):
    """1-based result lookup; None if out of range."""
    records = session.state.results
    if 1 <= index <= len(records):
        return records[index - 1]
    print(f"No result #{index} on this page")
    return None


def show_search(args, session: BookFinderSession):
    """Apply --favorite/--details to the loaded results and print them."""
    for index in args.favorite or []:
        record = _pick(session, index)
        if record is not None:
            added = session.toggle_favorite(record)
            print(f"{'Added' if added else 'Removed'} favorite: {record.title}")

    display_results(session, args.format)

    if args.details:
        record = _pick(session, args.details)
        if record is not None:
            session.select_record(record)
            display_details(session)


def search_books(args, session: BookFinderSession):
    """Run one search with the blocking client."""
    session.set_field(args.field)
    session.change_sort(args.sort)
    session.submit(args.query, page=args.page)
    show_search(args, session)


async def search_books_async(args, favorites: FavoritesStore, config: Config, transport=None):
    """Run one search with the async client."""
    async with AsyncOpenLibraryClient(
        timeout=config.DEFAULT_TIMEOUT,
        user_agent=config.USER_AGENT,
        transport=transport
    ) as client:
        session = AsyncBookFinderSession(client, favorites, config)
        session.set_field(args.field)
        session.change_sort(args.sort)
        await session.submit(args.query, page=args.page)
        show_search(args, session)


def manage_favorites(args, favorites: FavoritesStore, config: Config):
    """List, remove or clear favorites."""
    if args.clear:
        favorites.clear()
        print("Cleared favorites")
    elif args.remove:
        if favorites.remove(args.remove):
            print(f"Removed favorite: {args.remove}")
        else:
            print(f"Not a favorite: {args.remove}")

    display_favorites(favorites, args.format, config.COVERS_URL)


INTERACTIVE_HELP = """Commands:
  s <query>       search
  field <f>       title | author
  sort <mode>     relevance | year-asc | year-desc
  n / p           next / previous page
  fav <i>         toggle favorite for result i
  d <i>           details for result i
  favs            show favorites
  r               back to results
  q               quit"""


def interactive(session: BookFinderSession, format_type: str):
    """Small REPL over the search session."""
    print(INTERACTIVE_HELP)
    while True:
        try:
            line = input("bookfinder> ").strip()
        except EOFError:
            break
        if not line:
            continue

        command, _, arg = line.partition(" ")
        arg = arg.strip()

        try:
            if command == "q":
                break
            elif command == "s":
                session.submit(arg)
                display_results(session, format_type)
            elif command == "field":
                session.set_field(arg)
            elif command == "sort":
                session.change_sort(arg)
                display_results(session, format_type)
            elif command in ("n", "p"):
                if command == "n":
                    session.next_page()
                else:
                    session.previous_page()
                display_results(session, format_type)
            elif command == "fav":
                record = _pick(session, int(arg))
                if record is not None:
                    added = session.toggle_favorite(record)
                    print(f"{'Added' if added else 'Removed'} favorite: {record.title}")
            elif command == "d":
                record = _pick(session, int(arg))
                if record is not None:
                    session.select_record(record)
                    display_details(session)
            elif command == "favs":
                session.show_favorites()
                display_favorites(session.favorites, format_type, session.config.COVERS_URL)
            elif command == "r":
                session.show_results()
                display_results(session, format_type)
            else:
                print(INTERACTIVE_HELP)
        except ValueError as e:
            print(f"Invalid input: {e}")


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="BookFinder - search Open Library by title or author",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search by title
  %(prog)s search "Dune"

  # Search by author, oldest first, and favorite the second result
  %(prog)s search "Tolkien" --field author --sort year-asc --favorite 2

  # Same search through the async client
  %(prog)s search "Dune" --async

  # Show favorites
  %(prog)s favorites --format json
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Search command
    search_parser = subparsers.add_parser("search", help="Search for books")
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument("--field", choices=SEARCH_FIELDS, default="title", help="Search field (default: title)")
    search_parser.add_argument("--sort", choices=SORT_MODES, default="relevance", help="Sort order (default: relevance)")
    search_parser.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    search_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")
    search_parser.add_argument("--favorite", type=int, action="append", metavar="N", help="Toggle favorite for result N")
    search_parser.add_argument("--details", type=int, metavar="N", help="Show details for result N")
    search_parser.add_argument("--async", dest="use_async", action="store_true", help="Use async client")

    # Favorites command
    favorites_parser = subparsers.add_parser("favorites", help="Show saved favorites")
    favorites_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")
    favorites_parser.add_argument("--remove", metavar="KEY", help="Remove the favorite with this key")
    favorites_parser.add_argument("--clear", action="store_true", help="Remove all favorites")

    # Interactive command
    interactive_parser = subparsers.add_parser("interactive", help="Interactive search session")
    interactive_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(args.verbose)
    config = Config()
    storage = None

    try:
        storage = open_storage(config)
        favorites = FavoritesStore(storage, config.FAVORITES_KEY)

        if args.command == "favorites":
            manage_favorites(args, favorites, config)
            return

        if args.command == "search" and args.use_async:
            asyncio.run(search_books_async(args, favorites, config))
            return

        with OpenLibraryClient(
            timeout=config.DEFAULT_TIMEOUT,
            user_agent=config.USER_AGENT
        ) as client:
            session = BookFinderSession(client, favorites, config)

            if args.command == "search":
                search_books(args, session)
            elif args.command == "interactive":
                interactive(session, args.format)

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        if storage is not None:
            storage.close()


if __name__ == "__main__":
    main()
