import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from searchbridge.action import Action, ActionKind
from searchbridge.config import settings
from searchbridge.errors import SaveError, SearchError
from searchbridge.executor import SqlAlchemyQueryExecutor
from searchbridge.search import Search
from searchbridge.sources import SourceManager
from searchbridge.utils.logger import setup_logging


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="searchbridge", description="Search and replace over schema-described tables.")
    parser.add_argument("--database", default=settings.DATABASE_URI, help="SQLAlchemy database URI.")
    parser.add_argument("--source", action="append", default=[], help="Source name; repeatable.")
    parser.add_argument(
        "--filter",
        action="append",
        default=[],
        help='Filter group as JSON, e.g. \'{"type": "posts", "items": [{"column": "post_title", "value": "x"}]}\'.',
    )
    parser.add_argument("--replace", default=None, help="Replacement text for matched string spans.")
    parser.add_argument("--save", action="store_true", help="Write replacements back to the database.")
    parser.add_argument("--offset", type=int, default=0)
    parser.add_argument("--limit", type=int, default=settings.DEFAULT_PAGE_SIZE)
    parser.add_argument("--list-sources", action="store_true", help="Print the available sources and exit.")
    return parser.parse_args(argv)


def run(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    setup_logging(service_name="searchbridge", level=settings.LOG_LEVEL, log_file=None)
    logger = logging.getLogger("searchbridge.cli")

    executor = SqlAlchemyQueryExecutor.from_uri(args.database)
    manager = SourceManager.from_settings(settings, executor)

    if args.list_sources:
        print(json.dumps(manager.get_all_grouped(), indent=2))
        return 0

    try:
        filters = manager.create_filters(json.loads(raw) for raw in args.filter)
    except json.JSONDecodeError as exc:
        logger.error("Filter is not valid JSON: %s", exc)
        return 2

    source_names = args.source or sorted({search_filter.source for search_filter in filters})
    action = Action(ActionKind.replace, args.replace) if args.replace is not None else Action()
    search = Search(manager.get(source_names, filters), executor, action)

    try:
        results = search.get_search_results(args.offset, args.limit)
        if args.save and action.is_replace:
            for result in results.results:
                search.save_result(result)
    except SaveError as exc:
        logger.error("Save failed: %s", exc)
        print(json.dumps({"error": exc.to_json()}))
        return 1
    except SearchError as exc:
        logger.error("Search failed: %s", exc)
        return 1

    print(json.dumps(results.to_json(), indent=2, default=str))
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
