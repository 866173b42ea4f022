from .action import Action, ActionKind
from .context import Match, ValueContext
from .evaluator import RowEvaluator, RowResult
from .filters import FilterItem, IntegerFilter, MemberFilter, SearchFilter, StringFilter
from .schema import SchemaColumn, SchemaSource
from .search import Search, SearchResults
from .sources import SearchSource, SourceDescriptor, SourceManager, SourceType
from .sql import CompiledQuery, Query

__all__ = [
    "Action",
    "ActionKind",
    "CompiledQuery",
    "FilterItem",
    "IntegerFilter",
    "Match",
    "MemberFilter",
    "Query",
    "RowEvaluator",
    "RowResult",
    "SchemaColumn",
    "SchemaSource",
    "Search",
    "SearchFilter",
    "SearchResults",
    "SearchSource",
    "SourceDescriptor",
    "SourceManager",
    "SourceType",
    "StringFilter",
    "ValueContext",
]
