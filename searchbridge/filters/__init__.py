from .base import FilterItem, normalize_logic
from .group import SearchFilter
from .integer import IntegerFilter, parse_int
from .member import MemberFilter
from .string import StringFilter

__all__ = [
    "FilterItem",
    "IntegerFilter",
    "MemberFilter",
    "SearchFilter",
    "StringFilter",
    "normalize_logic",
    "parse_int",
]
