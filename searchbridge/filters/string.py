import logging
import re
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Pattern, TYPE_CHECKING

from searchbridge.action import Action
from searchbridge.context import Match, ValueContext
from searchbridge.schema.model import SchemaColumn
from searchbridge.sql import JoinResolver, Query, WhereString, escape_like
from .base import FilterItem

if TYPE_CHECKING:
    from searchbridge.sources.base import SearchSource

logger = logging.getLogger(__name__)

FLAGS = ("case", "regex")

_NEGATIVE_LOGIC = ("notequals", "notcontains")
_DOLLAR_GROUP = re.compile(r"\$(\d+)|\$\{(\d+)\}")


def _to_python_template(replacement: str) -> str:
    """Accept `$1`/`${1}` group references alongside Python's `\\1`."""
    return _DOLLAR_GROUP.sub(lambda m: f"\\g<{m.group(1) or m.group(2)}>", replacement)


class StringFilter(FilterItem):
    """
    Text criterion with optional ignore-case (`case` flag) and regex matching.

    Only conditions that select a superset of the in-memory test are pushed to
    SQL; the rest is decided per row after fetch.
    """

    LOGIC = ("equals", "notequals", "contains", "notcontains", "begins", "ends")
    DEFAULT_LOGIC = "equals"

    def __init__(
        self,
        item: Mapping[str, Any],
        column: SchemaColumn,
        resolver: Optional[JoinResolver] = None,
    ) -> None:
        super().__init__(item, column, resolver)
        raw = item.get("value")
        self.value = "" if raw is None else str(raw)

        flags = item.get("flags") or []
        if isinstance(flags, str):
            flags = [flags]
        self.flags = [flag for flag in FLAGS if flag in {str(f).lower() for f in flags}]

        self._pattern: Optional[Pattern[str]] = None
        if self.value:
            try:
                self._pattern = self._compile()
            except re.error as exc:
                logger.debug("Ignoring filter on %s, bad pattern %r: %s", column.column, self.value, exc)

    @property
    def ignore_case(self) -> bool:
        return "case" in self.flags

    @property
    def is_regex(self) -> bool:
        return "regex" in self.flags

    def _compile(self) -> Pattern[str]:
        body = self.value if self.is_regex else re.escape(self.value)
        if self.logic in ("equals", "notequals"):
            body = rf"\A(?:{body})\Z"
        elif self.logic == "begins":
            body = rf"\A(?:{body})"
        elif self.logic == "ends":
            body = rf"(?:{body})\Z"
        return re.compile(body, re.IGNORECASE if self.ignore_case else 0)

    def is_valid(self) -> bool:
        return self._pattern is not None

    def get_query(self) -> Query:
        query = Query()
        select = self.select
        if self.is_valid() and self.is_pushed_down():
            query.add_where(self._build_where())
        query.add_select(select)
        return query

    def is_pushed_down(self) -> bool:
        if self.is_regex:
            return False
        if self.ignore_case:
            # LOWER() and LIKE only fold ASCII on several backends, SQLite included.
            return self.value.isascii()
        # Case sensitive negative tests are not a superset on case insensitive collations.
        return self.logic not in _NEGATIVE_LOGIC

    def _build_where(self) -> WhereString:
        literal = escape_like(self.value)
        negate = self.logic in _NEGATIVE_LOGIC
        if self.logic in ("equals", "notequals") and not self.ignore_case:
            return WhereString(self.select, self.value, exact=True)
        if self.logic in ("contains", "notcontains"):
            pattern = f"%{literal}%"
        elif self.logic == "begins":
            pattern = f"{literal}%"
        elif self.logic == "ends":
            pattern = f"%{literal}"
        else:
            pattern = literal
        return WhereString(self.select, pattern, ignore_case=self.ignore_case, negate=negate)

    def get_column_data(
        self,
        column: str,
        value: Any,
        source: Optional["SearchSource"],
        action: Action,
    ) -> ValueContext:
        text = "" if value is None else str(value)
        if self._pattern is None:
            return self.get_unmatched_context(text)

        if self.logic in _NEGATIVE_LOGIC:
            if self._pattern.search(text) is None:
                return self.get_matched_context(text, matches=[])
            return self.get_unmatched_context(text)

        found = list(self._pattern.finditer(text))
        if not found:
            return self.get_unmatched_context(text)

        if not action.is_replace:
            return self.get_matched_context(text, [Match(m.start(), m.end(), m.group(0)) for m in found])

        matches: List[Match] = []
        for m in found:
            matches.append(Match(m.start(), m.end(), m.group(0), self._replacement_for(m, action.replacement)))
        return self.get_matched_context(text, matches, replacement=self._apply(text, matches))

    def _replacement_for(self, match: "re.Match[str]", replacement: Optional[str]) -> str:
        if replacement is None:
            return match.group(0)
        if self.is_regex:
            return match.expand(_to_python_template(replacement))
        return replacement

    @staticmethod
    def _apply(text: str, matches: List[Match]) -> str:
        pieces: List[str] = []
        position = 0
        for match in matches:
            pieces.append(text[position:match.start])
            pieces.append(match.replacement if match.replacement is not None else match.text)
            position = match.end
        pieces.append(text[position:])
        return "".join(pieces)

    def to_json(self) -> Dict[str, Any]:
        return {
            "column": self.column.column,
            "value": self.value,
            "logic": self.logic,
            "flags": list(self.flags),
        }
