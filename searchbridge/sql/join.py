import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from sqlglot import exp

from searchbridge.config import settings
from searchbridge.errors import SearchQueryError
from searchbridge.schema.model import SchemaColumn
from .render import RenderContext
from .where import WhereJoin


class JoinKind(str, Enum):
    comment = "comment"
    post = "post"
    user = "user"
    term = "term"


# Kinds an integer column may test with has/hasnot.
MEMBERSHIP_JOIN_KINDS = frozenset({JoinKind.comment, JoinKind.post, JoinKind.user})

JOIN_LOGIC = ("has", "hasnot")


@dataclass(frozen=True)
class JoinTarget:
    kind: JoinKind
    table: str
    key: str
    title: str


_RELATIONS: Dict[str, JoinKind] = {
    "post": JoinKind.post,
    "postmeta": JoinKind.post,
    "comment": JoinKind.comment,
    "commentmeta": JoinKind.comment,
    "user": JoinKind.user,
    "usermeta": JoinKind.user,
    "term": JoinKind.term,
}

_TARGETS: Dict[JoinKind, tuple[str, str, str]] = {
    JoinKind.post: ("posts", "ID", "post_title"),
    JoinKind.comment: ("comments", "comment_ID", "comment_author"),
    JoinKind.user: ("users", "ID", "display_name"),
    JoinKind.term: ("terms", "term_id", "name"),
}


class Join(ABC):
    """
    Relates a source column to another table.

    A join contributes a LEFT JOIN clause plus an existence where-fragment. Its
    logic is fixed once, when the owning filter is constructed.
    """

    def __init__(self, kind: JoinKind, column: SchemaColumn, target: JoinTarget) -> None:
        self.kind = kind
        self.column = column
        self.target = target
        self._logic: Optional[str] = None
        self._values: tuple[Any, ...] = ()

    @property
    def logic(self) -> str:
        return self._logic or "has"

    @property
    def values(self) -> tuple[Any, ...]:
        return self._values

    def set_logic(self, logic: str, values: Iterable[Any] = ()) -> None:
        if self._logic is not None:
            raise SearchQueryError(f"Join logic for '{self.column.column}' is already set.")
        if logic not in JOIN_LOGIC:
            raise SearchQueryError(f"Unsupported join logic '{logic}'.")
        self._logic = logic
        self._values = tuple(values)

    def get_where(self) -> WhereJoin:
        return WhereJoin(self, self.join_key, exists=self.logic == "has")

    @property
    def key_select(self) -> "JoinKeyColumn":
        return JoinKeyColumn(self)

    def is_joined(self, key_value: Any) -> bool:
        """Row-level form of the where-fragment, given the selected join key."""
        return (key_value is not None) == (self.logic == "has")

    def get_join_expression(self, context: RenderContext) -> tuple[exp.Expression, exp.Expression]:
        alias = context.register_join(self)
        on = exp.EQ(
            this=exp.column(self.join_key, table=alias, quoted=True),
            expression=exp.column(self.local_key, table=self.column.table, quoted=True),
        )
        return self._joined_table(alias, context), on

    @property
    def local_key(self) -> str:
        return self.column.column

    @property
    @abstractmethod
    def join_key(self) -> str:
        ...

    @abstractmethod
    def _joined_table(self, alias: str, context: RenderContext) -> exp.Expression:
        ...


@dataclass(frozen=True)
class JoinKeyColumn:
    """The joined table's key, selected so a fetched row shows whether the join found a match."""

    join: Join

    @property
    def column(self) -> str:
        return f"{self.join.column.column}__{self.join.kind.value}"

    @property
    def name(self) -> str:
        return self.column

    def get_select_expression(self, context: Optional[RenderContext] = None) -> exp.Expression:
        if context is None:
            raise SearchQueryError(f"Join key for '{self.join.column.column}' needs a render context.")
        key = exp.column(self.join.join_key, table=context.alias_for(self.join), quoted=True)
        return exp.alias_(key, self.name, quoted=True)


class KeyJoin(Join):
    """Joins the target table on its primary key. Used for post, comment and user relations."""

    @property
    def join_key(self) -> str:
        return self.target.key

    def _joined_table(self, alias: str, context: RenderContext) -> exp.Expression:
        return exp.table_(self.target.table, quoted=True, alias=alias)


class TermJoin(Join):
    """
    Joins the distinct objects carrying any of the given terms.

    The subquery returns one row per object so the outer row count is unchanged.
    """

    def __init__(self, kind: JoinKind, column: SchemaColumn, target: JoinTarget, prefix: str) -> None:
        super().__init__(kind, column, target)
        self._relationships = f"{prefix}term_relationships"
        self._taxonomy = f"{prefix}term_taxonomy"

    @property
    def local_key(self) -> str:
        return self.column.table_id

    @property
    def join_key(self) -> str:
        return "object_id"

    def _joined_table(self, alias: str, context: RenderContext) -> exp.Expression:
        taxonomy_id = exp.EQ(
            this=exp.column("term_taxonomy_id", table="tt", quoted=True),
            expression=exp.column("term_taxonomy_id", table="tr", quoted=True),
        )
        conditions: List[exp.Expression] = [
            exp.EQ(
                this=exp.column("taxonomy", table="tt", quoted=True),
                expression=context.bind(self.column.column),
            )
        ]
        if self.values:
            conditions.append(
                exp.In(
                    this=exp.column("term_id", table="tt", quoted=True),
                    expressions=[context.bind(_coerce_key(value)) for value in self.values],
                )
            )
        subquery = (
            exp.select(exp.column("object_id", table="tr", quoted=True))
            .distinct()
            .from_(exp.table_(self._relationships, quoted=True, alias="tr"))
            .join(exp.table_(self._taxonomy, quoted=True, alias="tt"), on=taxonomy_id)
            .where(exp.and_(*conditions))
        )
        return subquery.subquery(alias)


def _coerce_key(value: Any) -> Any:
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    return text


class JoinResolver:
    def __init__(self, table_prefix: Optional[str] = None) -> None:
        self._table_prefix = table_prefix
        self._logger = logging.getLogger(__name__)

    @property
    def table_prefix(self) -> str:
        if self._table_prefix is None:
            return settings.TABLE_PREFIX
        return self._table_prefix

    def get_target(self, relation_name: Optional[str]) -> Optional[JoinTarget]:
        kind = _RELATIONS.get((relation_name or "").strip().lower())
        if kind is None:
            return None
        table, key, title = _TARGETS[kind]
        return JoinTarget(kind=kind, table=f"{self.table_prefix}{table}", key=key, title=title)

    def resolve(self, relation_name: Optional[str], column: SchemaColumn) -> Optional[Join]:
        target = self.get_target(relation_name)
        if target is None:
            self._logger.debug(
                "No join relation '%s' for %s.%s", relation_name, column.source, column.column
            )
            return None
        if target.kind == JoinKind.term:
            return TermJoin(target.kind, column, target, self.table_prefix)
        return KeyJoin(target.kind, column, target)


join_resolver = JoinResolver()
