from typing import List, Optional, Union

from sqlglot import exp

from searchbridge.config import settings
from searchbridge.errors import SearchQueryError
from .join import Join, JoinKeyColumn
from .render import CompiledQuery, RenderContext, SelectColumn
from .where import Where

Selectable = Union[SelectColumn, JoinKeyColumn]


class Query:
    """
    Mutable SELECT builder used for one compile pass.

    Wheres added at the top level are AND-ed together. Joins are kept apart
    from plain predicates and rendered as LEFT JOINs so a filter can express
    membership as row existence in the joined table.
    """

    def __init__(self) -> None:
        self._from: Optional[str] = None
        self._selects: List[Selectable] = []
        self._joins: List[Join] = []
        self._wheres: List[Where] = []
        self._order: Optional[tuple[SelectColumn, bool]] = None
        self._offset: Optional[int] = None
        self._limit: Optional[int] = None

    @property
    def from_table(self) -> Optional[str]:
        return self._from

    @property
    def selects(self) -> List[Selectable]:
        return list(self._selects)

    @property
    def joins(self) -> List[Join]:
        return list(self._joins)

    @property
    def wheres(self) -> List[Where]:
        return list(self._wheres)

    def add_from(self, table: str) -> "Query":
        self._from = table
        return self

    def add_select(self, column: Selectable) -> "Query":
        if column not in self._selects:
            self._selects.append(column)
        return self

    def add_join(self, join: Join) -> "Query":
        if all(existing is not join for existing in self._joins):
            self._joins.append(join)
        return self

    def add_where(self, where: Where) -> "Query":
        self._wheres.append(where)
        return self

    def add_query(self, query: "Query") -> "Query":
        if query.from_table and not self._from:
            self._from = query.from_table
        for column in query.selects:
            self.add_select(column)
        for join in query.joins:
            self.add_join(join)
        for where in query.wheres:
            self.add_where(where)
        return self

    def set_order(self, column: SelectColumn, descending: bool = False) -> "Query":
        self._order = (column, descending)
        return self

    def set_paging(self, offset: int, limit: Optional[int]) -> "Query":
        self._offset = max(0, int(offset))
        self._limit = int(limit) if limit is not None else None
        return self

    def get_select(self, context: RenderContext) -> exp.Select:
        if not self._from:
            raise SearchQueryError("Query has no table to select from.")
        if not self._selects:
            raise SearchQueryError(f"Query on '{self._from}' selects no columns.")

        # Selects may refer to join aliases.
        for join in self._joins:
            context.register_join(join)

        select = exp.select(*[column.get_select_expression(context) for column in self._selects])
        select = select.from_(exp.table_(self._from, quoted=True))

        for join in self._joins:
            table, on = join.get_join_expression(context)
            select = select.join(table, on=on, join_type="left")

        if self._wheres:
            select = select.where(exp.and_(*[where.get_expression(context) for where in self._wheres]))

        if self._order is not None:
            column, descending = self._order
            select = select.order_by(exp.Ordered(this=column.get_expression(), desc=descending))

        if self._limit is not None:
            select = select.limit(self._limit).offset(self._offset or 0)
        return select

    def get_as_sql(self, dialect: Optional[str] = None) -> CompiledQuery:
        context = RenderContext()
        tree = self.get_select(context)
        return CompiledQuery(sql=tree.sql(dialect=dialect or settings.SQL_DIALECT), params=dict(context.params))
