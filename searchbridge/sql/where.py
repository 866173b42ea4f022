from abc import ABC, abstractmethod
from typing import Any, Dict, Sequence, TYPE_CHECKING

from sqlglot import exp

from searchbridge.errors import SearchQueryError
from .render import RenderContext, SelectColumn

if TYPE_CHECKING:
    from .join import Join

LIKE_ESCAPE = "!"

_INTEGER_OPERATORS: Dict[str, type[exp.Binary]] = {
    "equals": exp.EQ,
    "=": exp.EQ,
    "notequals": exp.NEQ,
    "!=": exp.NEQ,
    "<>": exp.NEQ,
    "greater": exp.GT,
    ">": exp.GT,
    "less": exp.LT,
    "<": exp.LT,
    ">=": exp.GTE,
    "<=": exp.LTE,
}


def escape_like(value: str) -> str:
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


class Where(ABC):
    @abstractmethod
    def get_expression(self, context: RenderContext) -> exp.Expression:
        ...


class WhereInteger(Where):
    def __init__(self, column: SelectColumn, logic: str, value: int) -> None:
        operator = _INTEGER_OPERATORS.get(logic)
        if operator is None:
            raise SearchQueryError(f"Unsupported integer comparison '{logic}'.")
        self.column = column
        self.logic = logic
        self.value = int(value)
        self._operator = operator

    def get_expression(self, context: RenderContext) -> exp.Expression:
        return self._operator(this=self.column.get_expression(), expression=context.bind(self.value))


class WhereString(Where):
    """
    LIKE based string predicate.

    `pattern` is a LIKE pattern whose literal parts were passed through
    `escape_like`. With `ignore_case` both sides are lower-cased.
    """

    def __init__(
        self,
        column: SelectColumn,
        pattern: str,
        *,
        ignore_case: bool = False,
        negate: bool = False,
        exact: bool = False,
    ) -> None:
        self.column = column
        self.pattern = pattern
        self.ignore_case = ignore_case
        self.negate = negate
        self.exact = exact

    def get_expression(self, context: RenderContext) -> exp.Expression:
        column: exp.Expression = self.column.get_expression()
        if self.exact:
            condition: exp.Expression = exp.EQ(this=column, expression=context.bind(self.pattern))
        else:
            value = self.pattern
            if self.ignore_case:
                column = exp.Lower(this=column)
                value = value.lower()
            condition = exp.Escape(
                this=exp.Like(this=column, expression=context.bind(value)),
                expression=exp.Literal.string(LIKE_ESCAPE),
            )
        if self.negate:
            return exp.Not(this=condition)
        return condition


class WhereIn(Where):
    def __init__(self, column: SelectColumn, values: Sequence[Any], negate: bool = False) -> None:
        if not values:
            raise SearchQueryError(f"IN predicate on '{column.column}' needs at least one value.")
        self.column = column
        self.values = list(values)
        self.negate = negate

    def get_expression(self, context: RenderContext) -> exp.Expression:
        condition = exp.In(
            this=self.column.get_expression(),
            expressions=[context.bind(value) for value in self.values],
        )
        if self.negate:
            return exp.Not(this=condition)
        return condition


class WhereJoin(Where):
    """Existence test against a joined table: IS NOT NULL for has, IS NULL for hasnot."""

    def __init__(self, join: "Join", key: str, exists: bool) -> None:
        self.join = join
        self.key = key
        self.exists = exists

    def get_expression(self, context: RenderContext) -> exp.Expression:
        column = exp.column(self.key, table=context.alias_for(self.join), quoted=True)
        condition = exp.Is(this=column, expression=exp.Null())
        if self.exists:
            return exp.Not(this=condition)
        return condition


class WhereGroup(Where):
    def __init__(self, children: Sequence[Where]) -> None:
        self.children = list(children)

    def __len__(self) -> int:
        return len(self.children)


class WhereAnd(WhereGroup):
    def get_expression(self, context: RenderContext) -> exp.Expression:
        return exp.and_(*[child.get_expression(context) for child in self.children])


class WhereOr(WhereGroup):
    def get_expression(self, context: RenderContext) -> exp.Expression:
        return exp.or_(*[child.get_expression(context) for child in self.children])
