from dataclasses import dataclass, field
from typing import Any, Dict, Optional, TYPE_CHECKING

from sqlglot import exp

from searchbridge.errors import SearchQueryError

if TYPE_CHECKING:
    from .join import Join


@dataclass(frozen=True)
class SelectColumn:
    table: str
    column: str
    alias: Optional[str] = None

    @property
    def name(self) -> str:
        return self.alias or self.column

    def get_expression(self) -> exp.Column:
        return exp.column(self.column, table=self.table, quoted=True)

    def get_select_expression(self, context: Optional["RenderContext"] = None) -> exp.Expression:
        return exp.alias_(self.get_expression(), self.name, quoted=True)


class RenderContext:
    """
    Collects bound parameters and join aliases while a Query is rendered.

    User-supplied values never reach the SQL text; each one becomes a named
    placeholder (`:p0`, `:p1`, ...) whose value is stored in `params`.
    """

    def __init__(self, prefix: str = "p") -> None:
        self._prefix = prefix
        self.params: Dict[str, Any] = {}
        self._aliases: Dict[int, str] = {}

    def bind(self, value: Any) -> exp.Placeholder:
        name = f"{self._prefix}{len(self.params)}"
        self.params[name] = value
        return exp.Placeholder(this=name)

    def register_join(self, join: "Join") -> str:
        key = id(join)
        if key not in self._aliases:
            self._aliases[key] = f"{join.kind.value}{len(self._aliases)}"
        return self._aliases[key]

    def alias_for(self, join: "Join") -> str:
        alias = self._aliases.get(id(join))
        if alias is None:
            raise SearchQueryError(
                f"Join on '{join.column.column}' is referenced by a where clause but was never added to the query."
            )
        return alias


@dataclass(frozen=True)
class CompiledQuery:
    sql: str
    params: Dict[str, Any] = field(default_factory=dict)
