from .join import MEMBERSHIP_JOIN_KINDS, Join, JoinKind, JoinResolver, JoinTarget, JoinKeyColumn, KeyJoin, TermJoin, join_resolver
from .query import Query
from .render import CompiledQuery, RenderContext, SelectColumn
from .where import Where, WhereAnd, WhereIn, WhereInteger, WhereJoin, WhereOr, WhereString, escape_like

__all__ = [
    "CompiledQuery",
    "Join",
    "JoinKeyColumn",
    "JoinKind",
    "JoinResolver",
    "JoinTarget",
    "KeyJoin",
    "MEMBERSHIP_JOIN_KINDS",
    "Query",
    "RenderContext",
    "SelectColumn",
    "TermJoin",
    "Where",
    "WhereAnd",
    "WhereIn",
    "WhereInteger",
    "WhereJoin",
    "WhereOr",
    "WhereString",
    "escape_like",
    "join_resolver",
]
