import pytest

from searchbridge.errors import SearchQueryError
from searchbridge.schema import SchemaSource
from searchbridge.sql import (
    JoinResolver,
    Query,
    SelectColumn,
    WhereIn,
    WhereInteger,
    WhereOr,
    WhereString,
    escape_like,
)


def _build_posts_schema() -> SchemaSource:
    return SchemaSource.model_validate(
        {
            "name": "posts",
            "table": "posts",
            "title_column": "post_title",
            "columns": [
                {"column": "post_author", "type": "integer", "joined_by": "user"},
                {"column": "post_parent", "type": "integer", "joined_by": "post"},
            ],
        }
    )


def _build_query() -> Query:
    return (
        Query()
        .add_from("posts")
        .add_select(SelectColumn("posts", "ID"))
        .add_select(SelectColumn("posts", "post_title"))
    )


def test_query_without_table_cannot_render() -> None:
    with pytest.raises(SearchQueryError):
        Query().add_select(SelectColumn("posts", "ID")).get_as_sql("sqlite")


def test_query_without_columns_cannot_render() -> None:
    with pytest.raises(SearchQueryError):
        Query().add_from("posts").get_as_sql("sqlite")


def test_user_values_only_appear_as_parameters() -> None:
    hostile = "x' OR '1'='1"
    query = _build_query()
    query.add_where(WhereString(SelectColumn("posts", "post_title"), f"%{escape_like(hostile)}%"))
    query.add_where(WhereIn(SelectColumn("posts", "post_status"), ["publish", "draft"]))

    compiled = query.get_as_sql("sqlite")

    assert hostile not in compiled.sql
    assert "publish" not in compiled.sql
    assert compiled.params == {"p0": f"%{hostile}%", "p1": "publish", "p2": "draft"}


def test_top_level_wheres_are_and_ed_and_groups_parenthesized() -> None:
    comments = SelectColumn("posts", "comment_count")
    query = _build_query()
    query.add_where(WhereInteger(SelectColumn("posts", "ID"), ">", 1))
    query.add_where(WhereOr([WhereInteger(comments, "<", 2), WhereInteger(comments, ">", 8)]))

    sql = query.get_as_sql("sqlite").sql

    assert '"posts"."ID" > :p0 AND (' in sql
    assert '"posts"."comment_count" < :p1 OR "posts"."comment_count" > :p2' in sql


def test_merged_queries_deduplicate_selects() -> None:
    query = _build_query()
    other = Query().add_select(SelectColumn("posts", "ID")).add_select(SelectColumn("posts", "post_status"))

    query.add_query(other)

    assert [column.column for column in query.selects] == ["ID", "post_title", "post_status"]


def test_paging_and_order_are_rendered() -> None:
    query = _build_query().set_order(SelectColumn("posts", "ID")).set_paging(50, 25)

    sql = query.get_as_sql("sqlite").sql

    assert 'ORDER BY "posts"."ID"' in sql
    assert "LIMIT 25" in sql
    assert "OFFSET 50" in sql


def test_key_join_renders_left_join_with_aliased_target() -> None:
    column = _build_posts_schema().get_column("post_author")
    join = JoinResolver(table_prefix="wp_").resolve(column.joined_by, column)
    join.set_logic("hasnot")

    query = _build_query().add_join(join).add_where(join.get_where())
    sql = query.get_as_sql("sqlite").sql

    assert 'LEFT JOIN "wp_users" AS user0' in sql
    assert '"user0"."ID" = "posts"."post_author"' in sql
    assert '"user0"."ID" IS NULL' in sql


def test_join_aliases_are_unique_per_join() -> None:
    schema = _build_posts_schema()
    resolver = JoinResolver(table_prefix="")
    author = resolver.resolve("user", schema.get_column("post_author"))
    parent = resolver.resolve("post", schema.get_column("post_parent"))
    author.set_logic("has")
    parent.set_logic("has")

    query = _build_query().add_join(author).add_join(parent).add_join(author)
    sql = query.get_as_sql("sqlite").sql

    assert len(query.joins) == 2
    assert "AS user0" in sql
    assert "AS post1" in sql


def test_where_on_missing_join_is_rejected() -> None:
    column = _build_posts_schema().get_column("post_author")
    join = JoinResolver(table_prefix="").resolve("user", column)

    query = _build_query().add_where(join.get_where())

    with pytest.raises(SearchQueryError):
        query.get_as_sql("sqlite")


def test_empty_in_predicate_is_rejected() -> None:
    with pytest.raises(SearchQueryError):
        WhereIn(SelectColumn("posts", "post_status"), [])


def test_escape_like_escapes_wildcards_and_escape_character() -> None:
    assert escape_like("100%") == "100!%"
    assert escape_like("a_b") == "a!_b"
    assert escape_like("wow!") == "wow!!"
