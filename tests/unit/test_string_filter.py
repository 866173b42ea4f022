import pytest

from searchbridge.action import Action, ActionKind
from searchbridge.filters import StringFilter
from searchbridge.schema import SchemaSource
from searchbridge.sql import WhereString


def _build_posts_schema() -> SchemaSource:
    return SchemaSource.model_validate(
        {
            "name": "posts",
            "table": "posts",
            "title_column": "post_title",
            "columns": [{"column": "post_content", "type": "string", "title": "Content"}],
        }
    )


def _build_filter(item: dict) -> StringFilter:
    return StringFilter(item, _build_posts_schema().get_column("post_content"))


def test_ignore_case_contains_reports_every_span() -> None:
    string_filter = _build_filter({"value": "hello", "logic": "contains", "flags": ["case"]})

    context = string_filter.get_column_data("post_content", "Hello hello HELLO", None, Action())

    assert context.matched
    assert [(match.start, match.end) for match in context.matches] == [(0, 5), (6, 11), (12, 17)]


def test_case_sensitive_contains_only_reports_exact_case() -> None:
    string_filter = _build_filter({"value": "hello", "logic": "contains"})

    context = string_filter.get_column_data("post_content", "Hello hello HELLO", None, Action())

    assert [(match.start, match.text) for match in context.matches] == [(6, "hello")]


@pytest.mark.parametrize(
    "logic, value, expected",
    [
        ("equals", "hello world", True),
        ("equals", "hello", False),
        ("begins", "hello world", True),
        ("begins", "say hello", False),
        ("ends", "say hello", True),
        ("ends", "hello world", False),
        ("notcontains", "goodbye", True),
        ("notcontains", "oh hello", False),
        ("notequals", "hello", False),
        ("notequals", "hello!", True),
    ],
)
def test_logic_evaluation(logic, value, expected) -> None:
    pattern = "hello world" if logic == "equals" else "hello"
    string_filter = _build_filter({"value": pattern, "logic": logic})

    assert string_filter.get_column_data("post_content", value, None, Action()).matched is expected


def test_regex_is_never_pushed_down() -> None:
    string_filter = _build_filter({"value": "^h.llo", "logic": "contains", "flags": ["regex"]})

    assert string_filter.is_valid()
    assert string_filter.get_query().wheres == []
    assert string_filter.get_column_data("post_content", "hallo there", None, Action()).matched
    assert not string_filter.get_column_data("post_content", "say hallo", None, Action()).matched


def test_bad_regex_makes_filter_invalid() -> None:
    string_filter = _build_filter({"value": "(", "logic": "contains", "flags": ["regex"]})

    assert not string_filter.is_valid()
    assert string_filter.get_query().wheres == []
    assert not string_filter.get_column_data("post_content", "(", None, Action()).matched


def test_empty_value_is_invalid() -> None:
    assert not _build_filter({"value": "", "logic": "contains"}).is_valid()
    assert not _build_filter({"logic": "contains"}).is_valid()


def test_case_sensitive_negative_logic_is_decided_per_row() -> None:
    case_sensitive = _build_filter({"value": "hello", "logic": "notcontains"})
    ignore_case = _build_filter({"value": "hello", "logic": "notcontains", "flags": ["case"]})

    assert case_sensitive.get_query().wheres == []
    (where,) = ignore_case.get_query().wheres
    assert isinstance(where, WhereString)
    assert where.negate
    assert where.ignore_case


def test_like_wildcards_in_value_are_escaped_and_bound() -> None:
    string_filter = _build_filter({"value": "50%_OFF", "logic": "contains", "flags": ["case"]})

    compiled = string_filter.get_query().add_from("posts").get_as_sql("sqlite")

    assert compiled.params == {"p0": "%50!%!_off%"}
    assert "50" not in compiled.sql
    assert "LIKE :p0" in compiled.sql
    assert "ESCAPE '!'" in compiled.sql
    assert "LOWER(" in compiled.sql


def test_case_sensitive_equals_compiles_to_exact_comparison() -> None:
    string_filter = _build_filter({"value": "Hello", "logic": "equals"})

    compiled = string_filter.get_query().add_from("posts").get_as_sql("sqlite")

    assert compiled.params == {"p0": "Hello"}
    assert '"posts"."post_content" = :p0' in compiled.sql


def test_plain_replace_rewrites_every_span() -> None:
    string_filter = _build_filter({"value": "hello", "logic": "contains"})
    action = Action(ActionKind.replace, "bye")

    context = string_filter.get_column_data("post_content", "hello world hello", None, action)

    assert context.replacement == "bye world bye"
    assert [match.replacement for match in context.matches] == ["bye", "bye"]
    assert context.has_replacement


def test_regex_replace_expands_dollar_groups() -> None:
    string_filter = _build_filter(
        {"value": r"(\w+)@example\.com", "logic": "contains", "flags": ["regex"]}
    )
    action = Action(ActionKind.replace, "$1@example.org")

    context = string_filter.get_column_data("post_content", "mail bob@example.com now", None, action)

    assert context.replacement == "mail bob@example.org now"


def test_replace_is_not_applied_without_replace_action() -> None:
    string_filter = _build_filter({"value": "hello", "logic": "contains"})

    context = string_filter.get_column_data("post_content", "hello", None, Action(ActionKind.delete))

    assert context.matched
    assert context.replacement is None
    assert not context.has_replacement


def test_unknown_flags_are_dropped() -> None:
    string_filter = _build_filter({"value": "x", "logic": "contains", "flags": ["regex", "multiline"]})

    assert string_filter.flags == ["regex"]


def test_to_json_reproduces_constructor_input() -> None:
    data = {"column": "post_content", "value": "hello", "logic": "begins", "flags": ["case", "regex"]}

    assert StringFilter.from_json(data, _build_posts_schema().get_column("post_content")).to_json() == data


def test_ignore_case_with_non_ascii_value_is_decided_per_row() -> None:
    string_filter = _build_filter({"value": "élan", "logic": "contains", "flags": ["case"]})

    assert not string_filter.is_pushed_down()
    assert string_filter.get_query().wheres == []
    assert string_filter.get_column_data("post_content", "Élan vital", None, Action()).matched


def test_case_sensitive_non_ascii_value_is_still_pushed_down() -> None:
    string_filter = _build_filter({"value": "élan", "logic": "contains"})

    assert string_filter.is_pushed_down()
    assert len(string_filter.get_query().wheres) == 1
