"""Unit tests for listing query parsing.

Tests cover:
- filter / sort / include / fields parsing
- Allow-list enforcement (empty allow-list permits nothing)
- Page number and size extraction
"""

from starlette.datastructures import QueryParams

from autocrud.core.config import Settings
from autocrud.core.errors import InvalidQueryError
from autocrud.core.result import Failure, Success
from autocrud.presentation.controllers.query import page_params, parse_query_spec

COLUMNS = {"id", "title", "body", "status"}
RELATIONS = {"comments"}


def parse(query: str, **overrides):
    allow_lists = {
        "api_allowed_sorts": ["title", "id"],
        "api_allowed_filters": ["status"],
        "api_allowed_includes": ["comments"],
        "api_allowed_fields": ["title"],
    }
    settings = Settings(**(allow_lists | overrides))
    return parse_query_spec(
        QueryParams(query),
        resource_type="posts",
        settings=settings.api,
        columns=COLUMNS,
        relations=RELATIONS,
    )


class TestParseQuerySpec:
    """Allow-listed query parameters."""

    def test_empty_query(self):
        result = parse("")
        assert isinstance(result, Success)
        assert result.value.filters == {}
        assert result.value.sorts == []

    def test_filters_split_on_commas(self):
        result = parse("filter[status]=draft,published")
        assert result.value.filters == {"status": ["draft", "published"]}

    def test_sort_directions(self):
        result = parse("sort=-title,id")
        assert result.value.sorts == [("title", "desc"), ("id", "asc")]

    def test_includes_and_fields(self):
        result = parse("include=comments&fields[posts]=title")
        assert result.value.includes == ("comments",)
        assert result.value.fields == ("title",)

    def test_fields_for_other_types_are_ignored(self):
        result = parse("fields[comments]=body")
        assert result.value.fields == ()

    def test_disallowed_sort(self):
        result = parse("sort=body")
        assert isinstance(result, Failure)
        assert isinstance(result.error, InvalidQueryError)
        assert result.error.parameter == "sort"
        assert result.error.message == (
            "Requested sort(s) `body` are not allowed. Allowed sort(s) are `title, id`."
        )
        assert result.error.details == {"error": {"sort": ["body"]}}

    def test_disallowed_filter(self):
        result = parse("filter[title]=x")
        assert result.error.parameter == "filter"

    def test_disallowed_include(self):
        result = parse("include=author")
        assert result.error.parameter == "include"

    def test_disallowed_field(self):
        result = parse("fields[posts]=body")
        assert result.error.parameter == "field"

    def test_empty_allow_list_permits_nothing(self):
        result = parse("sort=title", api_allowed_sorts=[])
        assert isinstance(result, Failure)
        assert "Allowed sort(s) are `none`" in result.error.message


class TestPageParams:
    """Pagination parameters."""

    def test_defaults(self):
        assert page_params(QueryParams(""), 10) == (1, 10)

    def test_page_and_per_page(self):
        assert page_params(QueryParams("page=3&per_page=5"), 10) == (3, 5)

    def test_json_api_style(self):
        assert page_params(QueryParams("page[number]=2&page[size]=25"), 10) == (2, 25)

    def test_invalid_values_fall_back(self):
        assert page_params(QueryParams("page=0&per_page=abc"), 10) == (1, 10)

    def test_size_override_can_be_disabled(self):
        params = QueryParams("per_page=50")
        assert page_params(params, 10, allow_size_override=False) == (1, 10)
