"""Tests for the stored query text."""

import pytest
from graphql import parse

from gql_querygen.core.query_builder import build_query_text


class TestBuildQueryText:
    """Tests for build_query_text."""

    def test_no_offsets_is_verbatim(self):
        source = "query Hero {\n  hero { name }\n}\n"
        assert build_query_text(source) == source

    def test_inserts_typename(self):
        assert build_query_text("{ hero { name } }", [7]) == "{ hero { __typename name } }"

    def test_adds_separator_before_next_token(self):
        assert build_query_text("{hero{name}}", [5]) == "{hero{ __typename name}}"

    def test_multiple_offsets(self):
        source = "{ hero { friends { name } } }"
        offsets = [source.index("hero {") + 5, source.index("friends {") + 8]
        result = build_query_text(source, offsets)
        assert result == "{ hero { __typename friends { __typename name } } }"
        parse(result)

    def test_duplicate_offsets_insert_once(self):
        assert build_query_text("{ hero { name } }", [7, 7]).count("__typename") == 1

    def test_offset_must_point_at_brace(self):
        with pytest.raises(ValueError):
            build_query_text("{ hero { name } }", [3])

    def test_offset_out_of_range(self):
        with pytest.raises(ValueError):
            build_query_text("{ }", [10])
