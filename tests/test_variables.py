"""Tests for operation variable binding."""

import pytest

from gql_querygen.core.document import parse_document
from gql_querygen.core.errors import Severity, UndeclaredVariable, VariableError, VariableTypeMismatch
from gql_querygen.core.fragments import FragmentLibrary
from gql_querygen.core.ir import NamedTypeRef, NonNullTypeRef
from gql_querygen.core.variables import VariableBinder


@pytest.fixture
def bind(schema):
    def _bind(query):
        document = parse_document(query)
        binder = VariableBinder(schema, FragmentLibrary.index(schema, document))
        return binder.bind(document.operations[0])

    return _bind


class TestVariableBinder:
    """Tests for VariableBinder."""

    def test_required_variable(self, bind):
        shape = bind("query HeroById($id: ID!) { hero(id: $id) { name } }")
        assert len(shape.fields) == 1
        variable = shape.fields[0]
        assert variable.name == "id"
        assert variable.type == NonNullTypeRef(NamedTypeRef("ID"))
        assert not variable.has_default
        assert shape.diagnostics == []

    def test_declaration_order(self, bind):
        shape = bind("""
            mutation Review($review: ReviewInput!, $episode: Episode) {
              createReview(episode: $episode, review: $review) { stars }
            }
        """)
        assert [v.name for v in shape.fields] == ["review", "episode"]

    def test_default_value(self, bind):
        shape = bind("query Q($episode: Episode = JEDI) { hero(episode: $episode) { name } }")
        assert shape.fields[0].has_default
        assert shape.fields[0].default == "JEDI"

    def test_object_default_value(self, bind):
        shape = bind("""
            mutation M($review: ReviewInput = {stars: 5, commentary: "ok"}) {
              createReview(review: $review) { stars }
            }
        """)
        assert shape.fields[0].default == {"stars": 5, "commentary": "ok"}

    def test_undeclared_variable(self, bind):
        with pytest.raises(UndeclaredVariable) as exc_info:
            bind("query Q { hero(id: $id) { name } }")
        assert exc_info.value.context["variable"] == "id"

    def test_undeclared_variable_in_fragment(self, bind):
        with pytest.raises(UndeclaredVariable):
            bind("""
                query Q { ...Root }
                fragment Root on Query { hero(episode: $episode) { name } }
            """)

    def test_variable_used_in_fragment(self, bind):
        shape = bind("""
            query Q($episode: Episode) { ...Root }
            fragment Root on Query { hero(episode: $episode) { name } }
        """)
        assert shape.diagnostics == []

    def test_variable_used_in_directive(self, bind):
        shape = bind("query Q($withHero: Boolean!) { hero @include(if: $withHero) { name } }")
        assert shape.diagnostics == []

    def test_variable_used_in_nested_input(self, bind):
        shape = bind("""
            mutation M($stars: Int!) {
              createReview(review: {stars: $stars}) { stars }
            }
        """)
        assert shape.diagnostics == []

    def test_unused_variable_warns(self, bind):
        shape = bind("query Q($id: ID) { hero { name } }")
        assert len(shape.fields) == 1
        assert len(shape.diagnostics) == 1
        diagnostic = shape.diagnostics[0]
        assert diagnostic.severity is Severity.WARNING
        assert not diagnostic.is_error
        assert "$id" in diagnostic.message

    def test_output_type_variable(self, bind):
        with pytest.raises(VariableTypeMismatch) as exc_info:
            bind("query Q($who: Character) { hero { name } }")
        assert "not an input type" in exc_info.value.message

    def test_undefined_variable_type(self, bind):
        with pytest.raises(VariableTypeMismatch) as exc_info:
            bind("query Q($x: Unknown) { hero { name } }")
        assert "undefined" in exc_info.value.message

    def test_duplicate_declaration(self, bind):
        with pytest.raises(VariableError):
            bind("query Q($id: ID, $id: ID) { hero(id: $id) { name } }")
