"""Shared fixtures: a Star Wars schema and helpers to generate and load modules."""

import sys
import types

import pytest

from gql_querygen.core.document import parse_document
from gql_querygen.core.generator import CodeGenerator
from gql_querygen.core.parser import SchemaParser
from gql_querygen.core.pipeline import generate_operation
from gql_querygen.core.scalars import ScalarRegistry

STAR_WARS_SDL = """
schema {
  query: Query
  mutation: Mutation
}

scalar DateTime

"One of the films in the Star Wars Trilogy"
enum Episode {
  NEWHOPE
  EMPIRE
  JEDI
}

enum LengthUnit {
  METER
  FOOT
}

interface Character {
  id: ID!
  name: String!
  friends: [Character]
  appearsIn: [Episode]!
}

type Human implements Character {
  id: ID!
  name: String!
  friends: [Character]
  appearsIn: [Episode]!
  homePlanet: String
  starships: [Starship]
}

type Droid implements Character {
  id: ID!
  name: String!
  friends: [Character]
  appearsIn: [Episode]!
  primaryFunction: String
}

type Starship {
  id: ID!
  name: String!
  length(unit: LengthUnit = METER): Float
}

union SearchResult = Human | Droid | Starship

input ColorInput {
  red: Int!
  green: Int!
  blue: Int!
}

input ReviewInput {
  stars: Int!
  commentary: String
  favoriteColor: ColorInput
}

type Review {
  episode: Episode
  stars: Int!
  commentary: String
  createdAt: DateTime
}

type Query {
  hero(episode: Episode, id: ID): Character
  human(id: ID!): Human
  droid(id: ID!): Droid
  search(text: String): [SearchResult]
  reviews(episode: Episode!): [Review]
}

type Mutation {
  createReview(episode: Episode, review: ReviewInput!): Review
}
"""


@pytest.fixture
def schema():
    return SchemaParser().build(STAR_WARS_SDL)


@pytest.fixture
def generate(schema):
    """Generate the GeneratedModule of the first operation in a query."""

    def _generate(query: str, registry: ScalarRegistry | None = None):
        document = parse_document(query)
        return generate_operation(
            schema, document, document.operations[0], registry or ScalarRegistry()
        )

    return _generate


@pytest.fixture
def load_module():
    """Render a GeneratedModule and execute it as an importable module."""
    loaded = []

    def _load(generated, generator: CodeGenerator | None = None):
        source = (generator or CodeGenerator()).render(generated)
        name = f"generated_{generated.operation_name.lower()}_{len(loaded)}"
        module = types.ModuleType(name)
        sys.modules[name] = module
        loaded.append(name)
        exec(compile(source, f"<{name}>", "exec"), module.__dict__)
        return module

    yield _load
    for name in loaded:
        sys.modules.pop(name, None)


@pytest.fixture
def sdl():
    return STAR_WARS_SDL
