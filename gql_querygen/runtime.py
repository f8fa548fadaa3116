"""Runtime support imported by generated query modules.

Generated modules subclass these bases, so the behaviour shared by every
operation (alias handling, tolerant enums, union dispatch on '__typename',
building request payloads) lives here rather than in generated code.
"""

from collections.abc import Callable
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict

FALLBACK_TAG = "__fallback__"


class ResponseModel(BaseModel):
    """Base for response types.

    Keys that were not selected are ignored, so a decoded response holds
    exactly the requested fields.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class InputModel(BaseModel):
    """Base for Variables and input object types."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class OpenEnum(str, Enum):
    """String enum that also accepts values added to the schema later.

    Unknown values become pseudo-members whose name and value are the
    received string.
    """

    @classmethod
    def _missing_(cls, value: object) -> Any:
        if not isinstance(value, str):
            return None
        member = str.__new__(cls, value)
        member._name_ = value
        member._value_ = value
        return member


def typename_discriminator(*known: str) -> Callable[[Any], str]:
    """Build a pydantic discriminator that routes unknown '__typename' values to the fallback."""
    known_types = frozenset(known)

    def discriminate(value: Any) -> str:
        if isinstance(value, dict):
            typename = value.get("__typename", value.get("typename__"))
        else:
            typename = getattr(value, "typename__", None)
        return typename if typename in known_types else FALLBACK_TAG

    return discriminate


class GraphQLQuery:
    """Binding between an operation and its generated Variables/ResponseData types.

    Example:
        payload = HeroQuery.build_query(HeroQuery.variables_type(id="1000"))
        response = session.post(url, json=payload).json()
        data = HeroQuery.response_type.model_validate(response["data"])
    """

    OPERATION_NAME: ClassVar[str]
    QUERY: ClassVar[str]
    variables_type: ClassVar[type[InputModel]]
    response_type: ClassVar[type[ResponseModel]]

    @classmethod
    def build_query(cls, variables: InputModel | dict[str, Any] | None = None) -> dict[str, Any]:
        """Build the JSON request body for this operation.

        Variables that were never set are left out so the server applies
        its own defaults.
        """
        if variables is None:
            variables = cls.variables_type()
        elif isinstance(variables, dict):
            variables = cls.variables_type.model_validate(variables)
        return {
            "query": cls.QUERY,
            "variables": variables.model_dump(mode="json", by_alias=True, exclude_unset=True),
            "operationName": cls.OPERATION_NAME,
        }
