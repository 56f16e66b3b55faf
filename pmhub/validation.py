"""Request validation against pydantic request contracts.

``validate_payload`` returns a ``Validated`` or ``Invalid`` result instead
of raising, so callers outside FastAPI can branch on it. The dependency
factories ``validate_body`` and ``validate_query`` turn an ``Invalid``
result into ``RequestValidationFailed``, which the application renders as
a 400 response::

    {"message": "Validation failed",
     "errors": [{"field": "newRole", "message": "Input should be ..."}]}

Any other exception raised while reading the request propagates to the
generic error handler.
"""

import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from fastapi import Request, status
from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

BODY_MESSAGE = "Validation failed"
QUERY_MESSAGE = "Invalid query parameters"

# Leading ``loc`` entries FastAPI adds to say where a value came from
_SOURCES = {"body", "query", "path", "header", "cookie"}


@dataclass(frozen=True)
class FieldError:
    """One violation: dot-joined path into the payload and a message."""

    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


@dataclass(frozen=True)
class Validated(Generic[ModelT]):
    value: ModelT
    ok: bool = True


@dataclass(frozen=True)
class Invalid:
    errors: list[FieldError] = field(default_factory=list)
    ok: bool = False


class RequestValidationFailed(Exception):
    """Raised by the validation dependencies; rendered as HTTP 400."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, errors: Sequence[FieldError], message: str = BODY_MESSAGE):
        self.errors = list(errors)
        self.message = message
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        return {"message": self.message, "errors": [e.as_dict() for e in self.errors]}


def field_errors(raw_errors: Iterable[dict[str, Any]]) -> list[FieldError]:
    """Convert pydantic / FastAPI error dicts into ``FieldError`` entries."""
    result = []
    for err in raw_errors:
        loc = list(err.get("loc", ()))
        if loc and loc[0] in _SOURCES:
            loc = loc[1:]
        path = ".".join(str(part) for part in loc)
        result.append(FieldError(path, err.get("msg", "Invalid value")))
    return result


def validate_payload(schema: type[ModelT], data: Any) -> Validated[ModelT] | Invalid:
    """Validate *data* against *schema* without raising."""
    try:
        return Validated(schema.model_validate(data))
    except ValidationError as exc:
        return Invalid(field_errors(exc.errors()))


def validate_body(schema: type[ModelT]):
    """Dependency factory that parses the JSON body into *schema*.

    Usage:
        body: RoleChangeRequest = Depends(validate_body(RoleChangeRequest))
    """

    async def _validate(request: Request) -> ModelT:
        raw = await request.body()
        try:
            data = json.loads(raw.decode("utf-8")) if raw else {}
        except UnicodeDecodeError as exc:
            raise RequestValidationFailed(
                [FieldError("", "Malformed JSON body: not valid UTF-8")]
            ) from exc
        except json.JSONDecodeError as exc:
            raise RequestValidationFailed(
                [FieldError("", f"Malformed JSON body: {exc.msg}")]
            ) from exc

        result = validate_payload(schema, data)
        if isinstance(result, Invalid):
            raise RequestValidationFailed(result.errors, BODY_MESSAGE)
        return result.value

    return _validate


def validate_query(schema: type[ModelT]):
    """Dependency factory that parses query parameters into *schema*.

    The returned model carries normalised values (enums, booleans, ints).
    """

    async def _validate(request: Request) -> ModelT:
        data = dict(request.query_params)
        result = validate_payload(schema, data)
        if isinstance(result, Invalid):
            raise RequestValidationFailed(result.errors, QUERY_MESSAGE)
        return result.value

    return _validate
