"""Ready-made body validators.

A validator takes the raw response body and returns the decoded value,
raising when the body is not acceptable.  It must be free of side
effects: the refresh path calls it more than once on the same bytes.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from pydantic import TypeAdapter, ValidationError

from src.shared.errors import BodyDecodeError

ValidateBodyFunc = Callable[[bytes], Any]


def json_body(body: bytes) -> Any:
    """Decode *body* as JSON of any shape."""
    try:
        return json.loads(body)
    except ValueError as exc:
        raise BodyDecodeError(f"Body is not valid JSON: {exc}") from exc


def json_object(body: bytes) -> dict[str, Any]:
    """Decode *body* as a JSON object."""
    value = json_body(body)
    if not isinstance(value, dict):
        raise BodyDecodeError(
            f"Expected a JSON object, got {type(value).__name__}"
        )
    return value


def json_array(body: bytes) -> list[Any]:
    """Decode *body* as a JSON array."""
    value = json_body(body)
    if not isinstance(value, list):
        raise BodyDecodeError(
            f"Expected a JSON array, got {type(value).__name__}"
        )
    return value


def typed_body(tp: Any) -> ValidateBodyFunc:
    """Build a validator that parses the body into *tp* with pydantic.

    *tp* may be a model class or any type pydantic understands, such as
    ``list[Repo]``.  The decoded value is dumped back to plain JSON
    types so the fixture file can hold it.
    """
    adapter: TypeAdapter[Any] = TypeAdapter(tp)
    name = getattr(tp, "__name__", repr(tp))

    def validate(body: bytes) -> Any:
        try:
            value = adapter.validate_json(body)
        except ValidationError as exc:
            raise BodyDecodeError(f"Body does not match {name}: {exc}") from exc
        return adapter.dump_python(value, mode="json")

    return validate
