"""JSON encoding of request bodies and decoding into response targets."""

from __future__ import annotations

import dataclasses
from typing import Any

from pydantic import BaseModel, RootModel, TypeAdapter
from pydantic_core import PydanticSerializationError, from_json, to_json

from easyhttp.errors import ParseError, SerializationError


def encode_body(body: Any) -> bytes:
    try:
        return to_json(body)
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise SerializationError(f"cannot encode {type(body).__name__} as JSON: {e}") from e


def _copy_fields(target: Any, value: Any, names: Any) -> None:
    for name in names:
        setattr(target, name, getattr(value, name))


def _decode_object(content: bytes) -> dict[str, Any]:
    data = from_json(content)
    if not isinstance(data, dict):
        raise ParseError(f"expected a JSON object, got {type(data).__name__}")
    return data


def decode_into(target: Any, content: bytes) -> None:
    """Decode ``content`` and store the result in ``target`` in place.

    Pydantic models and dataclasses keep the fields the response leaves out;
    only keys present in the JSON object are overwritten. Dicts are updated,
    lists and ``RootModel`` values are replaced wholesale.
    """
    try:
        if isinstance(target, RootModel):
            target.root = type(target).model_validate_json(content).root
        elif isinstance(target, BaseModel):
            model = type(target)
            merged = {**target.model_dump(by_alias=True), **_decode_object(content)}
            _copy_fields(target, model.model_validate(merged), model.model_fields)
        elif dataclasses.is_dataclass(target) and not isinstance(target, type):
            names = [f.name for f in dataclasses.fields(target)]
            merged = {**{name: getattr(target, name) for name in names}, **_decode_object(content)}
            _copy_fields(target, TypeAdapter(type(target)).validate_python(merged), names)
        elif isinstance(target, dict):
            target.update(_decode_object(content))
        elif isinstance(target, list):
            data = from_json(content)
            if not isinstance(data, list):
                raise ParseError(f"expected a JSON array, got {type(data).__name__}")
            target[:] = data
        else:
            raise TypeError(f"unsupported JSON target: {type(target).__name__}")
    except ParseError:
        raise
    except ValueError as e:
        raise ParseError(f"invalid JSON response: {e}") from e
