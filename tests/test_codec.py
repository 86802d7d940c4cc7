"""Tests for easyhttp._codec."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel, RootModel

from easyhttp import ParseError, SerializationError
from easyhttp._codec import decode_into, encode_body


class Account(BaseModel):
    id: int = 0
    tags: list[str] = []


class Profile(BaseModel):
    name: str = ""
    age: int = 0


class Strict(BaseModel):
    name: str
    age: int


@dataclass
class Point:
    x: int = 0
    y: int = 0
    labels: list[str] = field(default_factory=list)


class TestEncodeBody:
    def test_dict(self):
        assert json.loads(encode_body({"a": [1, 2], "b": None})) == {"a": [1, 2], "b": None}

    def test_model_and_dataclass(self):
        assert json.loads(encode_body(Account(id=3))) == {"id": 3, "tags": []}
        assert json.loads(encode_body(Point(1, 2))) == {"x": 1, "y": 2, "labels": []}

    def test_unknown_type(self):
        with pytest.raises(SerializationError, match="cannot encode object"):
            encode_body(object())


class TestDecodeInto:
    def test_model(self):
        acct = Account()
        decode_into(acct, b'{"id": 9, "tags": ["x"]}')
        assert acct == Account(id=9, tags=["x"])

    def test_model_type_mismatch(self):
        with pytest.raises(ParseError):
            decode_into(Account(), b'{"id": "not-a-number"}')

    def test_model_keeps_fields_missing_from_response(self):
        profile = Profile(name="old", age=41)
        decode_into(profile, b'{"name": "alex"}')
        assert profile.name == "alex"
        assert profile.age == 41

    def test_model_with_required_fields_accepts_partial_object(self):
        strict = Strict(name="old", age=41)
        decode_into(strict, b'{"name": "alex"}')
        assert strict == Strict(name="alex", age=41)

    def test_model_rejects_array(self):
        with pytest.raises(ParseError, match="expected a JSON object"):
            decode_into(Account(), b"[1]")

    def test_root_model(self):
        doc = RootModel[list[int]]([])
        decode_into(doc, b"[1, 2, 3]")
        assert doc.root == [1, 2, 3]

    def test_dataclass(self):
        p = Point()
        decode_into(p, b'{"x": 4, "labels": ["a"]}')
        assert p == Point(x=4, y=0, labels=["a"])

    def test_dataclass_keeps_fields_missing_from_response(self):
        p = Point(x=1, y=7)
        decode_into(p, b'{"x": 4}')
        assert p == Point(x=4, y=7)

    def test_list_replaced(self):
        items = [0]
        decode_into(items, b'["a", "b"]')
        assert items == ["a", "b"]

    def test_dict_rejects_array(self):
        with pytest.raises(ParseError, match="expected a JSON object"):
            decode_into({}, b"[1]")

    def test_list_rejects_object(self):
        with pytest.raises(ParseError, match="expected a JSON array"):
            decode_into([], b"{}")

    def test_invalid_json(self):
        with pytest.raises(ParseError, match="invalid JSON response"):
            decode_into({}, b"<html></html>")

    def test_unsupported_target(self):
        with pytest.raises(TypeError):
            decode_into(42, b"1")
