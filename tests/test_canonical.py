"""Tests for paysign._canonical — deterministic JSON text."""

import json

import pytest
from pydantic import BaseModel

from paysign._canonical import canonical_json
from paysign.exceptions import SerializationError


class TestCanonicalJson:
    def test_key_order_invariance(self):
        assert canonical_json({"b": 1, "a": 2}) == '{"a":2,"b":1}'
        assert canonical_json({"a": 2, "b": 1}) == '{"a":2,"b":1}'

    def test_nested_keys_sorted(self):
        data = {"z": {"y": 1, "x": [{"d": 1, "c": 2}]}, "a": None}
        assert canonical_json(data) == '{"a":null,"z":{"x":[{"c":2,"d":1}],"y":1}}'

    def test_array_order_preserved(self):
        assert canonical_json([3, 1, 2]) == "[3,1,2]"

    def test_no_whitespace(self):
        result = canonical_json({"key": "value", "list": [1, 2]})
        assert " " not in result
        assert "\n" not in result

    def test_no_slash_escaping(self):
        assert canonical_json({"url": "https://x.eu/cb"}) == '{"url":"https://x.eu/cb"}'

    def test_unicode_unescaped(self):
        assert canonical_json({"name": "Café €"}) == '{"name":"Café €"}'

    def test_null_kept(self):
        # null members are part of the body, not dropped
        assert canonical_json({"a": 1, "b": None}) == '{"a":1,"b":null}'

    def test_sort_is_code_point_order(self):
        assert canonical_json({"b": 1, "B": 2, "é": 3, "a": 4}) == '{"B":2,"a":4,"b":1,"é":3}'

    def test_scalars(self):
        assert canonical_json("x") == '"x"'
        assert canonical_json(True) == "true"
        assert canonical_json(None) == "null"
        assert canonical_json(1.5) == "1.5"

    def test_tuple_as_array(self):
        assert canonical_json({"t": (1, 2)}) == '{"t":[1,2]}'

    def test_pydantic_model(self):
        class Body(BaseModel):
            currency: str
            amount: str

        assert canonical_json(Body(currency="EUR", amount="1.00")) == '{"amount":"1.00","currency":"EUR"}'

    def test_nested_pydantic_model(self):
        class Amount(BaseModel):
            value: str
            currency: str

        body = {"type": "PLAIN", "trData": Amount(value="10.00", currency="EUR"), "items": [Amount(value="1", currency="EUR")]}
        assert canonical_json(body) == (
            '{"items":[{"currency":"EUR","value":"1"}],"trData":{"currency":"EUR","value":"10.00"},"type":"PLAIN"}'
        )

    @pytest.mark.parametrize("value", [
        {"b": [1, {"d": "x", "c": None}], "a": {"z": 1.25, "y": True}},
        [{"k": "ü/\"\\"}, [], {}],
        {"trData": {"amount": "10.00", "currency": "EUR"}, "type": "PLAIN"},
        "plain",
        0,
    ])
    def test_idempotent(self, value):
        once = canonical_json(value)
        assert canonical_json(json.loads(once)) == once

    def test_shared_reference_allowed(self):
        shared = {"v": 1}
        assert canonical_json({"a": shared, "b": shared}) == '{"a":{"v":1},"b":{"v":1}}'


class TestSerializationErrors:
    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite(self, value):
        with pytest.raises(SerializationError, match="Non-finite"):
            canonical_json({"amount": value})

    def test_circular_dict(self):
        data: dict = {"a": 1}
        data["self"] = data
        with pytest.raises(SerializationError, match="Circular"):
            canonical_json(data)

    def test_circular_list(self):
        items: list = []
        items.append(items)
        with pytest.raises(SerializationError, match="Circular"):
            canonical_json(items)

    def test_non_string_key(self):
        with pytest.raises(SerializationError, match="keys must be strings"):
            canonical_json({1: "a"})

    def test_unsupported_type_names_path(self):
        with pytest.raises(SerializationError, match=r"set at \$\.trData\.tags"):
            canonical_json({"trData": {"tags": {"a"}}})
