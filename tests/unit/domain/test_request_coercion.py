"""Unit tests for form value coercion."""

import pytest

from cmsbase.domain.services import coerce_form_data, coerce_value
from cmsbase.domain.services.request_coercion import decode_json_text


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("[1,2,3]", [1, 2, 3]),
        ('{"en": "Hello"}', {"en": "Hello"}),
        ("42", 42),
        ("true", True),
        ("null", None),
    ],
)
def test_json_text_is_decoded(raw, expected):
    assert coerce_form_data({"k": raw}) == {"k": expected}


@pytest.mark.parametrize("raw", ["hello world", "", "{not json", "NaN", "Infinity"])
def test_non_json_text_is_kept(raw):
    assert coerce_form_data({"k": raw}) == {"k": raw}


def test_nested_strings_are_coerced():
    raw = '{"tags": ["[1]", "plain"], "meta": {"count": "7"}}'

    assert coerce_value(raw) == {"tags": [[1], "plain"], "meta": {"count": 7}}


def test_array_elements_coerced_by_position():
    assert coerce_value(["1", "two", '{"a": "false"}']) == [1, "two", {"a": False}]


def test_decoded_string_is_not_decoded_twice():
    assert coerce_value('"42"') == "42"


def test_non_text_values_pass_through():
    assert coerce_form_data({"n": 5, "b": False}) == {"n": 5, "b": False}


def test_decode_json_text_distinguishes_failure_from_null():
    assert decode_json_text("oops") is None
    decoded = decode_json_text("null")
    assert decoded is not None
    assert decoded.value is None
