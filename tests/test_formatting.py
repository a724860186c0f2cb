from __future__ import annotations

import json
import math

import pytest

from sentrycli.formatting import FORMATS, encode_toon, format_result


def test_formats() -> None:
    assert FORMATS == ("json", "toon")


def test_json_is_pretty_and_sorted() -> None:
    out = format_result({"b": 1, "a": {"d": 2, "c": 3}}, "json")
    assert out == '{\n  "a": {\n    "c": 3,\n    "d": 2\n  },\n  "b": 1\n}'


def test_json_keeps_unicode() -> None:
    assert format_result({"title": "Fehler ü"}, "json") == '{\n  "title": "Fehler ü"\n}'


def test_json_is_deterministic() -> None:
    payload = {"z": [3, 2, 1], "a": None, "m": {"y": True, "x": False}}
    assert format_result(payload, "json") == format_result(dict(reversed(payload.items())), "json")
    assert json.loads(format_result(payload, "json")) == payload


def test_unknown_format_raises() -> None:
    with pytest.raises(ValueError, match="Unsupported output format: xml"):
        format_result({}, "xml")


def test_json_unserializable_raises_type_error() -> None:
    with pytest.raises(TypeError):
        format_result({"when": object()}, "json")


def test_toon_flat_object() -> None:
    out = encode_toon({"title": "Boom", "count": 3, "isPublic": False, "assignedTo": None})
    assert out == "assignedTo: null\ncount: 3\nisPublic: false\ntitle: Boom"


def test_toon_nested_object() -> None:
    out = encode_toon({"issue": {"id": 5, "project": {"slug": "web"}}})
    assert out == "issue:\n  id: 5\n  project:\n    slug: web"


def test_toon_primitive_array() -> None:
    assert encode_toon({"tags": ["a", "b", "c"]}) == "tags[3]: a,b,c"


def test_toon_empty_array() -> None:
    assert encode_toon({"events": []}) == "events[0]:"


def test_toon_tabular_array() -> None:
    out = encode_toon(
        {
            "values": [
                {"value": "chrome", "count": 10},
                {"value": "firefox", "count": 4},
            ]
        }
    )
    assert out == "values[2]{count,value}:\n  10,chrome\n  4,firefox"


def test_toon_mixed_array_uses_list_items() -> None:
    out = encode_toon({"items": [1, {"a": 1, "b": 2}, [1, 2]]})
    assert out == "items[3]:\n  - 1\n  - a: 1\n    b: 2\n  - [2]: 1,2"


def test_toon_non_uniform_objects_are_listed() -> None:
    out = encode_toon({"rows": [{"a": 1}, {"b": 2}]})
    assert out == "rows[2]:\n  - a: 1\n  - b: 2"


def test_toon_objects_with_nested_values_are_listed() -> None:
    out = encode_toon({"rows": [{"id": 1, "tags": ["x"]}]})
    assert out == "rows[1]:\n  - id: 1\n    tags[1]: x"


def test_toon_root_array() -> None:
    assert encode_toon([1, 2, 3]) == "[3]: 1,2,3"


def test_toon_root_primitive() -> None:
    assert encode_toon("hello") == "hello"
    assert encode_toon(None) == "null"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("", '""'),
        (" padded ", '" padded "'),
        ("true", '"true"'),
        ("null", '"null"'),
        ("42", '"42"'),
        ("3.14", '"3.14"'),
        ("007", '"007"'),
        ("-dash", '"-dash"'),
        ("a,b", '"a,b"'),
        ("key: value", '"key: value"'),
        ('say "hi"', '"say \\"hi\\""'),
        ("line\nbreak", '"line\\nbreak"'),
        ("TypeError in app.js", "TypeError in app.js"),
        ("is:unresolved", '"is:unresolved"'),
    ],
)
def test_toon_string_quoting(value: str, expected: str) -> None:
    assert encode_toon({"v": value}) == f"v: {expected}"


def test_toon_numbers() -> None:
    assert encode_toon({"f": 1.5, "i": 2.0, "n": math.nan, "inf": math.inf}) == (
        "f: 1.5\ni: 2\ninf: null\nn: null"
    )


def test_toon_quotes_awkward_keys() -> None:
    assert encode_toon({"sentry:release": 1, "os.name": "linux"}) == (
        'os.name: linux\n"sentry:release": 1'
    )


def test_toon_is_deterministic() -> None:
    a = {"b": [{"y": 1, "x": 2}], "a": 1}
    b = {"a": 1, "b": [{"x": 2, "y": 1}]}
    assert encode_toon(a) == encode_toon(b)


def test_toon_rejects_unsupported_types() -> None:
    with pytest.raises(TypeError, match="not TOON serializable"):
        encode_toon({"when": object()})
