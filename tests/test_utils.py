import pytest

from search_proxy.utils import collapse_query, header_safe, normalize_key, usable_keywords


def test_normalize_key():
    assert normalize_key("  Hello ") == "hello"
    assert normalize_key("HELLO") == normalize_key("hello")
    assert normalize_key("Straße") == "strasse"
    assert normalize_key("") == ""


def test_collapse_query():
    items = [("keywords", "perro"), ("tag", "a"), ("tag", "b"), ("tag", "c")]
    assert collapse_query(items) == {"keywords": "perro", "tag": ["a", "b", "c"]}
    assert collapse_query([]) == {}


@pytest.mark.parametrize(
    "value, expected",
    [
        ("perro", "perro"),
        ("  perro caliente ", "perro caliente"),
        ("", None),
        ("   ", None),
        (None, None),
        (["perro", "gato"], None),
    ],
)
def test_usable_keywords(value, expected):
    assert usable_keywords(value) == expected


def test_header_safe():
    assert header_safe("hot dog") == "hot dog"
    assert header_safe("cão") == "c%C3%A3o"
    assert header_safe("50%") == "50%25"
    assert header_safe("犬").isascii()
