import pytest

from apiqube.extract import ExtractError, extract

SOURCE = {
    "user": {
        "name": "alice",
        "age": 30,
        "tags": ["admin", "user"],
    },
    "items": [
        {"id": 1, "name": "a"},
        {"id": 2, "name": "b"},
    ],
    "empty": "",
    "unicode": "Привет",
}


def test_empty_path_returns_source():
    assert extract(SOURCE, "") is SOURCE


@pytest.mark.parametrize(
    "path, want",
    [
        ("user", SOURCE["user"]),
        ("user.name", "alice"),
        ("user.age", 30),
        ("items.0.id", 1),
        ("items.1.name", "b"),
        ("user.tags.0", "admin"),
        ("user.tags.length", 2),
        ("user.length", 3),
        ("unicode.length", 6),
        ("empty.length", 0),
    ],
)
def test_extract_found(path, want):
    assert extract(SOURCE, path) == want


@pytest.mark.parametrize(
    "path",
    [
        "user.email",
        "items.99",
        "user.0",
        "items.foo",
        "user.age.length",
        "user.",
        ".user",
    ],
)
def test_extract_missing(path):
    with pytest.raises(ExtractError):
        extract(SOURCE, path)


def test_typed_map():
    assert extract({"a": 1, "b": 2}, "b") == 2


def test_any_key_map():
    assert extract({"k": "v", 1: "x"}, "k") == "v"


def test_nil_source():
    with pytest.raises(ExtractError):
        extract(None, "x")


def test_tuple_index():
    assert extract({"t": ("x", "y")}, "t.1") == "y"


def test_negative_index_rejected():
    with pytest.raises(ExtractError):
        extract([1, 2], "-1")


def test_error_is_lookup_error():
    with pytest.raises(LookupError):
        extract({}, "a")