import pytest

from apiqube.normalize import (
    NormalizeError,
    normalize_one,
    normalize_tests,
    parse_full_form,
    parse_one_liner,
)


@pytest.mark.parametrize(
    "text, method, resource, status",
    [
        ("GET / -> 200", "GET", "/", "200"),
        ("POST /users -> 201", "POST", "/users", "201"),
        ("DELETE /users/1 -> 204", "DELETE", "/users/1", "204"),
    ],
)
def test_parse_one_liner_valid(text, method, resource, status):
    tc = parse_one_liner(text)
    assert (tc.method, tc.resource, tc.expect.status) == (method, resource, status)


@pytest.mark.parametrize("text", ["INVALID", "get / -> 200", "GET "])
def test_parse_one_liner_invalid(text):
    with pytest.raises(NormalizeError):
        parse_one_liner(text)


def test_parse_full_form_known_and_unknown_fields():
    tc = parse_full_form(
        {
            "name": "test",
            "method": "POST",
            "timeout": "5s",
            "customField": "x",
            "body": {"a": 1},
        },
        "",
        "",
    )
    assert tc.name == "test"
    assert tc.method == "POST"
    assert tc.timeout == "5s"
    assert tc.extra["customField"] == "x"
    assert tc.extra["body"] == {"a": 1}
    assert "name" not in tc.extra


def test_parse_full_form_compact_method_resource():
    tc = parse_full_form({"timeout": "1s"}, "PATCH", "/items/1")
    assert tc.method == "PATCH"
    assert tc.resource == "/items/1"
    assert tc.timeout == "1s"


def test_parse_full_form_nested_fields():
    tc = parse_full_form(
        {
            "expect": {"status": 201, "body": {"id": "exists"}},
            "retry": {"maxAttempts": 3, "interval": "1s", "until": {"status": 200}},
            "depends": ["login"],
            "save": {"id": "body.id"},
        }
    )
    assert tc.expect.status == 201
    assert tc.expect.body == {"id": "exists"}
    assert tc.retry.max_attempts == 3
    assert tc.retry.until.status == 200
    assert tc.depends == ["login"]
    assert tc.save == {"id": "body.id"}


def test_parse_full_form_wrong_field_type():
    with pytest.raises(NormalizeError):
        parse_full_form({"headers": ["a"]})


def test_normalize_one_bad_type():
    with pytest.raises(NormalizeError):
        normalize_one(123)


def test_normalize_one_compact_form_with_empty_body():
    tc = normalize_one({"PATCH /x": None})
    assert (tc.method, tc.resource) == ("PATCH", "/x")


def test_normalize_one_single_plain_key_is_full_form():
    tc = normalize_one({"name": "solo"})
    assert tc.name == "solo"
    assert tc.method == ""


def test_normalize_tests_reports_index():
    with pytest.raises(NormalizeError, match=r"test\[1\]"):
        normalize_tests(["GET / -> 200", "garbage"])


def test_normalize_tests_mixed_forms():
    cases = normalize_tests(["GET /a -> 200", {"POST /b": {"name": "b"}}, {"name": "c"}])
    assert [c.method for c in cases] == ["GET", "POST", ""]
    assert [c.name for c in cases] == ["", "b", "c"]