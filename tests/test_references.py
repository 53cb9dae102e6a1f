import pytest

from apiqube.manifest import Expect, RetryConfig, TestCase
from apiqube.references import (
    Reference,
    extract_references,
    extract_references_from_test,
    parse_ref,
)


@pytest.mark.parametrize(
    "value, want",
    [
        ("Bearer {{ token.value }}", [Reference("token", "value")]),
        ("{{ token }}", [Reference("token", "")]),
        ("{{ a.x }} and {{ b.y }}", [Reference("a", "x"), Reference("b", "y")]),
        ("{{ a.x }} and {{ a.x }}", [Reference("a", "x")]),
        ("{{ user.name.ToUpper() }}", [Reference("user", "name")]),
        ("{{ a.b.Replace('x', 'y').ToLower() }}", [Reference("a", "b")]),
        ("{{ fake.email }}", []),
        ("{{ env.HOST }}", []),
        ("{{ regex('^abc$') }}", []),
        ("no templates here", []),
    ],
)
def test_extract_references_strings(value, want):
    assert extract_references(value) == want


def test_extract_references_nested_structures():
    source = {
        "top": "{{ a.x }}",
        "nested": {"k": "{{ b.y }}"},
        "list": ["plain", "{{ c.z }}"],
        "int": 42,
        "nilv": None,
    }
    got = extract_references(source)
    assert len(got) == 3
    assert set(got) == {Reference("a", "x"), Reference("b", "y"), Reference("c", "z")}


def test_extract_references_from_test():
    tc = TestCase(
        method="POST",
        resource="/users/{{ parent.id }}",
        headers={"X-Trace": "{{ ctx.trace }}"},
        save={"newId": "body.id"},
        expect=Expect(status="{{ expected.status }}"),
        extra={
            "body": {
                "name": "{{ fake.name }}",
                "hint": "{{ parent.value }}",
            }
        },
    )
    got = extract_references_from_test(tc)
    assert len(got) == 4
    assert set(got) == {
        Reference("parent", "id"),
        Reference("ctx", "trace"),
        Reference("expected", "status"),
        Reference("parent", "value"),
    }


def test_extract_references_from_test_includes_retry():
    tc = TestCase(
        retry=RetryConfig(
            max_attempts=3,
            interval="{{ cfg.interval }}",
            until=Expect(body={"done": "{{ job.state }}"}),
        )
    )
    got = extract_references_from_test(tc)
    assert set(got) == {Reference("cfg", "interval"), Reference("job", "state")}


def test_extract_references_from_test_nil_safe():
    assert extract_references_from_test(None) == []


def test_parse_ref_trailing_methods():
    assert parse_ref("user.name.ToUpper().Replace('a', 'b')") == Reference("user", "name")


def test_parse_ref_empty():
    assert parse_ref("") is None


def test_parse_ref_keeps_deep_path():
    assert parse_ref("  login.response.body.token  ") == Reference(
        "login", "response.body.token"
    )


def test_parse_ref_leading_dot_is_not_reference():
    assert parse_ref(".x") is None