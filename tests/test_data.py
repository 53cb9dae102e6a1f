import dataclasses
from datetime import timedelta

from apiqube.data import AssertionResult, RequestData, ResponseData


def test_request_defaults_are_empty():
    request = RequestData()
    assert request.method == ""
    assert request.url == ""
    assert request.headers == {}
    assert request.body is None
    assert request.metadata == {}


def test_mutable_defaults_are_not_shared():
    first = RequestData()
    second = RequestData()
    first.headers["X-Trace"] = "abc"
    first.metadata["k"] = 1
    assert second.headers == {}
    assert second.metadata == {}


def test_response_status_accepts_any_type():
    assert ResponseData(status=200).status == 200
    assert ResponseData(status="OK").status == "OK"


def test_response_duration_default_is_zero():
    assert ResponseData().duration == timedelta(0)


def test_request_round_trip_through_asdict():
    request = RequestData(method="GET", url="/users", headers={"A": "b"}, body={"x": [1]})
    assert RequestData(**dataclasses.asdict(request)) == request


def test_response_round_trip_through_asdict():
    response = ResponseData(status=201, body="done", duration=timedelta(milliseconds=5))
    assert ResponseData(**dataclasses.asdict(response)) == response


def test_assertion_result_replace_keeps_other_fields():
    result = AssertionResult(expression="status = 200", passed=False, expected=200, actual=500)
    fixed = dataclasses.replace(result, passed=True)
    assert fixed.passed is True
    assert fixed.expression == result.expression
    assert fixed.actual == 500
    assert result.passed is False