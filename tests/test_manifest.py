import pytest

from apiqube import manifest


@pytest.mark.parametrize("value", ["test", "scenario", "load"])
def test_known_modes_are_valid(value):
    assert manifest.TestMode(value).is_valid() is True


def test_unset_mode_is_not_valid():
    assert manifest.TestMode("").is_valid() is False
    assert manifest.TestFile().mode is manifest.TestMode.UNSET


def test_unknown_mode_rejected():
    with pytest.raises(ValueError):
        manifest.TestMode("bogus")


def test_mode_compares_to_its_string():
    assert manifest.TestMode.SCENARIO == "scenario"
    assert manifest.TestMode("load") is manifest.TestMode.LOAD


def test_test_case_defaults_are_independent():
    first = manifest.TestCase()
    second = manifest.TestCase()
    first.extra["body"] = {"a": 1}
    first.headers["X-Id"] = "1"
    first.expect.body["id"] = 1
    assert second.extra == {}
    assert second.headers == {}
    assert second.expect.body == {}
    assert second.retry is None


def test_test_case_value_equality():
    a = manifest.TestCase(name="x", method="GET", resource="/users/1")
    b = manifest.TestCase(name="x", method="GET", resource="/users/1")
    assert a == b
    assert a != manifest.TestCase(name="y", method="GET", resource="/users/1")


def test_test_files_compare_by_identity():
    a = manifest.TestFile(path="a.yaml", mode=manifest.TestMode.TEST)
    b = manifest.TestFile(path="a.yaml", mode=manifest.TestMode.TEST)
    assert a == a
    assert not (a == b)
    lookup = {a: "first", b: "second"}
    assert lookup[a] == "first"
    assert lookup[b] == "second"


def test_retry_config_holds_until_expectation():
    until = manifest.Expect(body={"body.processed": True})
    retry = manifest.RetryConfig(max_attempts=5, interval="100ms", until=until)
    case = manifest.TestCase(name="poll", retry=retry)
    assert case.retry.max_attempts == 5
    assert case.retry.until.body == {"body.processed": True}


def test_load_config_holds_stages_and_scenarios():
    stage = manifest.LoadStage(duration="30s", users=10)
    scenario = manifest.LoadScenario(weight=3, tests=["a", "b"])
    cfg = manifest.LoadConfig(stages=[stage], scenarios={"main": scenario})
    file = manifest.TestFile(mode=manifest.TestMode.LOAD, load=cfg)
    assert file.load.stages[0].users == 10
    assert file.load.scenarios["main"].tests == ["a", "b"]
    assert manifest.LoadConfig().stages == []