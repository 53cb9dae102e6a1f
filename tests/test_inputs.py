import io

import pytest

from apiqube.inputs import (
    BytesInput,
    CheckConfig,
    Input,
    NoInputError,
    PathsInput,
    ReaderInput,
    from_bytes,
    from_paths,
    from_reader,
    load_input,
    with_check_config_path,
    with_check_plugins,
)
from apiqube.parser import ParseError

ONE_TEST = b'tests:\n  - "GET / -> 200"\n'


def test_from_paths_keeps_paths_in_order():
    source = from_paths("a", "b")
    assert isinstance(source, PathsInput)
    assert source.paths == ("a", "b")


def test_from_bytes_and_reader_are_inputs():
    assert isinstance(from_bytes(b"x"), BytesInput)
    assert from_bytes(b"x").data == b"x"
    reader = io.StringIO("")
    source = from_reader(reader)
    assert isinstance(source, ReaderInput) and isinstance(source, Input)
    assert source.reader is reader


def test_load_input_bytes():
    files = load_input(from_bytes(ONE_TEST))
    assert len(files) == 1
    assert files[0].tests[0].method == "GET"


def test_load_input_reader_text_and_binary():
    assert load_input(from_reader(io.StringIO("tests: []")))[0].tests == []
    files = load_input(from_reader(io.BytesIO(ONE_TEST)))
    assert files[0].tests[0].resource == "/"


def test_load_input_paths(tmp_path):
    manifest = tmp_path / "suite.yaml"
    manifest.write_bytes(ONE_TEST)
    files = load_input(from_paths(manifest))
    assert [f.path for f in files] == [str(manifest)]


def test_load_input_no_tests():
    assert load_input(from_bytes(b"# Empty file with no tests")) == []


def test_load_input_none_raises():
    with pytest.raises(NoInputError, match="no input source provided"):
        load_input(None)


def test_load_input_parse_error_propagates():
    with pytest.raises(ParseError):
        load_input(from_bytes(b"not valid yaml :{"))


def test_load_input_unknown_form():
    with pytest.raises(TypeError):
        load_input("suite.yaml")


def test_check_options_apply_to_config():
    config = CheckConfig(input=from_bytes(ONE_TEST))
    for option in (with_check_config_path(".qube.yaml"), with_check_plugins("plugins")):
        option(config)
    assert config.config_path == ".qube.yaml"
    assert config.plugin_dir == "plugins"
    assert config.input == from_bytes(ONE_TEST)


def test_check_config_defaults_are_empty():
    config = CheckConfig()
    assert config.input is None
    assert config.config_path == ""
    assert config.plugin_dir == ""