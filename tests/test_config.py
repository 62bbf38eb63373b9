import textwrap

import pytest

from regulation_extract.config import (
    DEFAULT_PATTERN,
    ConfigError,
    ParameterKind,
    SourceKind,
    load_config,
    parse_config,
)

CONFIG_TEXT = textwrap.dedent(
    """
    options:
      path: /data/extracts
      pattern: "_row_:$speed$;$power$;_quality_;"
      precision: 3
      deph: 2
      maximum_latency: fifteen
      debug_level_console: 4
    blocks:
      block1:
        prefix: "01"
        sources:
          kvint_main:
            type: kvint
            stations: [arc-1, arc-2]
            parameters:
              power: "GEN1.P"
              speed: {type: linear, name: "GEN1.SPEED"}
              unused: "GEN1.X"
          historian:
            type: odbc
            station: "sqlite:///history.db"
            parameters:
              speed:
                type: linear
                queries:
                  - "SELECT ts, v FROM speed WHERE ts >= _unix_basetime_"
              power:
                query: "SELECT ts, v FROM power"
          broken:
            type: kvint
            stations: [arc-3]
            parameters:
              speed: {type: linear}
          opc:
            type: opc_ua
            stations: [opc-1]
      noprefix:
        sources: {}
      block2:
        prefix: "02"
    """
)


@pytest.fixture
def config(tmp_path):
    path = tmp_path / "regulation_extract.yaml"
    path.write_text(CONFIG_TEXT, encoding="utf-8")
    return load_config(path)


def test_options(config):
    opts = config.options
    assert opts.path == "/data/extracts"
    assert opts.precision == 3
    assert opts.depth == 2
    # invalid value keeps the default
    assert opts.maximum_latency == 10
    assert opts.debug_level_console == 4
    assert opts.debug_level_file == 0


def test_abstract_parameters_follow_pattern(config):
    assert config.abstract_parameters == {1: "speed", 2: "power"}
    assert config.parameter_index("power") == 2
    assert config.parameter_index("unused") is None


def test_blocks_without_prefix_are_skipped(config):
    assert list(config.blocks) == ["block1", "block2"]
    assert config.blocks["block1"].prefix == "01"
    assert config.blocks["block2"].sources == []


def test_sources(config):
    sources = config.blocks["block1"].sources
    # the kvint source without a station name for speed is dropped
    assert [s.name for s in sources] == ["kvint_main", "historian", "opc"]

    kvint = sources[0]
    assert kvint.kind is SourceKind.KVINT
    assert kvint.stations == ["arc-1", "arc-2"]
    assert list(kvint.parameters) == [1, 2]
    assert kvint.parameters[1].name == "GEN1.SPEED"
    assert kvint.parameters[1].kind is ParameterKind.LINEAR
    assert kvint.parameters[2].name == "GEN1.P"
    assert kvint.parameters[2].kind is ParameterKind.NOISY

    odbc = sources[1]
    assert odbc.kind is SourceKind.ODBC
    assert odbc.stations == ["sqlite:///history.db"]
    assert odbc.parameters[1].name == "speed"
    assert odbc.parameters[1].queries == ["SELECT ts, v FROM speed WHERE ts >= _unix_basetime_"]
    assert odbc.parameters[2].queries == ["SELECT ts, v FROM power"]

    assert sources[2].kind is SourceKind.UNSUPPORTED


def test_defaults():
    config = parse_config({})
    assert config.options.pattern == DEFAULT_PATTERN
    assert config.options.precision == 2
    assert config.options.depth == 1
    assert config.options.maximum_latency == 10
    assert config.abstract_parameters == {1: "speed", 2: "power", 3: "plan"}
    assert config.blocks == {}


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("options: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_document_must_be_mapping():
    with pytest.raises(ConfigError):
        parse_config(["not", "a", "mapping"])


def test_example_configuration_loads():
    from pathlib import Path

    config = load_config(Path(__file__).parent.parent / "examples" / "regulation_extract.yaml")
    assert list(config.blocks) == ["unit1", "unit2"]
    unit1 = config.blocks["unit1"]
    assert [s.kind for s in unit1.sources] == [SourceKind.KVINT, SourceKind.ODBC]
    assert len(unit1.sources[1].parameters[3].queries) == 2
    assert config.options.depth == 3
