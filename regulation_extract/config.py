#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Loading of the export configuration.

The configuration is a YAML document with an ``options`` section of global
settings and a ``blocks`` section describing each reporting unit, its
output prefix and the ordered candidate sources that can supply the
parameters named in the row template.

Malformed nodes are reported and skipped so that one bad entry does not
prevent the rest of the catalog from loading. Only an unreadable or
structurally invalid document raises :class:`ConfigError`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

import yaml

from regulation_extract.logging_config import logger
from regulation_extract.template import parameter_indices

__all__ = [
    "ConfigError",
    "ParameterKind",
    "SourceKind",
    "ParameterConfig",
    "SourceConfig",
    "BlockConfig",
    "ExportOptions",
    "ExportConfig",
    "load_config",
    "parse_config",
]

DEFAULT_PATTERN = "_row_:$speed$;$power$;$plan$;_quality_;"


class ConfigError(ValueError):
    """Raised when the configuration document cannot be used at all"""


class ParameterKind(enum.Enum):
    LINEAR = "linear"
    NOISY = "noisy"


class SourceKind(enum.Enum):
    KVINT = "kvint"
    ODBC = "odbc"
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_label(cls, label):
        label = str(label).strip().lower()
        for kind in cls:
            if kind.value == label:
                return kind
        return cls.UNSUPPORTED


@dataclass
class ParameterConfig:
    """One abstract parameter as supplied by a particular source.

    ``name`` is the station-local locator for archive stations and the
    abstract name for SQL sources, whose values come from ``queries``.
    """

    index: int
    abstract_name: str
    name: str
    kind: ParameterKind = ParameterKind.NOISY
    queries: List[str] = field(default_factory=list)


@dataclass
class SourceConfig:
    name: str
    kind: SourceKind = SourceKind.KVINT
    stations: List[str] = field(default_factory=list)
    parameters: Dict[int, ParameterConfig] = field(default_factory=dict)


@dataclass
class BlockConfig:
    name: str
    prefix: str
    sources: List[SourceConfig] = field(default_factory=list)


@dataclass
class ExportOptions:
    path: str = ""
    pattern: str = DEFAULT_PATTERN
    precision: int = 2
    depth: int = 1
    maximum_latency: int = 10
    debug_level_console: int = 0
    debug_level_file: int = 0
    log_file: str = "regulation_extract.log"


_INT_OPTIONS = ("precision", "depth", "maximum_latency", "debug_level_console", "debug_level_file")
_STR_OPTIONS = ("path", "pattern", "log_file")
# spelling used by older configuration files
_OPTION_ALIASES = {"deph": "depth"}


@dataclass
class ExportConfig:
    options: ExportOptions = field(default_factory=ExportOptions)
    blocks: Dict[str, BlockConfig] = field(default_factory=dict)
    abstract_parameters: Dict[int, str] = field(default_factory=dict)

    def parameter_index(self, abstract_name):
        for index, name in self.abstract_parameters.items():
            if name == abstract_name:
                return index
        return None


def load_config(config_file):
    """Read and parse a YAML configuration file

    Parameters
    ----------
    config_file : str or Path
        Location of the YAML document

    Returns
    -------
    config : ExportConfig
    """
    path = Path(config_file)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")
    with path.open("r", encoding="utf-8") as stream:
        try:
            doc = yaml.safe_load(stream)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Could not parse {path}: {exc}") from exc
    return parse_config(doc)


def parse_config(doc):
    """Build an :class:`ExportConfig` from an already parsed YAML document"""
    if doc is None:
        doc = {}
    if not isinstance(doc, dict):
        raise ConfigError("Configuration document must be a mapping")

    config = ExportConfig()
    config.options = _parse_options(doc.get("options") or {})
    config.abstract_parameters = {
        index: name for name, index in parameter_indices(config.options.pattern).items()
    }

    blocks = doc.get("blocks") or {}
    if not isinstance(blocks, dict):
        raise ConfigError("blocks must be a mapping of block name to block settings")
    for block_name, block_node in blocks.items():
        block = _parse_block(config, str(block_name), block_node)
        if block is not None:
            config.blocks[block.name] = block
    return config


def _parse_options(node):
    options = ExportOptions()
    if not isinstance(node, dict):
        logger.warning("options section is not a mapping, defaults are used")
        return options
    for key, value in node.items():
        key = _OPTION_ALIASES.get(key, key)
        try:
            if key in _INT_OPTIONS:
                setattr(options, key, int(value))
            elif key in _STR_OPTIONS:
                setattr(options, key, str(value))
            else:
                logger.warning(f"Unknown option {key} ignored")
        except (TypeError, ValueError) as exc:
            logger.warning(f"Option {key} has invalid value {value!r}, default kept: {exc}")
    return options


def _parse_block(config, block_name, node):
    if not isinstance(node, dict) or node.get("prefix") is None:
        logger.warning(f"Block {block_name} has no prefix and is skipped")
        return None
    block = BlockConfig(name=block_name, prefix=str(node["prefix"]))
    sources = node.get("sources") or {}
    if not isinstance(sources, dict):
        logger.warning(f"Block {block_name}: sources must be a mapping, none loaded")
        return block
    for source_name, source_node in sources.items():
        try:
            block.sources.append(_parse_source(config, str(source_name), source_node))
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning(f"Block {block_name}: source {source_name} skipped: {exc}")
    return block


def _parse_source(config, source_name, node):
    if not isinstance(node, dict):
        raise ValueError("source settings must be a mapping")
    source = SourceConfig(name=source_name)
    if "type" in node:
        source.kind = SourceKind.from_label(node["type"])

    stations = node.get("stations", node.get("station", []))
    if isinstance(stations, str):
        stations = [stations]
    source.stations = [str(s) for s in stations]

    parameters = node.get("parameters") or {}
    if not isinstance(parameters, dict):
        raise ValueError("parameters must be a mapping of abstract name to locator")
    for abstract_name, pnode in parameters.items():
        index = config.parameter_index(abstract_name)
        if index is None:
            # parameters absent from the row template are never requested
            logger.debug(f"Source {source_name}: parameter {abstract_name} not in pattern")
            continue
        source.parameters[index] = _parse_parameter(source, index, abstract_name, pnode)
    source.parameters = dict(sorted(source.parameters.items()))
    return source


def _parse_parameter(source, index, abstract_name, node):
    param = ParameterConfig(index=index, abstract_name=abstract_name, name=abstract_name)
    if isinstance(node, dict):
        if str(node.get("type", "")).lower() == ParameterKind.LINEAR.value:
            param.kind = ParameterKind.LINEAR
        queries = node.get("queries", node.get("query", []))
        if isinstance(queries, str):
            queries = [queries]
        param.queries = [str(q) for q in queries]
        local_name = node.get("name")
    else:
        local_name = node

    if source.kind != SourceKind.ODBC:
        if local_name is None:
            raise ValueError(f"parameter {abstract_name} has no station name")
        param.name = str(local_name)
    return param
