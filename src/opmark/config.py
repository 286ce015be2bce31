"""YAML-backed configuration for the OpMark front-end.

None of these settings touch the grammar; they only control how files are
read and how results are written and reported.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml

from opmark.exceptions import ConfigError


@dataclass
class InputConfig:
    """How source documents are read."""

    encoding: str = "utf-8"


@dataclass
class OutputConfig:
    """How the IR is serialized."""

    indent: int = 2
    exclude_none: bool = False


@dataclass
class ReportConfig:
    """Diagnostics reporting."""

    fail_on_warnings: bool = False


@dataclass
class Config:
    """Top-level opmark configuration."""

    input: InputConfig = field(default_factory=InputConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    verbose: bool = False

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        """Load configuration from a YAML file."""
        try:
            text = Path(path).read_text(encoding="utf-8")
            data = yaml.safe_load(text) or {}
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {path}")
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}")

        return cls._from_dict(data)

    @classmethod
    def from_yaml_string(cls, text: str) -> Config:
        """Load configuration from a YAML string."""
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML: {exc}")
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> Config:
        if not isinstance(data, dict):
            raise ConfigError(f"Config must be a mapping, got {type(data).__name__}")

        verbose = data.get("verbose", False)
        _check_type("verbose", verbose, bool)

        return cls(
            input=_section(data, "input", InputConfig),
            output=_section(data, "output", OutputConfig),
            report=_section(data, "report", ReportConfig),
            verbose=verbose,
        )

    @classmethod
    def default(cls) -> Config:
        """Return the default configuration."""
        return cls()

    @classmethod
    def load(cls, path: Optional[Path] = None) -> Config:
        """Load config from path, or return defaults if path is None."""
        if path is None:
            return cls.default()
        return cls.from_yaml(path)


def _section(data: dict, name: str, section_cls: type):
    """Build one config section, keeping only the keys it knows."""
    values = data.get(name)
    if values is None:
        return section_cls()
    if not isinstance(values, dict):
        raise ConfigError(
            f"Config section '{name}' must be a mapping, got {type(values).__name__}"
        )

    kwargs = {}
    for f in fields(section_cls):
        if f.name in values:
            _check_type(f"{name}.{f.name}", values[f.name], type(f.default))
            kwargs[f.name] = values[f.name]
    return section_cls(**kwargs)


def _check_type(key: str, value: object, expected: type) -> None:
    # bool is an int subclass; neither may stand in for the other
    if isinstance(value, bool) != (expected is bool) or not isinstance(value, expected):
        raise ConfigError(
            f"Config value '{key}' must be {expected.__name__}, got {type(value).__name__}"
        )
