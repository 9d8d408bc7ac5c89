"""Command-line configuration, optionally read from the analyzed project."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path

logger = logging.getLogger(__name__)

_OUTPUT_FORMATS = ("text", "json")


@dataclass(frozen=True)
class AnalyserConfig:
    workers: int | None = None
    stream_delay: float = 0.0
    output_format: str = "text"

    def merged(self, **overrides) -> AnalyserConfig:
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _from_table(table: dict) -> AnalyserConfig:
    known = {f.name for f in fields(AnalyserConfig)}
    values = {}
    for key, value in table.items():
        key = key.replace("-", "_")
        if key not in known:
            logger.warning("Ignoring unknown depscope setting %r", key)
            continue
        values[key] = value
    config = AnalyserConfig(**values)
    if config.output_format not in _OUTPUT_FORMATS:
        logger.warning("Unknown output format %r, using text", config.output_format)
        config = replace(config, output_format="text")
    return config


def load_config(project_dir: Path) -> AnalyserConfig:
    """Read settings from .depscope.toml or [tool.depscope] in pyproject.toml."""
    depscope_toml = project_dir / ".depscope.toml"
    if depscope_toml.exists():
        try:
            with open(depscope_toml, "rb") as f:
                data = tomllib.load(f)
            return _from_table(data.get("depscope", {}))
        except (OSError, tomllib.TOMLDecodeError, TypeError) as e:
            logger.warning("Could not read %s: %s", depscope_toml, e)

    pyproject = project_dir / "pyproject.toml"
    if pyproject.exists():
        try:
            with open(pyproject, "rb") as f:
                data = tomllib.load(f)
            return _from_table(data.get("tool", {}).get("depscope", {}))
        except (OSError, tomllib.TOMLDecodeError, TypeError) as e:
            logger.warning("Could not read %s: %s", pyproject, e)

    return AnalyserConfig()
