"""
Parser settings.

Settings come from an optional YAML file, then NEM12_* environment
variables. Database connection settings are read separately by
DatabaseConnectionPool from DB_* variables.

Example ``config/parser.yaml``:
```yaml
parser:
  batch_size: 50
  strict_structure: true
  source_timezone: Australia/Sydney
  output_format: sql
logging:
  level: INFO
  format: json
```
"""

import os
from pathlib import Path
from typing import Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from nem12_pipeline.utils.timezone import DEFAULT_SOURCE_TIMEZONE

ENV_PREFIX = "NEM12_"

OutputFormat = Literal["postgres", "sql", "copy", "memory"]


class ConfigError(ValueError):
    """Raised when a settings file or override is invalid."""


class ParserSettings(BaseModel):
    """
    Runtime settings for a parse run.

    Attributes:
        batch_size: Rows per database or SQL batch
        strict_structure: Abort the file on a rejected 300 record
        source_timezone: IANA zone of NEM12 timestamps
        output_format: Where accepted readings go
        log_level: Logging level name
        log_format: "json" or "text"
    """

    batch_size: int = Field(50, gt=0)
    strict_structure: bool = True
    source_timezone: str = DEFAULT_SOURCE_TIMEZONE
    output_format: OutputFormat = "sql"
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @field_validator("source_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()


# YAML section/key -> settings field
_YAML_KEYS = {
    ("parser", "batch_size"): "batch_size",
    ("parser", "strict_structure"): "strict_structure",
    ("parser", "source_timezone"): "source_timezone",
    ("parser", "output_format"): "output_format",
    ("logging", "level"): "log_level",
    ("logging", "format"): "log_format",
}


def _read_yaml(config_path: Path) -> dict[str, Any]:
    with open(config_path) as f:
        try:
            config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"Settings file {config_path} must contain a mapping")

    values = {}
    for (section, key), field_name in _YAML_KEYS.items():
        section_values = config.get(section) or {}
        if not isinstance(section_values, dict):
            raise ConfigError(f"Section '{section}' in {config_path} must be a mapping")
        if key in section_values:
            values[field_name] = section_values[key]
    return values


def _read_env(environ: dict[str, str]) -> dict[str, Any]:
    values = {}
    for field_name in ParserSettings.model_fields:
        env_value = environ.get(ENV_PREFIX + field_name.upper())
        if env_value is not None:
            values[field_name] = env_value
    return values


def load_settings(
    config_path: str | Path | None = None,
    environ: dict[str, str] | None = None,
    **overrides: Any,
) -> ParserSettings:
    """
    Build settings from a YAML file, the environment and explicit overrides.

    Later sources win: file, then NEM12_* variables, then ``overrides``
    (None values in ``overrides`` are ignored).

    Args:
        config_path: Optional YAML settings file
        environ: Environment mapping (defaults to os.environ)
        **overrides: Field values from the command line

    Returns:
        Validated ParserSettings

    Raises:
        FileNotFoundError: If config_path does not exist
        ConfigError: If any value is invalid
    """
    values: dict[str, Any] = {}

    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {config_path}")
        values.update(_read_yaml(path))

    values.update(_read_env(os.environ if environ is None else environ))
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ParserSettings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
