"""
Configuration model for stardex.

Configuration comes from a YAML file, from environment variables, or both
(environment values override the file):

    STARDEX_CONFIG        path to a YAML config file
    STARDEX_DICT_DIRS     dictionary directories, separated by os.pathsep
    STARDEX_NOTES_DIRS    note collection directories, separated by os.pathsep
    STARDEX_FUZZY_POLICY  "raw" or "stripped"
    STARDEX_LOG_LEVEL     logging level name
"""

import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigError
from .stardict.fuzzy import DEFAULT_MAX_DISTANCE, FuzzyMatcher, FuzzyPolicy

ENV_PREFIX = "STARDEX_"


class StardexConfig(BaseModel):
    """Settings for loading dictionaries and answering queries.

    Dictionary locations are always given explicitly; nothing is discovered
    from OS-specific configuration folders.
    """

    # Dictionary locations
    dictionary_dirs: list[Path] = Field(
        default_factory=list,
        description="StarDict directories, or parents whose subdirectories are StarDict directories"
    )
    notes_dirs: list[Path] = Field(
        default_factory=list,
        description="Markdown note collections (folders holding a pages/ directory)"
    )

    # Query behaviour
    prioritize_online: bool = Field(
        default=False,
        description="Ask the online dictionary before local ones"
    )
    exact_only: bool = Field(
        default=False,
        description="Disable fuzzy lookup when no exact match exists"
    )
    fuzzy_policy: FuzzyPolicy = Field(
        default=FuzzyPolicy.RAW,
        description="raw: plain Levenshtein, no cutoff; stripped: ignore punctuation, cut off at fuzzy_max_distance"
    )
    fuzzy_max_distance: int = Field(
        default=DEFAULT_MAX_DISTANCE,
        ge=0,
        description="Maximum edit distance accepted by the stripped fuzzy policy"
    )

    # Loading
    load_workers: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Threads used to load dictionaries in parallel"
    )
    log_level: str = Field(default="INFO", description="Logging level name")

    @field_validator("fuzzy_policy", mode="before")
    @classmethod
    def validate_fuzzy_policy(cls, v: Any) -> Any:
        """Accept policy names case-insensitively."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure the level is a standard logging level name."""
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"log_level must be a logging level name, got {v!r}")
        return level

    def fuzzy_matcher(self) -> FuzzyMatcher:
        """Fuzzy matcher configured with this policy."""
        return FuzzyMatcher(self.fuzzy_policy, self.fuzzy_max_distance)

    # =========================================================================
    # Loading
    # =========================================================================

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], origin: str = "configuration") -> "StardexConfig":
        """Validate a plain mapping, converting validation errors to ConfigError."""
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid {origin}: {e}") from e

    @classmethod
    def _read_yaml(cls, path: Path) -> dict[str, Any]:
        try:
            raw_content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to read config file {path}: {e}", path=path) from e

        try:
            data = yaml.safe_load(raw_content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file {path}: {e}", path=path) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError("Config file must be a YAML mapping at the top level", path=path)
        return data

    @classmethod
    def from_yaml(cls, path: Path | str) -> "StardexConfig":
        """
        Load configuration from a YAML file.

        Raises:
            ConfigError: If the file cannot be read, parsed or validated
        """
        path = Path(path)
        return cls.from_mapping(cls._read_yaml(path), origin=f"config file {path}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "StardexConfig":
        """
        Load configuration from environment variables.

        ``STARDEX_CONFIG`` names an optional YAML file used as the base;
        the other variables override its values.

        Raises:
            ConfigError: If the referenced file or any value is invalid
        """
        environ = os.environ if environ is None else environ
        data: dict[str, Any] = {}

        config_file = environ.get(f"{ENV_PREFIX}CONFIG")
        if config_file:
            data.update(cls._read_yaml(Path(config_file)))

        for key, field_name in (("DICT_DIRS", "dictionary_dirs"), ("NOTES_DIRS", "notes_dirs")):
            value = environ.get(f"{ENV_PREFIX}{key}")
            if value:
                data[field_name] = [p for p in value.split(os.pathsep) if p]

        for key, field_name in (("FUZZY_POLICY", "fuzzy_policy"), ("LOG_LEVEL", "log_level")):
            value = environ.get(f"{ENV_PREFIX}{key}")
            if value:
                data[field_name] = value

        return cls.from_mapping(data, origin="environment configuration")


__all__ = ["StardexConfig"]
