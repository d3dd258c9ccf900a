"""
Tests for StardexConfig loading and validation.
"""

import os
from pathlib import Path

import pytest

from stardex.config import StardexConfig
from stardex.exceptions import ConfigError
from stardex.stardict.fuzzy import FuzzyPolicy


class TestStardexConfig:
    """Tests for the configuration model."""

    def test_defaults(self):
        config = StardexConfig()

        assert config.dictionary_dirs == []
        assert config.notes_dirs == []
        assert config.prioritize_online is False
        assert config.exact_only is False
        assert config.fuzzy_policy is FuzzyPolicy.RAW
        assert config.fuzzy_max_distance == 3
        assert config.load_workers == 4
        assert config.log_level == "INFO"

    def test_policy_is_case_insensitive(self):
        assert StardexConfig(fuzzy_policy="Stripped").fuzzy_policy is FuzzyPolicy.STRIPPED

    def test_log_level_is_normalized(self):
        assert StardexConfig(log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize("field,value", [
        ("fuzzy_policy", "phonetic"),
        ("log_level", "LOUD"),
        ("load_workers", 0),
        ("fuzzy_max_distance", -1),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ConfigError):
            StardexConfig.from_mapping({field: value})

    def test_fuzzy_matcher(self):
        matcher = StardexConfig(fuzzy_policy="stripped", fuzzy_max_distance=1).fuzzy_matcher()
        assert matcher.policy is FuzzyPolicy.STRIPPED
        assert matcher.max_distance == 1


class TestFromYaml:
    """Tests for StardexConfig.from_yaml."""

    def test_load(self, tmp_path):
        path = tmp_path / "stardex.yaml"
        path.write_text(
            "dictionary_dirs:\n"
            "  - /usr/share/stardict/dic\n"
            "prioritize_online: true\n"
            "fuzzy_policy: stripped\n",
            encoding="utf-8",
        )
        config = StardexConfig.from_yaml(path)

        assert config.dictionary_dirs == [Path("/usr/share/stardict/dic")]
        assert config.prioritize_online is True
        assert config.fuzzy_policy is FuzzyPolicy.STRIPPED

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert StardexConfig.from_yaml(path) == StardexConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            StardexConfig.from_yaml(tmp_path / "absent.yaml")
        assert exc_info.value.path == str(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("dictionary_dirs: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            StardexConfig.from_yaml(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- one\n- two\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            StardexConfig.from_yaml(path)


class TestFromEnv:
    """Tests for StardexConfig.from_env."""

    def test_empty_environment(self):
        assert StardexConfig.from_env({}) == StardexConfig()

    def test_variables(self):
        environ = {
            "STARDEX_DICT_DIRS": os.pathsep.join(["/dicts/a", "", "/dicts/b"]),
            "STARDEX_NOTES_DIRS": "/notes",
            "STARDEX_FUZZY_POLICY": "STRIPPED",
            "STARDEX_LOG_LEVEL": "warning",
        }
        config = StardexConfig.from_env(environ)

        assert config.dictionary_dirs == [Path("/dicts/a"), Path("/dicts/b")]
        assert config.notes_dirs == [Path("/notes")]
        assert config.fuzzy_policy is FuzzyPolicy.STRIPPED
        assert config.log_level == "WARNING"

    def test_environment_overrides_file(self, tmp_path):
        path = tmp_path / "stardex.yaml"
        path.write_text("dictionary_dirs: [/from/file]\nexact_only: true\n", encoding="utf-8")
        environ = {"STARDEX_CONFIG": str(path), "STARDEX_DICT_DIRS": "/from/env"}

        config = StardexConfig.from_env(environ)
        assert config.dictionary_dirs == [Path("/from/env")]
        assert config.exact_only is True

    def test_invalid_value(self):
        with pytest.raises(ConfigError):
            StardexConfig.from_env({"STARDEX_FUZZY_POLICY": "soundex"})
