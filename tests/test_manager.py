"""
Tests for DictionaryManager: loading, fan-out queries and fallbacks.
"""

import logging
import os
from unittest.mock import MagicMock

import pytest

from stardex.config import StardexConfig
from stardex.exceptions import OnlineLookupError
from stardex.manager import (
    DictionaryManager,
    HistoryRecorder,
    QueryOptions,
    QueryOutcome,
    QueryStatus,
    discover_dictionary_dirs,
    split_non_alphanumeric_prefix,
)
from stardex.sources import LookupItem, OnlineLookup, OnlineSource, SourceType, Translation
from stardex.stardict.builder import write_stardict

from conftest import RUST_TRANSLATION


class FakeOnline(OnlineLookup):
    """OnlineLookup answering from a fixed table."""

    name = "Youdao"

    def __init__(self, answers: dict[str, str]):
        self.answers = answers
        self.calls: list[str] = []

    def lookup(self, word: str) -> Translation:
        self.calls.append(word)
        if word not in self.answers:
            raise OnlineLookupError(f"nothing for {word}")
        return Translation(word=word, translation=self.answers[word])


@pytest.fixture
def library(tmp_path):
    """Two valid dictionaries and one incomplete directory."""
    root = tmp_path / "dicts"
    write_stardict(root / "b-oxford", "Oxford", [("rust", "oxidation"), ("trust", "belief")])
    write_stardict(root / "a-cdict", "CDICT", [("rust", RUST_TRANSLATION), ("cargo", "货物")], compress=True)
    broken = root / "c-broken"
    broken.mkdir()
    (broken / "broken.ifo").write_text("version=2.4.2\nbookname=Broken\n", encoding="utf-8")
    return root


@pytest.fixture
def manager(library):
    return DictionaryManager.from_config(StardexConfig(dictionary_dirs=[library]))


@pytest.fixture
def online():
    return FakeOnline({"serde": "a serialization framework", "rust": "online rust"})


class TestPrefixParsing:
    """Tests for query prefixes."""

    def test_split_prefix(self):
        assert split_non_alphanumeric_prefix("@|rust") == ("@|", "rust")
        assert split_non_alphanumeric_prefix("rust") == ("", "rust")
        assert split_non_alphanumeric_prefix("你好") == ("", "你好")
        assert split_non_alphanumeric_prefix("@@") == ("@@", "")

    def test_no_prefix(self):
        assert QueryOptions.parse_prefixed_word("rust") == (None, "rust")

    @pytest.mark.parametrize("text,prioritize_online,exact_only", [
        ("@rust", True, False),
        ("|rust", False, True),
        ("/rust", False, False),
        ("@|rust", True, True),
        ("|/rust", False, True),
        ("#rust", False, False),
    ])
    def test_prefixes(self, text, prioritize_online, exact_only):
        options, word = QueryOptions.parse_prefixed_word(text)
        assert word == "rust"
        assert options == QueryOptions(prioritize_online=prioritize_online, exact_only=exact_only)


class TestDiscovery:
    """Tests for discover_dictionary_dirs."""

    def test_parent_directory(self, library):
        found, problems = discover_dictionary_dirs([library])
        assert [p.name for p in found] == ["a-cdict", "b-oxford", "c-broken"]
        assert problems == {}

    def test_dictionary_directory_itself(self, library):
        found, _ = discover_dictionary_dirs([library / "b-oxford"])
        assert found == [library / "b-oxford"]

    def test_duplicates_and_missing(self, library, tmp_path):
        missing = tmp_path / "missing"
        found, problems = discover_dictionary_dirs([library / "a-cdict", library, missing])

        assert [p.name for p in found] == ["a-cdict", "b-oxford", "c-broken"]
        assert problems == {str(missing): "not a directory"}


class TestLoading:
    """Tests for DictionaryManager.load."""

    def test_load_order_and_failures(self, manager, library):
        assert manager.source_ids == ["stardict-a-cdict", "stardict-b-oxford"]
        assert list(manager.failures) == [str(library / "c-broken")]
        assert "incomplete" in manager.failures[str(library / "c-broken")]

    def test_failures_are_logged(self, library, caplog):
        with caplog.at_level(logging.WARNING, logger="stardex"):
            DictionaryManager.from_config(StardexConfig(dictionary_dirs=[library]))
        assert "Skipping" in caplog.text
        assert "c-broken" in caplog.text

    @pytest.mark.parametrize("workers", [1, 8])
    def test_order_independent_of_workers(self, library, workers):
        config = StardexConfig(dictionary_dirs=[library], load_workers=workers)
        manager = DictionaryManager.from_config(config)
        assert manager.source_ids == ["stardict-a-cdict", "stardict-b-oxford"]

    def test_same_directory_names_get_unique_ids(self, tmp_path):
        write_stardict(tmp_path / "one" / "dict", "First", [("a", "1")])
        write_stardict(tmp_path / "two" / "dict", "Second", [("a", "2")])
        config = StardexConfig(dictionary_dirs=[tmp_path / "one", tmp_path / "two"])

        manager = DictionaryManager.from_config(config)
        assert manager.source_ids == ["stardict-dict", "stardict-dict-2"]

    def test_notes_collections(self, library, tmp_path):
        graph = tmp_path / "graph"
        (graph / "pages").mkdir(parents=True)
        (graph / "pages" / "serde.md").write_text("- derive macros\n", encoding="utf-8")
        config = StardexConfig(dictionary_dirs=[library], notes_dirs=[graph, tmp_path / "nope"])

        manager = DictionaryManager.from_config(config)
        assert "notes-graph" in manager.source_ids
        assert str(tmp_path / "nope") in manager.failures

        outcome = manager.query("serde")
        assert outcome.status is QueryStatus.FOUND_LOCALLY
        assert outcome.items[0].source == "graph"

    def test_nothing_configured(self):
        manager = DictionaryManager.from_config(StardexConfig())
        assert manager.sources == []
        assert manager.query("rust").status is QueryStatus.NOT_FOUND


class TestQuery:
    """Tests for DictionaryManager.query."""

    def test_exact_fans_out_across_dictionaries(self, manager):
        outcome = manager.query("RUST")

        assert outcome.status is QueryStatus.FOUND_LOCALLY
        assert outcome.found
        assert outcome.pairs() == [("rust", RUST_TRANSLATION), ("rust", "oxidation")]
        assert [item.source for item in outcome.items] == ["CDICT", "Oxford"]

    def test_exact_in_one_dictionary(self, manager):
        outcome = manager.query("cargo")
        assert [item.source for item in outcome.items] == ["CDICT"]

    def test_fuzzy_concatenates_sources(self, manager):
        outcome = manager.query("rsut")

        assert outcome.status is QueryStatus.FUZZY
        assert not outcome.found
        assert [(item.word, item.source) for item in outcome.items] == [
            ("rust", "CDICT"),
            ("rust", "Oxford"),
        ]

    def test_exact_only_prefix(self, manager):
        assert manager.query("|rsut").status is QueryStatus.NOT_FOUND

    def test_exact_only_default_and_fuzzy_prefix(self, library):
        config = StardexConfig(dictionary_dirs=[library], exact_only=True)
        manager = DictionaryManager.from_config(config)

        assert manager.query("rsut").status is QueryStatus.NOT_FOUND
        assert manager.query("/rsut").status is QueryStatus.FUZZY

    def test_empty_word(self, manager):
        outcome = manager.query("@")
        assert outcome.status is QueryStatus.NOT_FOUND
        assert outcome.word == ""

    def test_outcome_to_dict(self, manager):
        data = manager.query("cargo").to_dict()
        assert data["status"] == "found_locally"
        assert data["items"][0]["translation"] == "货物"


class TestOnlineFallback:
    """Tests for the online collaborator in the query order."""

    def test_local_hit_skips_online(self, library, online):
        manager = DictionaryManager.from_config(StardexConfig(dictionary_dirs=[library]), online=online)

        assert manager.query("rust").status is QueryStatus.FOUND_LOCALLY
        assert online.calls == []

    def test_online_after_local_miss(self, library, online):
        manager = DictionaryManager.from_config(StardexConfig(dictionary_dirs=[library]), online=online)
        outcome = manager.query("serde")

        assert outcome.status is QueryStatus.FOUND_ONLINE
        assert outcome.items[0].source == "Youdao"
        assert online.calls == ["serde"]

    def test_prioritized_online(self, library, online):
        manager = DictionaryManager.from_config(StardexConfig(dictionary_dirs=[library]), online=online)
        outcome = manager.query("@rust")

        assert outcome.status is QueryStatus.FOUND_ONLINE
        assert outcome.pairs() == [("rust", "online rust")]

    def test_prioritized_online_miss_falls_back_to_local(self, library, online):
        manager = DictionaryManager.from_config(StardexConfig(dictionary_dirs=[library]), online=online)
        outcome = manager.query("@cargo")

        assert outcome.status is QueryStatus.FOUND_LOCALLY
        assert online.calls == ["cargo"]

    def test_explicit_options_override_prefix(self, library, online):
        manager = DictionaryManager.from_config(StardexConfig(dictionary_dirs=[library]), online=online)
        outcome = manager.query("@rust", QueryOptions())

        assert outcome.status is QueryStatus.FOUND_LOCALLY
        assert outcome.word == "rust"

    def test_online_failure_falls_through_to_fuzzy(self, library, online):
        manager = DictionaryManager.from_config(StardexConfig(dictionary_dirs=[library]), online=online)
        outcome = manager.query("rsut")

        assert outcome.status is QueryStatus.FUZZY
        assert online.calls == ["rsut"]

    def test_online_source_instance_is_accepted(self, online):
        source = OnlineSource(online, source_id="custom-online")
        manager = DictionaryManager(online=source)
        assert manager.source_ids == ["custom-online"]


class TestHistory:
    """Tests for the history collaborator."""

    def test_found_word_is_recorded(self, library):
        history = MagicMock(spec=HistoryRecorder)
        manager = DictionaryManager.from_config(StardexConfig(dictionary_dirs=[library]), history=history)

        manager.query("RUST")
        history.record.assert_called_once_with(
            "rust",
            {"source": "CDICT", "status": "found_locally", "difficulty_levels": []},
        )

    def test_fuzzy_and_missing_are_not_recorded(self, library):
        history = MagicMock(spec=HistoryRecorder)
        manager = DictionaryManager.from_config(StardexConfig(dictionary_dirs=[library]), history=history)

        manager.query("rsut")
        manager.query("|zzz")
        history.record.assert_not_called()

    def test_history_failure_does_not_fail_query(self, library, caplog):
        history = MagicMock(spec=HistoryRecorder)
        history.record.side_effect = RuntimeError("database is locked")
        manager = DictionaryManager.from_config(StardexConfig(dictionary_dirs=[library]), history=history)

        with caplog.at_level(logging.WARNING, logger="stardex"):
            outcome = manager.query("rust")

        assert outcome.status is QueryStatus.FOUND_LOCALLY
        assert "database is locked" in caplog.text


class TestSourceManagement:
    """Tests for listing and managing sources."""

    def test_list_dictionaries(self, library, online):
        manager = DictionaryManager.from_config(StardexConfig(dictionary_dirs=[library]), online=online)
        rows = [summary.to_dict() for summary in manager.list_dictionaries()]

        assert rows == [
            {"name": "CDICT", "type": "stardict", "word_count": 2},
            {"name": "Oxford", "type": "stardict", "word_count": 2},
            {"name": "Youdao", "type": "online", "word_count": None},
        ]

    def test_add_source_replaces_same_id(self, manager):
        replacement = MagicMock()
        replacement.source_id = "stardict-a-cdict"
        replacement.source_type = SourceType.STARDICT
        replacement.exact_lookup.return_value = LookupItem("rust", "replaced", "Mock")

        manager.add_source(replacement)

        assert manager.source_ids == ["stardict-b-oxford", "stardict-a-cdict"]
        assert manager.query("rust").pairs() == [("rust", "oxidation"), ("rust", "replaced")]

    def test_unload_source(self, manager):
        assert manager.unload_source("stardict-b-oxford")
        assert not manager.unload_source("stardict-b-oxford")
        assert [item.source for item in manager.query("rust").items] == ["CDICT"]

    def test_close(self, manager):
        manager.close()
        assert manager.sources == []
        assert repr(manager) == "DictionaryManager(sources=[none])"


def test_outcome_defaults():
    outcome = QueryOutcome("rust", QueryStatus.NOT_FOUND)
    assert outcome.items == []
    assert outcome.pairs() == []
    assert not outcome.found


def test_env_directories(library):
    environ = {"STARDEX_DICT_DIRS": os.pathsep.join([str(library / "b-oxford"), str(library / "a-cdict")])}
    manager = DictionaryManager.from_config(StardexConfig.from_env(environ))
    assert manager.source_ids == ["stardict-b-oxford", "stardict-a-cdict"]
