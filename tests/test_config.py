"""Tests for search configuration and YAML loading."""

from datetime import date
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from openalex_works.core.config import (
    DEFAULT_LANGUAGES,
    SearchConfig,
    SearchMode,
    days_ago,
    load_search_config,
)
from openalex_works.core.errors import InvalidArgument

CONFIG_PATH = Path(__file__).resolve().parent.parent / "search_configs" / "nordic_recent.yaml"


def fixed_today() -> date:
    return date(2025, 1, 31)


# ── Defaults & Normalization ─────────────────────────────────────────


def test_defaults():
    config = SearchConfig()
    assert config.languages == DEFAULT_LANGUAGES
    assert config.concepts == ()
    assert config.search_mode is SearchMode.BROAD
    assert config.created_since is None
    assert config.concept_field == "concept.id"


def test_languages_normalized():
    config = SearchConfig(languages=[" EN", "sv", "en", "", None, "Sv "])
    assert config.languages == ("en", "sv")


@pytest.mark.parametrize("languages", [None, [], ["  ", ""]])
def test_empty_languages_fall_back_to_default(languages):
    assert SearchConfig(languages=languages).languages == DEFAULT_LANGUAGES


def test_concepts_trimmed_and_deduplicated():
    config = SearchConfig(concepts=[" C1", "C2", "C1 ", ""])
    assert config.concepts == ("C1", "C2")


def test_invalid_search_mode_rejected():
    with pytest.raises(ValidationError):
        SearchConfig(search_mode="everywhere")


def test_with_search_mode_rejects_unknown_mode():
    with pytest.raises(InvalidArgument, match="search_mode"):
        SearchConfig().with_search_mode("fuzzy")


# ── Copy-on-write ────────────────────────────────────────────────────


def test_config_is_frozen():
    config = SearchConfig()
    with pytest.raises(ValidationError):
        config.languages = ("en",)


def test_with_methods_copy():
    base = SearchConfig()
    changed = base.with_languages(["EN"]).with_concepts(["C9"]).with_search_mode("abstract-only")

    assert base == SearchConfig()
    assert changed.languages == ("en",)
    assert changed.concepts == ("C9",)
    assert changed.search_mode is SearchMode.ABSTRACT_ONLY


def test_with_methods_revalidate():
    assert SearchConfig(languages=["en"]).with_languages([]).languages == DEFAULT_LANGUAGES


def test_days_conveniences():
    config = SearchConfig().with_created_since_days(1, fixed_today)
    config = config.with_published_since_days(31, fixed_today)
    assert config.created_since == date(2025, 1, 30)
    assert config.published_since == date(2024, 12, 31)


@pytest.mark.parametrize("days", [0, -1, 1.5, "7", True])
def test_days_ago_rejects_non_positive_integers(days):
    with pytest.raises(InvalidArgument):
        days_ago(days, fixed_today)


# ── YAML Loading ─────────────────────────────────────────────────────


def test_load_config_file():
    config = load_search_config(CONFIG_PATH, today=fixed_today)
    assert config.languages == ("sv", "da", "no")
    assert config.concepts == ("C138885662",)
    assert config.search_mode is SearchMode.TITLE_ONLY
    assert config.concept_field == "concepts.id"
    assert config.published_since == date(2023, 2, 1)
    assert config.created_since is None


def test_load_config_with_explicit_dates(tmp_path):
    path = tmp_path / "dates.yaml"
    path.write_text(yaml.safe_dump({"created_since": "2024-06-01", "languages": ["fr"]}))
    config = load_search_config(path)
    assert config.created_since == date(2024, 6, 1)
    assert config.languages == ("fr",)


def test_load_empty_config(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_search_config(path) == SearchConfig()


def test_load_config_rejects_bad_days(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("created_since_days: 0\n")
    with pytest.raises(InvalidArgument):
        load_search_config(path)


def test_load_config_rejects_bad_search_mode(tmp_path):
    path = tmp_path / "mode.yaml"
    path.write_text("search_mode: fuzzy\n")
    with pytest.raises(InvalidArgument, match="search_mode"):
        load_search_config(path)


def test_load_config_missing_file(tmp_path):
    with pytest.raises(InvalidArgument, match="Cannot read"):
        load_search_config(tmp_path / "missing.yaml")


def test_load_config_malformed_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("languages: [en, sv\n")
    with pytest.raises(InvalidArgument, match="Malformed"):
        load_search_config(path)


def test_load_config_requires_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- en\n- sv\n")
    with pytest.raises(InvalidArgument, match="mapping"):
        load_search_config(path)
