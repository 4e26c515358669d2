"""Search configuration: filters, search mode, and YAML loading."""

from datetime import date, timedelta
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from openalex_works.core.errors import InvalidArgument, describe_validation_error

DEFAULT_LANGUAGES = ("sv", "da", "no", "de", "fr", "en")
DEFAULT_CONCEPT_FIELD = "concept.id"


class SearchMode(str, Enum):
    """Which work fields the free-text query is matched against."""

    BROAD = "broad"
    TITLE_ONLY = "title-only"
    ABSTRACT_ONLY = "abstract-only"
    TITLE_AND_ABSTRACT = "title-and-abstract"


# ── Search Config ────────────────────────────────────────────────────


class SearchConfig(BaseModel):
    """Immutable filter configuration shared by every request of a search.

    Reconfigure with the ``with_*`` methods; each returns a new, re-validated
    instance and leaves the original untouched.
    """

    model_config = ConfigDict(frozen=True)

    languages: tuple[str, ...] = DEFAULT_LANGUAGES
    concepts: tuple[str, ...] = ()
    search_mode: SearchMode = SearchMode.BROAD
    created_since: Optional[date] = None
    published_since: Optional[date] = None
    concept_field: str = Field(
        default=DEFAULT_CONCEPT_FIELD,
        description="Filter field for concept IDs, e.g. 'concept.id' or 'concepts.id'",
    )

    @field_validator("languages", mode="before")
    @classmethod
    def normalize_languages(cls, v):
        codes = _clean_values(v, lower=True)
        return codes or DEFAULT_LANGUAGES

    @field_validator("concepts", mode="before")
    @classmethod
    def normalize_concepts(cls, v):
        return _clean_values(v)

    @field_validator("search_mode", mode="before")
    @classmethod
    def default_search_mode(cls, v):
        return SearchMode.BROAD if v is None else v

    # ── Copy-on-write reconfiguration ────────────────────────────

    def with_languages(self, languages: list[str] | None) -> "SearchConfig":
        return self._replace(languages=languages)

    def with_concepts(self, concepts: list[str] | None) -> "SearchConfig":
        return self._replace(concepts=concepts)

    def with_search_mode(self, mode: SearchMode | str | None) -> "SearchConfig":
        return self._replace(search_mode=mode)

    def with_created_since(self, since: date | None) -> "SearchConfig":
        return self._replace(created_since=since)

    def with_published_since(self, since: date | None) -> "SearchConfig":
        return self._replace(published_since=since)

    def with_created_since_days(
        self, days: int, today: Callable[[], date] = date.today
    ) -> "SearchConfig":
        """Only include works created within the last ``days`` days."""
        return self._replace(created_since=days_ago(days, today))

    def with_published_since_days(
        self, days: int, today: Callable[[], date] = date.today
    ) -> "SearchConfig":
        """Only include works published within the last ``days`` days."""
        return self._replace(published_since=days_ago(days, today))

    def _replace(self, **changes) -> "SearchConfig":
        return _validate({**self.model_dump(), **changes})


# ── Helpers ──────────────────────────────────────────────────────────


def _validate(data: dict) -> SearchConfig:
    try:
        return SearchConfig.model_validate(data)
    except ValidationError as exc:
        raise InvalidArgument(describe_validation_error(exc)) from exc


def days_ago(days: int, today: Callable[[], date] = date.today) -> date:
    """Return the date ``days`` days before ``today()``."""
    if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
        raise InvalidArgument(f"Day count must be a positive integer, got {days!r}")
    return today() - timedelta(days=days)


def _clean_values(values, lower: bool = False) -> tuple[str, ...]:
    """Trim, drop empties, and de-duplicate preserving first occurrence."""
    if values is None:
        return ()
    if isinstance(values, str):
        values = values.split(",")
    seen: dict[str, None] = {}
    for value in values:
        if value is None:
            continue
        cleaned = str(value).strip()
        if lower:
            cleaned = cleaned.lower()
        if cleaned:
            seen.setdefault(cleaned, None)
    return tuple(seen)


def load_search_config(
    path: str | Path, today: Callable[[], date] = date.today
) -> SearchConfig:
    """Load a YAML search config from disk and return a validated model.

    Besides the model fields, ``created_since_days`` and
    ``published_since_days`` are accepted as relative date filters.
    """
    path = Path(path)
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except OSError as exc:
        raise InvalidArgument(f"Cannot read search config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise InvalidArgument(f"Malformed search config {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise InvalidArgument(f"Search config {path} must be a mapping")

    created_days = raw.pop("created_since_days", None)
    published_days = raw.pop("published_since_days", None)

    config = _validate(raw)
    if created_days is not None:
        config = config.with_created_since_days(created_days, today)
    if published_days is not None:
        config = config.with_published_since_days(published_days, today)
    return config
