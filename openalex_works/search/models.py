"""Data models for OpenAlex works-search responses."""

from datetime import date
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator

T = TypeVar("T")


def _null_as_empty(v, empty):
    return empty if v is None else v


def _date_part(v):
    # updated_date arrives as a full timestamp
    if isinstance(v, str) and len(v) > 10:
        return v[:10]
    return v


# ── Locations & Access ───────────────────────────────────────────────


class Source(BaseModel):
    id: Optional[str] = None
    display_name: Optional[str] = None


class Location(BaseModel):
    """Where a work is hosted (landing page, PDF, journal/repository)."""

    landing_page_url: Optional[str] = None
    pdf_url: Optional[str] = None
    source: Optional[Source] = None


class OpenAccess(BaseModel):
    is_oa: bool = False
    oa_status: Optional[str] = None
    oa_url: Optional[str] = None

    @field_validator("is_oa", mode="before")
    @classmethod
    def null_is_closed(cls, v):
        return _null_as_empty(v, False)


class Concept(BaseModel):
    id: Optional[str] = None
    display_name: Optional[str] = None
    level: Optional[int] = None


# ── Authorships ──────────────────────────────────────────────────────


class Contributor(BaseModel):
    id: Optional[str] = None
    display_name: Optional[str] = None
    orcid: Optional[str] = None


class Institution(BaseModel):
    id: Optional[str] = None
    display_name: Optional[str] = None
    country_code: Optional[str] = None
    type: Optional[str] = None


class Authorship(BaseModel):
    """One author's contribution to a work, with affiliations."""

    author: Optional[Contributor] = None
    institutions: list[Institution] = Field(default_factory=list)
    countries: list[str] = Field(default_factory=list)
    raw_author_name: Optional[str] = None
    author_position: Optional[str] = None

    @field_validator("institutions", "countries", mode="before")
    @classmethod
    def null_lists(cls, v):
        return _null_as_empty(v, [])


# ── Work ─────────────────────────────────────────────────────────────


class Work(BaseModel):
    """A single scholarly work as returned by the /works endpoint."""

    id: Optional[str] = None
    display_name: Optional[str] = None
    title: Optional[str] = None
    publication_year: Optional[int] = None
    publication_date: Optional[date] = None
    created_date: Optional[date] = None
    updated_date: Optional[date] = None
    type: Optional[str] = None
    relevance_score: Optional[float] = None
    cited_by_count: int = 0
    ids: dict[str, str] = Field(default_factory=dict)
    authorships: list[Authorship] = Field(default_factory=list)
    doi: Optional[str] = None
    primary_location: Optional[Location] = None
    best_oa_location: Optional[Location] = None
    open_access: Optional[OpenAccess] = None
    concepts: list[Concept] = Field(default_factory=list)
    abstract_inverted_index: Optional[dict[str, Optional[list[int]]]] = None

    @field_validator("authorships", "concepts", mode="before")
    @classmethod
    def null_lists(cls, v):
        return _null_as_empty(v, [])

    @field_validator("ids", mode="before")
    @classmethod
    def null_ids(cls, v):
        return _null_as_empty(v, {})

    @field_validator("cited_by_count", mode="before")
    @classmethod
    def null_count(cls, v):
        return _null_as_empty(v, 0)

    @field_validator("publication_date", "created_date", "updated_date", mode="before")
    @classmethod
    def date_only(cls, v):
        return _date_part(v)

    @property
    def abstract_text(self) -> str:
        return reconstruct_abstract(self.abstract_inverted_index)

    @property
    def name(self) -> str:
        """First non-blank of display name, title, and id."""
        return _first_non_blank(self.display_name, self.title, self.id)

    @property
    def fulltext_url(self) -> str:
        """Best available full-text link, preferring open-access PDFs."""
        best = self.best_oa_location
        if best:
            url = _first_non_blank(best.pdf_url, best.landing_page_url)
            if url:
                return url
        if self.open_access:
            url = _first_non_blank(self.open_access.oa_url)
            if url:
                return url
        primary = self.primary_location
        if primary:
            return _first_non_blank(primary.pdf_url, primary.landing_page_url)
        return ""

    def institution_labels(self) -> list[str]:
        """Unique institution labels as 'Name (CC)', in authorship order."""
        labels: dict[str, None] = {}
        for authorship in self.authorships:
            for institution in authorship.institutions:
                name = _first_non_blank(institution.display_name)
                if not name:
                    continue
                country = _first_non_blank(institution.country_code).upper()
                labels.setdefault(f"{name} ({country})" if country else name, None)
        return list(labels)

    def concept_labels(self, limit: int = 10) -> list[str]:
        labels = [_first_non_blank(c.display_name, c.id) for c in self.concepts]
        return [label for label in labels if label][:limit]


# ── Paged Envelope ───────────────────────────────────────────────────


class PageMeta(BaseModel):
    """Paging metadata from the ``meta`` block of a response."""

    count: int = 0
    db_response_time_ms: Optional[int] = None
    page: Optional[int] = None
    per_page: Optional[int] = None
    next_cursor: Optional[str] = None


class ResultPage(BaseModel, Generic[T]):
    """One decoded response page: results plus paging metadata."""

    meta: PageMeta = Field(default_factory=PageMeta)
    results: list[T] = Field(default_factory=list)
    group_by: list[dict] = Field(default_factory=list)

    @field_validator("meta", mode="before")
    @classmethod
    def null_meta(cls, v):
        return _null_as_empty(v, {})

    @field_validator("results", "group_by", mode="before")
    @classmethod
    def null_lists(cls, v):
        return _null_as_empty(v, [])


# ── Abstract Reconstruction ──────────────────────────────────────────


def reconstruct_abstract(inverted_index: dict[str, list[int] | None] | None) -> str:
    """Reassemble abstract text from an OpenAlex inverted index.

    OpenAlex stores abstracts as {word: [position, ...]} dicts. Positions
    outside the range implied by the largest position are ignored, and
    missing positions are skipped rather than padded. Returns an empty
    string if the index is empty or None.
    """
    if not inverted_index:
        return ""
    positions = [p for ps in inverted_index.values() for p in ps or ()]
    if not positions:
        return ""
    length = max(positions) + 1
    if length <= 0:
        return ""

    slots: list[str | None] = [None] * length
    for word, word_positions in inverted_index.items():
        for position in word_positions or ():
            if 0 <= position < length:
                slots[position] = word
    return " ".join(word for word in slots if word)


def _first_non_blank(*values: str | None) -> str:
    for value in values:
        if value and value.strip():
            return value
    return ""
