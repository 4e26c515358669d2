"""Request construction for the OpenAlex /works endpoint."""

from typing import Optional
from urllib.parse import quote_plus

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from openalex_works.core.config import SearchConfig, SearchMode
from openalex_works.core.errors import InvalidArgument, describe_validation_error

API_BASE_URL = "https://api.openalex.org"
WORKS_URL = f"{API_BASE_URL}/works"

MAX_PER_PAGE = 200
START_CURSOR = "*"
WILDCARD = "*"
SORT = "publication_date:desc"


# ── Search Request ───────────────────────────────────────────────────


class SearchRequest(BaseModel):
    """Everything needed to render one /works request URL."""

    model_config = ConfigDict(frozen=True)

    query: str
    config: SearchConfig = Field(default_factory=SearchConfig)
    per_page: int = Field(default=MAX_PER_PAGE, ge=1, le=MAX_PER_PAGE)
    cursor: Optional[str] = None

    @field_validator("query", mode="before")
    @classmethod
    def non_empty_query(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("Search query must not be empty")
        return str(v).strip()


def build_request(
    query: str,
    config: SearchConfig | None = None,
    per_page: int = MAX_PER_PAGE,
    cursor: str | None = None,
) -> SearchRequest:
    """Validate inputs into a SearchRequest, raising InvalidArgument on bad input."""
    try:
        return SearchRequest(
            query=query,
            config=config or SearchConfig(),
            per_page=per_page,
            cursor=cursor,
        )
    except ValidationError as exc:
        raise InvalidArgument(describe_validation_error(exc)) from exc


# ── Clause Rendering ─────────────────────────────────────────────────


def _broad(text: str) -> str:
    return text


def _title_only(text: str) -> str:
    return f'title:"{text}"'


def _abstract_only(text: str) -> str:
    return f'abstract:"{text}"'


def _title_and_abstract(text: str) -> str:
    return f'title:"{text}" OR abstract:"{text}"'


_CLAUSE_RENDERERS = {
    SearchMode.BROAD: _broad,
    SearchMode.TITLE_ONLY: _title_only,
    SearchMode.ABSTRACT_ONLY: _abstract_only,
    SearchMode.TITLE_AND_ABSTRACT: _title_and_abstract,
}

# Modes that also restrict matching through a <field>.search filter
_FIELD_SEARCH_FILTERS = {
    SearchMode.TITLE_ONLY: "title.search",
    SearchMode.ABSTRACT_ONLY: "abstract.search",
}


def render_search_clause(mode: SearchMode, text: str) -> str:
    """Expand query text for the given mode; the wildcard yields ''."""
    text = text.strip()
    if text == WILDCARD:
        return ""
    return _CLAUSE_RENDERERS[SearchMode(mode)](text)


def render_filter(config: SearchConfig, text: str) -> str:
    """Combine every active filter clause into one unencoded filter value."""
    clauses = []
    if config.languages:
        clauses.append("language:" + "|".join(config.languages))
    if config.concepts:
        clauses.append(f"{config.concept_field}:" + "|".join(config.concepts))
    if config.created_since:
        clauses.append(f"from_created_date:{config.created_since.isoformat()}")
    if config.published_since:
        clauses.append(f"from_publication_date:{config.published_since.isoformat()}")

    field = _FIELD_SEARCH_FILTERS.get(config.search_mode)
    text = text.strip()
    if field and text != WILDCARD:
        clauses.append(f"{field}:{text}")

    return ",".join(clauses)


# ── URL Assembly ─────────────────────────────────────────────────────


def build_query_string(request: SearchRequest) -> str:
    """Render the escaped query-string portion of a /works URL."""
    params = []

    clause = render_search_clause(request.config.search_mode, request.query)
    if clause:
        params.append("search=" + quote_plus(clause))

    params.append(f"per_page={request.per_page}")

    if request.cursor is not None:
        params.append("cursor=" + quote_plus(request.cursor, safe=START_CURSOR))

    filter_value = render_filter(request.config, request.query)
    if filter_value:
        params.append("filter=" + quote_plus(filter_value))

    params.append(f"sort={SORT}")
    return "&".join(params)


def build_works_url(request: SearchRequest) -> str:
    return f"{WORKS_URL}?{build_query_string(request)}"

