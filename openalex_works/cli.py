"""Command-line front end for OpenAlex works search."""

import argparse
import logging
import sys
from typing import Callable, TextIO

from openalex_works.core.config import SearchMode, load_search_config
from openalex_works.core.errors import InvalidArgument, SearchFailed
from openalex_works.search.client import WorksClient
from openalex_works.search.models import Work

DEFAULT_PAGE_SIZE = 5
ABSTRACT_PREVIEW_CHARS = 400

_MODE_ALIASES = {
    "broad": SearchMode.BROAD,
    "title": SearchMode.TITLE_ONLY,
    "abstract": SearchMode.ABSTRACT_ONLY,
    "title-abstract": SearchMode.TITLE_AND_ABSTRACT,
    "title+abstract": SearchMode.TITLE_AND_ABSTRACT,
    "title_or_abstract": SearchMode.TITLE_AND_ABSTRACT,
}

EPILOG = """\
examples:
  openalex-works quantum computing
  openalex-works --per-page 3 "graph neural networks"
  openalex-works -l en,sv,da climate change
  openalex-works -s title --show-abstract theology
"""


# ── Argument Parsing ─────────────────────────────────────────────────


def _per_page(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid per page value: {value}")
    if not 1 <= n <= 200:
        raise argparse.ArgumentTypeError("per page value must be between 1 and 200")
    return n


def _comma_list(value: str) -> list[str]:
    items = list(dict.fromkeys(p.strip() for p in value.split(",") if p.strip()))
    if not items:
        raise argparse.ArgumentTypeError("expected a comma-separated list")
    return items


def _search_mode(value: str) -> SearchMode:
    mode = _MODE_ALIASES.get(value.strip().lower())
    if mode is None:
        raise argparse.ArgumentTypeError(
            "invalid search mode; use broad, title, abstract, or title-abstract"
        )
    return mode


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openalex-works",
        description="Search OpenAlex works from the command line.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("terms", nargs="+", help="Search terms")
    parser.add_argument(
        "-n", "--per-page", type=_per_page, default=DEFAULT_PAGE_SIZE,
        help=f"Number of results (default {DEFAULT_PAGE_SIZE}, max 200)",
    )
    parser.add_argument(
        "-l", "--languages", type=_comma_list,
        help="Comma-separated language codes to include (e.g. en,sv,de)",
    )
    parser.add_argument(
        "-c", "--concepts", type=_comma_list,
        help="Comma-separated OpenAlex concept IDs (e.g. C555206,C17744445)",
    )
    parser.add_argument(
        "--created-since", type=int, metavar="DAYS",
        help="Only works created in the last N days",
    )
    parser.add_argument(
        "--published-since", type=int, metavar="DAYS",
        help="Only works published in the last N days",
    )
    parser.add_argument(
        "-s", "--search-mode", type=_search_mode, default=None,
        help="Search scope: broad (default), title, abstract, title-abstract",
    )
    parser.add_argument(
        "-a", "--show-abstract", action="store_true",
        help=f"Include abstract text (up to {ABSTRACT_PREVIEW_CHARS} characters)",
    )
    parser.add_argument("--config", help="YAML search config to start from")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


# ── Formatting ───────────────────────────────────────────────────────


def format_work(work: Work, index: int, show_abstract: bool = False) -> str:
    """Render one work as a numbered entry with indented details."""
    year = str(work.publication_year) if work.publication_year else "Unknown Year"
    header = f"{index}. {work.name} ({year})"
    if work.type:
        header += f" [{work.type}]"
    source = work.primary_location.source if work.primary_location else None
    if source and source.display_name:
        header += f" @ {source.display_name}"

    lines = [header]

    def detail(label: str, value) -> None:
        if value is not None and str(value).strip():
            lines.append(f"   {label}: {value}")

    detail("DOI", work.doi)
    detail("Full text", work.fulltext_url)
    detail("Publication date", work.publication_date)
    detail("Created", work.created_date)
    detail("Updated", work.updated_date)
    if work.cited_by_count > 0:
        detail("Cited by", work.cited_by_count)
    if work.open_access and work.open_access.is_oa:
        detail("OA", work.open_access.oa_status)
    detail("Institutions", "; ".join(work.institution_labels()))
    detail("Concepts", ", ".join(work.concept_labels()))
    if show_abstract:
        detail("Abstract", truncate(work.abstract_text, ABSTRACT_PREVIEW_CHARS))

    return "\n".join(lines) + "\n\n"


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max(0, max_length - 3)].strip() + "..."


# ── Entry Point ──────────────────────────────────────────────────────


def run(
    argv: list[str] | None = None,
    client_factory: Callable[[], WorksClient] = WorksClient,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Run a search and print the results. Returns the process exit code."""
    out = out or sys.stdout
    err = err or sys.stderr

    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return 0 if exc.code == 0 else 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    query = " ".join(args.terms)

    try:
        client = client_factory()
        if args.config:
            client = client.with_config(load_search_config(args.config))
        if args.languages is not None:
            client = client.with_allowed_languages(args.languages)
        if args.concepts is not None:
            client = client.with_concepts(args.concepts)
        if args.created_since is not None:
            client = client.with_created_since(args.created_since)
        if args.published_since is not None:
            client = client.with_publication_date_since(args.published_since)
        if args.search_mode is not None:
            client = client.with_search_mode(args.search_mode)

        works = client.search_works(query, args.per_page)
    except InvalidArgument as exc:
        err.write(f"Invalid argument: {exc}\n")
        return 1
    except SearchFailed as exc:
        err.write(f"OpenAlex request failed: {exc}\n")
        return 2

    if not works:
        out.write(f'No results found for "{query}".\n')
        return 0

    plural = "" if len(works) == 1 else "s"
    out.write(f'Top {len(works)} result{plural} for "{query}":\n')
    for i, work in enumerate(works, start=1):
        out.write(format_work(work, i, args.show_abstract))
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
