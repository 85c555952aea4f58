"""Removal of page furniture: page numbers, running headers/footers, separators.

The frequency analysis is exposed separately as ``classify_repeated_lines`` so
the index builder can run the same filter on already-cleaned text.
"""

import re
from collections import Counter
from collections.abc import Iterable

from docforensics.validation.patterns import is_heading, is_table_separator

MIN_REPEATS = 3

_DIGITS_RE = re.compile(r"\d+")
_SPACES_RE = re.compile(r"\s+")
_DOT_LEADER_RE = re.compile(r"\.{5,}")
_SPACED_DOT_LEADER_RE = re.compile(r"(?:\.\s){5,}\.?")

_PAGE_LABEL_RE = re.compile(r"^(?:Página|Page|Pág\.?)\s+\d+$", re.IGNORECASE)
_FOLIO_RE = re.compile(r"^(?:Folio|Foja)s?\s+\d+$", re.IGNORECASE)
_PAGE_OF_TOTAL_RE = re.compile(
    r"^(?:(?:Página|Page|Pág\.?)\s*)?\d{1,4}\s+(?:de|of)\s+\d{1,4}$", re.IGNORECASE
)
_ROMAN_RE = re.compile(r"^[ivxlcdm]{1,6}$", re.IGNORECASE)
_PAGE_SEPARATOR_RE = re.compile(
    r"^[-—–=_\s]*(?:página|page|pág\.?)?\s*\d*\s*[-—–=_\s]*$", re.IGNORECASE
)
_SEPARATOR_CHAR_RE = re.compile(r"[-—–=_]")
_PAGE_NUMBER_RE = re.compile(r"^\d{1,4}$")
_WATERMARK_RE = re.compile(
    r"^(?:CONFIDENCIAL|CONFIDENTIAL|BORRADOR|DRAFT|COPIA(?:\s+SIMPLE)?|COPY)$", re.IGNORECASE
)

CATEGORIES = (
    "page_label",
    "folio",
    "page_of_total",
    "roman_numeral",
    "page_separator",
    "page_number",
    "duplicate_heading",
    "watermark",
    "repeated_pattern",
)


def transform_toc_dots(markdown: str) -> str:
    """Turn table-of-contents dot leaders into a colon: ``Intro.......3`` -> ``Intro: 3``."""
    result = _DOT_LEADER_RE.sub(": ", markdown)
    return _SPACED_DOT_LEADER_RE.sub(": ", result)


def normalize_line(line: str) -> str:
    """Digit runs become ``#`` and whitespace collapses, so per-page variants match."""
    return _SPACES_RE.sub(" ", _DIGITS_RE.sub("#", line.strip()))


def classify_repeated_lines(lines: Iterable[str]) -> set[str]:
    """Return the normalized forms that occur at least ``MIN_REPEATS`` times.

    Blank lines, Markdown headings and table separator rows never count.
    """
    frequency: Counter[str] = Counter()
    for line in lines:
        trimmed = line.strip()
        if not trimmed or is_heading(trimmed) or is_table_separator(trimmed):
            continue
        normalized = normalize_line(trimmed)
        if 2 < len(normalized) < 200:
            frequency[normalized] += 1
    return {pattern for pattern, count in frequency.items() if count >= MIN_REPEATS}


def _is_page_number(trimmed: str) -> bool:
    # Four-digit numbers in 1900-2099 are treated as years and kept.
    if not _PAGE_NUMBER_RE.match(trimmed):
        return False
    return not 1900 <= int(trimmed) <= 2099


def _is_page_separator(trimmed: str) -> bool:
    return (
        len(trimmed) >= 3
        and _SEPARATOR_CHAR_RE.search(trimmed) is not None
        and _PAGE_SEPARATOR_RE.match(trimmed) is not None
    )


def _furniture_category(trimmed: str) -> str | None:
    """Category of a line that is removed regardless of frequency."""
    if _PAGE_LABEL_RE.match(trimmed):
        return "page_label"
    if _FOLIO_RE.match(trimmed):
        return "folio"
    if _PAGE_OF_TOTAL_RE.match(trimmed):
        return "page_of_total"
    if _ROMAN_RE.match(trimmed):
        return "roman_numeral"
    if _is_page_separator(trimmed):
        return "page_separator"
    if _is_page_number(trimmed):
        return "page_number"
    return None


def remove_page_elements(markdown: str) -> tuple[str, dict[str, int]]:
    """Delete page furniture and lines matching a repeated header/footer pattern.

    Returns:
        The cleaned Markdown and a count of removed lines per category
        (only categories with at least one removal are present).
    """
    lines = transform_toc_dots(markdown).split("\n")
    repeated = classify_repeated_lines(lines)

    kept: list[str] = []
    removed: Counter[str] = Counter()
    last_heading: str | None = None

    for line in lines:
        trimmed = line.strip()

        category = _furniture_category(trimmed) if trimmed else None
        if category is not None:
            removed[category] += 1
            continue

        if is_heading(trimmed):
            if line == last_heading:
                removed["duplicate_heading"] += 1
                continue
            last_heading = line
            kept.append(line)
            continue

        if not trimmed or is_table_separator(trimmed):
            kept.append(line)
            continue

        if normalize_line(trimmed) in repeated:
            if _WATERMARK_RE.match(trimmed):
                removed["watermark"] += 1
            else:
                removed["repeated_pattern"] += 1
            continue

        kept.append(line)

    return "\n".join(kept), dict(removed)


def filter_repeated_lines(lines: list[str]) -> list[str]:
    """Second-pass filter used by the index builder.

    Headings and blank lines are always kept; page numbers, page labels,
    "N de M" lines, roman numerals and repeated patterns are dropped.
    """
    repeated = classify_repeated_lines(lines)
    kept: list[str] = []
    for line in lines:
        trimmed = line.strip()
        if not trimmed or is_heading(trimmed):
            kept.append(line)
            continue
        category = _furniture_category(trimmed)
        if category is not None and category != "page_separator":
            continue
        if normalize_line(trimmed) in repeated:
            continue
        kept.append(line)
    return kept
