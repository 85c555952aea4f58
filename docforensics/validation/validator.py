"""Forensic cleaning of raw OCR Markdown.

Stages run in a fixed order, each assuming the previous one ran:
1. table repair
2. page-element removal (dot leaders, page numbers, repeated headers/footers)
3. whitespace normalization
4. legal metadata extraction
5. anomaly-driven status
6. content hashing
"""

import re
from collections.abc import Callable, Sequence
from typing import TypeVar

from docforensics.logging.logger import Log
from docforensics.validation.certificate import sha256_hex
from docforensics.validation.legal import extract_legal_metadata
from docforensics.validation.models import (
    Anomaly,
    LegalMetadata,
    MalformedTablesFixed,
    MissingCaseNumber,
    PageElementsRemoved,
    ShortDocument,
    ValidationResult,
    ValidationStatus,
)
from docforensics.validation.page_elements import remove_page_elements
from docforensics.validation.tables import repair_tables

MIN_DOCUMENT_LENGTH = 100

_EXCESS_BLANK_LINES_RE = re.compile(r"\n{4,}")

T = TypeVar("T")


def normalize_whitespace(markdown: str) -> str:
    """Trim trailing spaces, cap blank-line runs at two, trim the document."""
    trimmed = "\n".join(line.rstrip() for line in markdown.split("\n"))
    return _EXCESS_BLANK_LINES_RE.sub("\n\n\n", trimmed).strip()


def derive_status(anomalies: Sequence[Anomaly]) -> ValidationStatus:
    if any(a.severity == "high" for a in anomalies):
        return "FAILED"
    if sum(1 for a in anomalies if a.severity == "medium") >= 2:
        return "ALERT"
    return "OK"


def validation_score(anomalies: Sequence[Anomaly]) -> float:
    high = sum(1 for a in anomalies if a.severity == "high")
    medium = sum(1 for a in anomalies if a.severity == "medium")
    return max(0.0, round(1.0 - 0.3 * high - 0.1 * medium, 4))


class ForensicValidator:
    """Cleans OCR Markdown and reports what it changed. Never raises."""

    def __init__(self, min_document_length: int = MIN_DOCUMENT_LENGTH) -> None:
        self._min_document_length = min_document_length

    def validate(self, markdown: str, original_bytes: bytes) -> ValidationResult:
        anomalies: list[Anomaly] = []
        cleaned = markdown

        cleaned, repaired_at = self._stage("table repair", repair_tables, cleaned, (cleaned, []))
        if repaired_at:
            anomalies.append(MalformedTablesFixed(count=len(repaired_at), lines=tuple(repaired_at)))

        cleaned, removed = self._stage(
            "page element removal", remove_page_elements, cleaned, (cleaned, {})
        )
        removed_total = sum(removed.values())
        if removed_total:
            anomalies.append(PageElementsRemoved(count=removed_total, categories=removed))

        cleaned = self._stage("whitespace normalization", normalize_whitespace, cleaned, cleaned)

        legal = self._stage(
            "legal metadata extraction", extract_legal_metadata, cleaned, LegalMetadata()
        )
        if not legal.case_number:
            anomalies.append(MissingCaseNumber())
        if len(cleaned) < self._min_document_length:
            anomalies.append(
                ShortDocument(length=len(cleaned), minimum=self._min_document_length)
            )

        status = derive_status(anomalies)
        Log.info(
            f"Validation finished: status={status}, {len(anomalies)} anomalies, "
            f"{len(cleaned)} chars"
        )
        return ValidationResult(
            cleaned_markdown=cleaned,
            anomalies=anomalies,
            hash_original=sha256_hex(original_bytes),
            hash_markdown=sha256_hex(cleaned),
            legal_elements=legal,
            validation_status=status,
        )

    @staticmethod
    def _stage(name: str, func: Callable[[str], T], text: str, fallback: T) -> T:
        """Run one stage; on an unexpected error log it and use ``fallback``."""
        try:
            return func(text)
        except Exception:
            Log.exception(f"Validation stage '{name}' failed, skipping it")
            return fallback
