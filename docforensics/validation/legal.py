"""Best-effort extraction of legal metadata from cleaned Markdown."""

import re

from docforensics.validation.models import LegalMetadata
from docforensics.validation.patterns import is_table_separator

# "Expediente 2024-12345", "Exp. SLP-2024-001", "Case No. 2023-889"
_CASE_NUMBER_RE = re.compile(
    r"(?:Expediente|Exp\.?|Case(?:\s+No\.?)?|File(?:\s+No\.?)?|No\.)?\s*"
    r"([A-Z]{0,3}-?\d{4}-?\d+)",
    re.IGNORECASE,
)
_COURT_RE = re.compile(
    r"(?:Juzgado|Tribunal|Court)\s+(?:de\s+|of\s+)?"
    r"([A-Za-zÁÉÍÓÚÑÜáéíóúñü ]+?)"
    r"(?:\s+(?:del|de|en|of|in)\s+|$)",
    re.IGNORECASE | re.MULTILINE,
)
_ARTICLE_RE = re.compile(r"(?:Artículo|Article|Art\.?)\s+\d+", re.IGNORECASE)


def extract_legal_metadata(markdown: str) -> LegalMetadata:
    case_match = _CASE_NUMBER_RE.search(markdown)
    court_match = _COURT_RE.search(markdown)
    court = court_match.group(1).strip() if court_match else None
    return LegalMetadata(
        case_number=case_match.group(1) if case_match else None,
        court=court or None,
        article_count=len(_ARTICLE_RE.findall(markdown)),
        table_count=sum(1 for line in markdown.split("\n") if is_table_separator(line)),
    )
