from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar, Literal

Severity = Literal["low", "medium", "high"]
ValidationStatus = Literal["OK", "ALERT", "FAILED"]


@dataclass(frozen=True)
class MalformedTablesFixed:
    """Table blocks that needed a synthesized separator or were demoted to text."""

    type: ClassVar[str] = "malformed_tables_fixed"
    severity: ClassVar[Severity] = "medium"
    action_taken: ClassVar[str] = "Separator rows synthesized or blocks converted to text"

    count: int
    lines: tuple[int, ...] = ()

    @property
    def description(self) -> str:
        return f"{self.count} malformed table(s) repaired"

    @property
    def location(self) -> str | None:
        if not self.lines:
            return None
        return "lines " + ", ".join(str(n) for n in self.lines)


@dataclass(frozen=True)
class PageElementsRemoved:
    """Page numbers, running headers/footers and separators deleted from the text."""

    type: ClassVar[str] = "page_elements_removed"
    severity: ClassVar[Severity] = "low"
    action_taken: ClassVar[str] = "Filtered automatically"
    location: ClassVar[str | None] = None

    count: int
    categories: dict[str, int] = field(default_factory=dict)

    @property
    def description(self) -> str:
        return f"{self.count} page number(s) and repeated header/footer line(s) removed"


@dataclass(frozen=True)
class MissingCaseNumber:
    """No case/file identifier was found in the document."""

    type: ClassVar[str] = "missing_case_number"
    severity: ClassVar[Severity] = "low"
    action_taken: ClassVar[str] = "Requires manual review"
    location: ClassVar[str | None] = None

    @property
    def description(self) -> str:
        return "No case number detected"


@dataclass(frozen=True)
class ShortDocument:
    """The cleaned text is too short to be a successful OCR result."""

    type: ClassVar[str] = "short_document"
    severity: ClassVar[Severity] = "high"
    action_taken: ClassVar[str] = "Verify that OCR succeeded"
    location: ClassVar[str | None] = None

    length: int
    minimum: int = 100

    @property
    def description(self) -> str:
        return f"Document is very short ({self.length} < {self.minimum} characters)"


Anomaly = MalformedTablesFixed | PageElementsRemoved | MissingCaseNumber | ShortDocument


def anomaly_to_dict(anomaly: Anomaly) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "type": anomaly.type,
        "severity": anomaly.severity,
        "description": anomaly.description,
        "action_taken": anomaly.action_taken,
    }
    if anomaly.location is not None:
        payload["location"] = anomaly.location
    details = asdict(anomaly)
    if details:
        payload["details"] = details
    return payload


@dataclass(frozen=True)
class LegalMetadata:
    """Best-effort domain fields found in the cleaned Markdown."""

    case_number: str | None = None
    court: str | None = None
    article_count: int = 0
    table_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ValidationResult:
    cleaned_markdown: str
    anomalies: list[Anomaly]
    hash_original: str
    hash_markdown: str
    legal_elements: LegalMetadata
    validation_status: ValidationStatus

    @property
    def structure_preserved(self) -> bool:
        return self.legal_elements.article_count > 0

    def anomalies_payload(self) -> list[dict[str, Any]]:
        return [anomaly_to_dict(a) for a in self.anomalies]


@dataclass(frozen=True)
class Certificate:
    """Hash-and-metadata record of what was processed and how it validated."""

    hash_original: str
    hash_markdown: str
    integrity_hash: str
    signing_key_id: str
    vlm_used: str
    algorithm_version: str
    timestamp: str
    validation_status: ValidationStatus
    integrity_verified: bool
    anomalies_count: int
    structure_preserved: bool
    legal_elements: LegalMetadata

    def summary(self) -> dict[str, str]:
        """Fields exposed in the job result payload."""
        return {
            "hash_original": self.hash_original,
            "hash_markdown": self.hash_markdown,
            "integrity_hash": self.integrity_hash,
            "timestamp": self.timestamp,
            "status": self.validation_status,
        }
