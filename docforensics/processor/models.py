import json
from dataclasses import dataclass, field
from typing import Any

from docforensics.processor.exceptions import InvalidRangeError


@dataclass(frozen=True)
class ExtractionRange:
    """A user-named page range extracted independently of the main pass."""

    name: str
    from_page: int
    to_page: int

    def validate(self) -> None:
        if self.from_page < 1:
            raise InvalidRangeError(f"Range '{self.name}': 'from' must be >= 1")
        if self.to_page < self.from_page:
            raise InvalidRangeError(f"Range '{self.name}': 'to' must be >= 'from'")


@dataclass(frozen=True)
class ExtractionResult:
    name: str
    from_page: int
    to_page: int
    markdown: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "from": self.from_page,
            "to": self.to_page,
            "markdown": self.markdown,
        }


@dataclass(frozen=True)
class JobRequest:
    """Input of one processing job: direct bytes or a chunked-upload reference."""

    filename: str
    file_bytes: bytes | None = None
    upload_id: str | None = None
    ranges: tuple[ExtractionRange, ...] = field(default_factory=tuple)


def parse_ranges(raw: str | None) -> tuple[ExtractionRange, ...]:
    """Parse the JSON list of ``{from, to, name}`` objects sent with a job.

    Raises:
        InvalidRangeError: if the payload is not a list of valid ranges.
    """
    if raw is None or not raw.strip():
        return ()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidRangeError(f"Ranges are not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise InvalidRangeError("Ranges must be a JSON list")

    ranges: list[ExtractionRange] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise InvalidRangeError(f"Range at index {i} must be an object")
        from_page = item.get("from")
        to_page = item.get("to")
        name = item.get("name") or f"range-{i + 1}"
        if isinstance(from_page, bool) or not isinstance(from_page, int):
            raise InvalidRangeError(f"Range at index {i}: 'from' must be an integer")
        if isinstance(to_page, bool) or not isinstance(to_page, int):
            raise InvalidRangeError(f"Range at index {i}: 'to' must be an integer")
        if not isinstance(name, str):
            raise InvalidRangeError(f"Range at index {i}: 'name' must be a string")
        extraction_range = ExtractionRange(name=name, from_page=from_page, to_page=to_page)
        extraction_range.validate()
        ranges.append(extraction_range)
    return tuple(ranges)
