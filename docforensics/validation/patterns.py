import re

# A Markdown table separator row: only pipes, dashes, colons and whitespace,
# with at least one interior pipe, e.g. "|---|:---:|".
TABLE_SEPARATOR_RE = re.compile(r"^\|?\s*[-:\s]+(\|\s*[-:\s]+)+\|?\s*$")
HEADING_RE = re.compile(r"^#{1,6}\s+")


def is_table_separator(line: str) -> bool:
    return TABLE_SEPARATOR_RE.match(line.strip()) is not None


def is_heading(line: str) -> bool:
    return HEADING_RE.match(line.strip()) is not None
