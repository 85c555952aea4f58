"""Block-level repair of Markdown tables produced by OCR."""

from docforensics.validation.patterns import is_table_separator

DEMOTED_CELL_JOINER = " – "


def _is_table_line(line: str) -> bool:
    return "|" in line and len(line.strip()) > 1


def _cells(row: str) -> list[str]:
    return [cell.strip() for cell in row.split("|") if cell.strip()]


def _separator_row(cell_count: int) -> str:
    return "|" + " --- |" * cell_count


def repair_tables(markdown: str) -> tuple[str, list[int]]:
    """Repair or demote table blocks that lack a separator row.

    A block is a run of consecutive lines containing a pipe. Blocks with a
    separator row are kept verbatim. Without one, a block whose first row has
    two or more cells gets ``| --- | ... |`` inserted after that row, and a
    single-cell block becomes plain text.

    Returns:
        The repaired Markdown and the 1-based starting line of every block
        that was changed. Running the function on its own output changes
        nothing.
    """
    lines = markdown.split("\n")
    result: list[str] = []
    repaired_at: list[int] = []

    i = 0
    while i < len(lines):
        if not _is_table_line(lines[i]):
            result.append(lines[i])
            i += 1
            continue

        start = i
        block: list[str] = []
        while i < len(lines) and _is_table_line(lines[i]):
            block.append(lines[i])
            i += 1

        has_separator = any(is_table_separator(row) for row in block)
        if has_separator:
            result.extend(block)
            continue

        cell_count = len(_cells(block[0]))
        if cell_count >= 2:
            result.append(block[0])
            result.append(_separator_row(cell_count))
            result.extend(block[1:])
        else:
            result.extend(DEMOTED_CELL_JOINER.join(_cells(row)) for row in block)
        repaired_at.append(start + 1)

    return "\n".join(result), repaired_at
