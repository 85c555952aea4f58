"""Builds the PageIndex section tree from cleaned Markdown headings."""

import re

from docforensics.indexing.models import (
    NodeMetadata,
    NodeType,
    PageIndexTree,
    TreeMetadata,
    TreeNode,
)
from docforensics.validation.page_elements import filter_repeated_lines

# Rough number of Markdown lines per printed page.
LINES_PER_PAGE = 50

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")


def _node_type(level: int) -> NodeType:
    if level == 1:
        return "section"
    if level == 2:
        return "subsection"
    return "paragraph"


def build_tree(
    markdown: str,
    case_number: str | None = None,
    court: str | None = None,
) -> PageIndexTree:
    """Nest every heading under the nearest preceding heading of a smaller level.

    Non-heading lines are appended to the content of the most recent node
    (the root before the first heading).
    """
    lines = filter_repeated_lines(markdown.split("\n"))
    root = TreeNode(
        id="root",
        title="Document",
        level=0,
        metadata=NodeMetadata(type="title", case_number=case_number),
    )
    stack: list[TreeNode] = [root]
    section_count = 0
    paragraph_count = 0
    max_depth = 0

    for index, line in enumerate(lines):
        match = _HEADING_RE.match(line)
        if match:
            level = len(match.group(1))
            while len(stack) > 1 and stack[-1].level >= level:
                stack.pop()
            node = TreeNode(
                id=f"section-{section_count}",
                title=match.group(2).strip(),
                level=level,
                metadata=NodeMetadata(
                    page=index // LINES_PER_PAGE,
                    type=_node_type(level),
                    case_number=case_number,
                ),
            )
            stack[-1].children.append(node)
            stack.append(node)
            section_count += 1
            max_depth = max(max_depth, level)
        elif line.strip():
            current = stack[-1]
            current.content = f"{current.content}\n{line}" if current.content else line
            paragraph_count += 1

    return PageIndexTree(
        root=root,
        metadata=TreeMetadata(
            case_number=case_number,
            court=court,
            total_sections=section_count,
            total_paragraphs=paragraph_count,
            depth=max_depth,
        ),
    )
