from dataclasses import asdict, dataclass, field
from typing import Any, Literal

NodeType = Literal["title", "section", "subsection", "paragraph"]


@dataclass
class NodeMetadata:
    page: int | None = None
    type: NodeType = "paragraph"
    case_number: str | None = None


@dataclass
class TreeNode:
    id: str
    title: str
    level: int
    content: str = ""
    children: list["TreeNode"] = field(default_factory=list)
    metadata: NodeMetadata = field(default_factory=NodeMetadata)


@dataclass
class TreeMetadata:
    case_number: str | None = None
    court: str | None = None
    total_sections: int = 0
    total_paragraphs: int = 0
    depth: int = 0


@dataclass
class PageIndexTree:
    """Section hierarchy of a document; ``root`` is a synthetic level-0 node."""

    root: TreeNode
    metadata: TreeMetadata

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TreeSummary:
    summary: str
    toc: str
