"""JSON round-trip for PageIndex trees.

Deserialization checks every node and raises InvalidTreeFormatError instead
of returning a partially built tree.
"""

import json
from typing import Any, get_args

from docforensics.indexing.exceptions import InvalidTreeFormatError
from docforensics.indexing.models import (
    NodeMetadata,
    NodeType,
    PageIndexTree,
    TreeMetadata,
    TreeNode,
)

_NODE_TYPES = frozenset(get_args(NodeType))
# The root plus one level per Markdown heading depth.
MAX_NODE_DEPTH = 6


def serialize_tree(tree: PageIndexTree) -> str:
    return json.dumps(tree.to_dict(), ensure_ascii=False, indent=2)


def deserialize_tree(text: str) -> PageIndexTree:
    try:
        data = json.loads(text)
    except (TypeError, ValueError, RecursionError) as exc:
        raise InvalidTreeFormatError(f"Tree is not valid JSON: {exc}") from exc
    return tree_from_dict(data)


def tree_from_dict(data: Any) -> PageIndexTree:
    if not isinstance(data, dict):
        raise InvalidTreeFormatError("Tree must be a JSON object")
    for key in ("root", "metadata"):
        if key not in data:
            raise InvalidTreeFormatError(f"Missing required field: {key}")
    return PageIndexTree(
        root=_build_node(data["root"], "root", 0),
        metadata=_build_tree_metadata(data["metadata"]),
    )


def _build_node(raw: Any, path: str, depth: int) -> TreeNode:
    if depth > MAX_NODE_DEPTH:
        raise InvalidTreeFormatError(f"{path}: nesting deeper than {MAX_NODE_DEPTH} levels")
    if not isinstance(raw, dict):
        raise InvalidTreeFormatError(f"{path}: node must be an object")
    node_id = _require(raw, "id", str, path)
    title = _require(raw, "title", str, path)
    level = _require(raw, "level", int, path)
    content = _require(raw, "content", str, path)
    if not 0 <= level <= 6:
        raise InvalidTreeFormatError(f"{path}: 'level' must be between 0 and 6")
    children_raw = raw.get("children")
    if not isinstance(children_raw, list):
        raise InvalidTreeFormatError(f"{path}: 'children' must be a list")
    children = [
        _build_node(child, f"{path}.children[{i}]", depth + 1)
        for i, child in enumerate(children_raw)
    ]
    return TreeNode(
        id=node_id,
        title=title,
        level=level,
        content=content,
        children=children,
        metadata=_build_node_metadata(raw.get("metadata"), path),
    )


def _build_node_metadata(raw: Any, path: str) -> NodeMetadata:
    if not isinstance(raw, dict):
        raise InvalidTreeFormatError(f"{path}: 'metadata' must be an object")
    page = raw.get("page")
    if page is not None and (isinstance(page, bool) or not isinstance(page, int)):
        raise InvalidTreeFormatError(f"{path}: 'metadata.page' must be an integer or null")
    node_type = raw.get("type")
    if node_type not in _NODE_TYPES:
        raise InvalidTreeFormatError(
            f"{path}: 'metadata.type' must be one of {sorted(_NODE_TYPES)}, got {node_type!r}"
        )
    return NodeMetadata(
        page=page,
        type=node_type,
        case_number=_optional_str(raw, "case_number", path),
    )


def _build_tree_metadata(raw: Any) -> TreeMetadata:
    if not isinstance(raw, dict):
        raise InvalidTreeFormatError("'metadata' must be an object")
    return TreeMetadata(
        case_number=_optional_str(raw, "case_number", "metadata"),
        court=_optional_str(raw, "court", "metadata"),
        total_sections=_require(raw, "total_sections", int, "metadata"),
        total_paragraphs=_require(raw, "total_paragraphs", int, "metadata"),
        depth=_require(raw, "depth", int, "metadata"),
    )


def _require(raw: dict[str, Any], key: str, expected: type, path: str) -> Any:
    value = raw.get(key)
    # bool is an int subclass; a JSON true is never a valid level or count.
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise InvalidTreeFormatError(f"{path}: '{key}' must be {expected.__name__}")
    return value


def _optional_str(raw: dict[str, Any], key: str, path: str) -> str | None:
    value = raw.get(key)
    if value is not None and not isinstance(value, str):
        raise InvalidTreeFormatError(f"{path}: '{key}' must be a string or null")
    return value
