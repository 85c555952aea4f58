from docforensics.indexing.models import PageIndexTree, TreeNode, TreeSummary


def tree_summary(tree: PageIndexTree) -> TreeSummary:
    """Plain-text overview and an indented table of contents."""
    meta = tree.metadata
    summary = (
        f"Document: {tree.root.title}\n"
        f"Case number: {meta.case_number or 'Not detected'}\n"
        f"Court: {meta.court or 'Not detected'}\n"
        f"Sections: {meta.total_sections}\n"
        f"Depth: {meta.depth}\n"
    )
    toc_lines = ["# Table of Contents", ""]

    def walk(node: TreeNode, depth: int) -> None:
        if depth > 0:
            toc_lines.append(f"{'  ' * (depth - 1)}- {node.title}")
        for child in node.children:
            walk(child, depth + 1)

    walk(tree.root, 0)
    return TreeSummary(summary=summary, toc="\n".join(toc_lines) + "\n")
