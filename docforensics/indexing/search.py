from docforensics.indexing.models import PageIndexTree, TreeNode


def search_tree(tree: PageIndexTree, query: str, max_results: int = 5) -> list[TreeNode]:
    """Pre-order search on title or content, case-insensitive substring match.

    Stops once ``max_results`` nodes are found. A matching node's children are
    not visited: the first match on a branch wins.
    """
    results: list[TreeNode] = []
    if max_results <= 0:
        return results
    needle = query.lower()

    def visit(node: TreeNode) -> None:
        if len(results) >= max_results:
            return
        if needle in node.title.lower() or needle in node.content.lower():
            results.append(node)
            return
        for child in node.children:
            visit(child)
            if len(results) >= max_results:
                return

    visit(tree.root)
    return results
