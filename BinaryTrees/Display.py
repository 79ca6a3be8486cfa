"""
ASCII rendering of a tree stored in a node arena.

Pure Python (reads the arena with ordinary numpy indexing), so it works on
the `tree` array of any structure in this package:

           .-------(098)-------.
      .--(012)--.         .--(402)--.
    (006)     (056)     (256)     (512)
"""

import logging
import sys
from typing import Dict, List, Optional, TextIO

import numpy as np

from .NodeArray import NIL, VALUE, PARENT, LEFT, RIGHT
from .TreeUtils import binary_tree_height, collect_preorder, collect_postorder

logger = logging.getLogger(__name__)


def _label(value: int) -> str:
    return "(%03d)" % value


def _paint(row: List[str], start: int, text: str) -> None:
    """Write `text` into `row` at column `start`, padding the row with spaces."""
    end = start + len(text)
    if end > len(row):
        row.extend(" " * (end - len(row)))
    row[start:end] = text


def _layout(tree: np.ndarray, root: int, nodes: np.ndarray, labels: Dict[int, str]):
    """Column extent and level of every node below `root`.

    Widths are summed children first by walking the pre-order backwards, then
    offsets and levels are handed down parents first.

    Returns:
        (widths, offsets, depths), arrays indexed by row. ``widths[NIL]`` is 0.
    """
    widths = np.zeros(tree.shape[0], dtype=np.int64)
    offsets = np.zeros(tree.shape[0], dtype=np.int64)
    depths = np.zeros(tree.shape[0], dtype=np.int64)

    for node in nodes[::-1]:
        node = int(node)
        widths[node] = (
            widths[tree[node, LEFT]] + len(labels[node]) + widths[tree[node, RIGHT]]
        )

    offsets[root] = 0
    depths[root] = 0
    for node in nodes:
        node = int(node)
        left, right = int(tree[node, LEFT]), int(tree[node, RIGHT])
        if left != NIL:
            offsets[left] = offsets[node]
            depths[left] = depths[node] + 1
        if right != NIL:
            offsets[right] = offsets[node] + widths[left] + len(labels[node])
            depths[right] = depths[node] + 1

    return widths, offsets, depths


def format_tree(tree: np.ndarray, root: int) -> str:
    """Render the tree rooted at `root` as text, one line per level.

    Each label sits between the drawings of its two subtrees. The branch to
    a node runs along the line above it, from the node's centre to the edge
    of its parent's label; labels are written after the branches beneath
    them, so a parent's label covers the part of a branch that runs under it.

    Args:
        tree: Node arena of any structure (``avl.tree``, ``heap.tree``...).
        root: Index of the node to render as the top of the drawing.

    Returns:
        The drawing with trailing spaces stripped, empty for NIL.
    """
    if root == NIL:
        return ""

    nodes = collect_preorder(tree, root)
    levels = binary_tree_height(tree, root) + 1
    logger.debug("Rendering %d nodes on %d levels", nodes.size, levels)

    labels = {int(node): _label(int(tree[node, VALUE])) for node in nodes}
    widths, offsets, depths = _layout(tree, root, nodes, labels)

    rows: List[List[str]] = [[] for _ in range(levels)]
    for node in collect_postorder(tree, root):
        node = int(node)
        label = labels[node]
        width = len(label)
        offset = int(offsets[node])
        left = int(widths[tree[node, LEFT]])
        right = int(widths[tree[node, RIGHT]])
        depth = int(depths[node])

        _paint(rows[depth], offset + left, label)
        if node == root:
            continue

        parent = int(tree[node, PARENT])
        if int(tree[parent, LEFT]) == node:
            start, length = offset + left + width // 2, width + right
        else:
            start, length = offset - width // 2, left + width
        end = start + length
        start = max(start, 0)
        if end > start:
            _paint(rows[depth - 1], start, "-" * (end - start))
        _paint(rows[depth - 1], offset + left + width // 2, ".")

    return "\n".join("".join(row).rstrip() for row in rows)


def print_tree(tree: np.ndarray, root: int, file: Optional[TextIO] = None) -> None:
    """Print the drawing produced by :func:`format_tree`."""
    text = format_tree(tree, root)
    if text:
        print(text, file=file or sys.stdout)
