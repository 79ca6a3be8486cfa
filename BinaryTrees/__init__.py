"""BinaryTrees - binary tree algorithms on numba-compiled node arenas.

Every structure keeps its nodes as rows of an int64 numpy array
([value, parent, left, right, height], row 0 = NIL) and its algorithms are
numba-compiled:

    BinaryTree   plain tree built node by node
    BST          binary search tree
    AVLTree      self-balancing binary search tree
    MaxHeap      complete binary tree in max-heap order

The structural utilities in TreeUtils take ``(tree, index)`` and work on
the arena of any of them, e.g. ``binary_tree_is_avl(avl.tree, avl.root)``.
"""

import logging
import time

__version__ = "0.1.0"

from .config import MAX_CAPACITY
from .NodeArray import NIL, VALUE, PARENT, LEFT, RIGHT, HEIGHT
from .TreeUtils import (
    binary_tree_preorder,
    binary_tree_inorder,
    binary_tree_postorder,
    binary_tree_levelorder,
    binary_tree_height,
    binary_tree_depth,
    binary_tree_size,
    binary_tree_leaves,
    binary_tree_nodes,
    binary_tree_balance,
    binary_tree_is_full,
    binary_tree_is_perfect,
    binary_tree_is_complete,
    binary_tree_sibling,
    binary_tree_uncle,
    binary_trees_ancestor,
    binary_tree_rotate_left,
    binary_tree_rotate_right,
    binary_tree_is_bst,
    binary_tree_is_avl,
    binary_tree_is_heap,
)
from .NodeArray import binary_tree_is_leaf, binary_tree_is_root
from .BinaryTreeArray import BinaryTree
from .BSTArray import BST, array_to_bst
from .AVLTreeArray import AVLTree, array_to_avl, sorted_array_to_avl, fill_avl, remove_avl
from .HeapArray import MaxHeap, EmptyHeapError, array_to_heap, heap_to_sorted_array
from .Display import format_tree, print_tree
from . import AVLTreeArray, HeapArray

logger = logging.getLogger(__name__)


def warmup_all(size: int = 100) -> float:
    """Compile the AVL and heap code paths ahead of first use.

    Returns:
        Seconds spent compiling.
    """
    start = time.perf_counter()
    AVLTreeArray.warmup(size)
    HeapArray.warmup(size)
    elapsed = time.perf_counter() - start
    logger.info("JIT warmup finished in %.2fs", elapsed)
    return elapsed


__all__ = [
    "__version__",
    "MAX_CAPACITY",
    "NIL",
    "VALUE",
    "PARENT",
    "LEFT",
    "RIGHT",
    "HEIGHT",
    # Structures
    "BinaryTree",
    "BST",
    "AVLTree",
    "MaxHeap",
    "EmptyHeapError",
    # Builders
    "array_to_bst",
    "array_to_avl",
    "sorted_array_to_avl",
    "fill_avl",
    "remove_avl",
    "array_to_heap",
    "heap_to_sorted_array",
    # Utilities
    "binary_tree_is_leaf",
    "binary_tree_is_root",
    "binary_tree_preorder",
    "binary_tree_inorder",
    "binary_tree_postorder",
    "binary_tree_levelorder",
    "binary_tree_height",
    "binary_tree_depth",
    "binary_tree_size",
    "binary_tree_leaves",
    "binary_tree_nodes",
    "binary_tree_balance",
    "binary_tree_is_full",
    "binary_tree_is_perfect",
    "binary_tree_is_complete",
    "binary_tree_sibling",
    "binary_tree_uncle",
    "binary_trees_ancestor",
    "binary_tree_rotate_left",
    "binary_tree_rotate_right",
    "binary_tree_is_bst",
    "binary_tree_is_avl",
    "binary_tree_is_heap",
    # Display
    "format_tree",
    "print_tree",
    "warmup_all",
]
