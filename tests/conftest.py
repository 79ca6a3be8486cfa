"""Shared fixtures and invariant checks for the BinaryTrees test suite."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Allow running the suite from a checkout without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from BinaryTrees import BinaryTree, NIL, VALUE, PARENT, LEFT, RIGHT
from BinaryTrees.TreeUtils import collect_levelorder


def as_array(values):
    """int64 array as expected by the compiled builders."""
    return np.array(values, dtype=np.int64)


def assert_links(tree, root):
    """Every child's parent link points back at its parent; the root has none."""
    if root == NIL:
        return
    assert tree[root, PARENT] == NIL
    for node in collect_levelorder(tree, root):
        for side in (LEFT, RIGHT):
            child = tree[node, side]
            if child != NIL:
                assert tree[child, PARENT] == node, (
                    f"node {child} points at parent {tree[child, PARENT]}, expected {node}"
                )


def shape(tree, root):
    """Nested (value, left, right) tuples, for comparing whole trees."""
    if root == NIL:
        return None
    return (
        int(tree[root, VALUE]),
        shape(tree, int(tree[root, LEFT])),
        shape(tree, int(tree[root, RIGHT])),
    )


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def sample_tree():
    """Perfect tree of height 2, also a valid BST:

              98
           /      \\
         12        402
        /  \\      /   \\
       6    56  256   512
    """
    bt = BinaryTree(16)
    root = bt.insert_root(98)
    left = bt.insert_left(root, 12)
    right = bt.insert_right(root, 402)
    bt.insert_left(left, 6)
    bt.insert_right(left, 56)
    bt.insert_left(right, 256)
    bt.insert_right(right, 512)
    return bt
