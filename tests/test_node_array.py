"""Tests for the node arena: layout, allocation and release."""

import numpy as np

from BinaryTrees.NodeArray import (
    NIL, VALUE, PARENT, LEFT, RIGHT, HEIGHT, NODE_FIELDS,
    new_arena, new_allocator, new_free_list,
    alloc_node, release_node, replace_child, delete_subtree,
    binary_tree_is_leaf, binary_tree_is_root, check_index, is_live_node,
)


class TestArenaLayout:
    """New arenas and the NIL sentinel."""

    def test_arena_shape(self):
        tree = new_arena(8)
        assert tree.shape == (9, NODE_FIELDS)
        assert tree.dtype == np.int64

    def test_nil_row_has_height_minus_one(self):
        tree = new_arena(4)
        assert tree[NIL, HEIGHT] == -1
        assert tree[NIL, LEFT] == NIL
        assert tree[NIL, RIGHT] == NIL

    def test_check_index(self):
        tree = new_arena(4)
        assert not check_index(tree, NIL)
        assert check_index(tree, 1)
        assert check_index(tree, 4)
        assert not check_index(tree, 5)
        assert not check_index(tree, -1)


class TestAllocation:
    """Row allocation, exhaustion and reuse."""

    def setup_method(self):
        self.tree = new_arena(3)
        self.free_list = new_free_list(3)
        self.alloc = new_allocator()

    def test_alloc_fills_row(self):
        node = alloc_node(self.tree, self.free_list, self.alloc, NIL, 42)
        assert node == 1
        assert self.tree[node, VALUE] == 42
        assert self.tree[node, PARENT] == NIL
        assert self.tree[node, LEFT] == NIL
        assert self.tree[node, RIGHT] == NIL
        assert self.tree[node, HEIGHT] == 0

    def test_alloc_negative_value(self):
        node = alloc_node(self.tree, self.free_list, self.alloc, NIL, -7)
        assert self.tree[node, VALUE] == -7

    def test_full_arena_returns_nil(self):
        for value in range(3):
            assert alloc_node(self.tree, self.free_list, self.alloc, NIL, value) != NIL
        assert alloc_node(self.tree, self.free_list, self.alloc, NIL, 99) == NIL

    def test_released_row_is_reused(self):
        first = alloc_node(self.tree, self.free_list, self.alloc, NIL, 1)
        alloc_node(self.tree, self.free_list, self.alloc, first, 2)
        release_node(self.tree, self.free_list, self.alloc, first)

        assert self.tree[first, VALUE] == 0
        assert alloc_node(self.tree, self.free_list, self.alloc, NIL, 3) == first
        assert self.tree[first, VALUE] == 3


class TestLinking:
    """Child replacement and subtree deletion."""

    def setup_method(self):
        self.tree = new_arena(8)
        self.free_list = new_free_list(8)
        self.alloc = new_allocator()

    def _node(self, parent, value, side=None):
        node = alloc_node(self.tree, self.free_list, self.alloc, parent, value)
        if side is not None:
            self.tree[parent, side] = node
        return node

    def test_replace_child_updates_both_links(self):
        root = self._node(NIL, 10)
        old = self._node(root, 5, LEFT)
        new = self._node(NIL, 7)

        replace_child(self.tree, root, old, new)

        assert self.tree[root, LEFT] == new
        assert self.tree[new, PARENT] == root

    def test_replace_child_without_parent(self):
        node = self._node(NIL, 7)
        replace_child(self.tree, NIL, NIL, node)
        assert self.tree[node, PARENT] == NIL
        assert self.tree[NIL, LEFT] == NIL

    def test_delete_subtree(self):
        root = self._node(NIL, 10)
        left = self._node(root, 5, LEFT)
        self._node(left, 2, LEFT)
        self._node(left, 7, RIGHT)
        right = self._node(root, 15, RIGHT)

        released = delete_subtree(self.tree, self.free_list, self.alloc, left)

        assert released == 3
        assert self.tree[root, LEFT] == NIL
        assert self.tree[root, RIGHT] == right
        assert not binary_tree_is_leaf(self.tree, root)
        assert binary_tree_is_leaf(self.tree, right)

    def test_delete_nil(self):
        assert delete_subtree(self.tree, self.free_list, self.alloc, NIL) == 0

    def test_root_and_leaf_predicates(self):
        root = self._node(NIL, 10)
        child = self._node(root, 5, LEFT)

        assert binary_tree_is_root(self.tree, root)
        assert not binary_tree_is_root(self.tree, child)
        assert binary_tree_is_leaf(self.tree, child)
        assert not binary_tree_is_leaf(self.tree, root)
        assert not binary_tree_is_leaf(self.tree, NIL)
        assert not binary_tree_is_root(self.tree, NIL)

    def test_live_nodes(self):
        root = self._node(NIL, 10)
        left = self._node(root, 5, LEFT)
        self._node(left, 2, LEFT)

        assert is_live_node(self.tree, root, root)
        assert is_live_node(self.tree, root, left)
        assert not is_live_node(self.tree, root, NIL)
        assert not is_live_node(self.tree, root, 99)

        delete_subtree(self.tree, self.free_list, self.alloc, left)
        assert not is_live_node(self.tree, root, left)
