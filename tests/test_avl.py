"""Tests for AVL insertion, deletion and rebalancing."""

import numpy as np
import pytest

from BinaryTrees import (
    AVLTree, NIL, HEIGHT,
    array_to_avl, sorted_array_to_avl, fill_avl, remove_avl,
    binary_tree_height, binary_tree_is_avl,
)
from BinaryTrees.TreeUtils import collect_preorder, subtree_heights

from conftest import as_array, assert_links, shape


def assert_avl(avl):
    """Balance, ordering, parent links and cached heights all hold."""
    assert avl.is_valid()
    assert_links(avl.tree, avl.root)

    values = avl.inorder()
    assert np.all(np.diff(values) > 0)
    assert values.size == len(avl)

    heights = subtree_heights(avl.tree, avl.root)
    for node in collect_preorder(avl.tree, avl.root):
        assert avl.tree[node, HEIGHT] == heights[node]
    assert avl.height == binary_tree_height(avl.tree, avl.root)


def build(values, capacity=64):
    avl = AVLTree(capacity)
    for value in values:
        avl.insert(value)
    return avl


class TestInsertScenarios:

    def test_no_rotation_needed(self):
        avl = build([5, 3, 8])
        assert shape(avl.tree, avl.root) == (5, (3, None, None), (8, None, None))
        assert_avl(avl)

    def test_right_right_single_left_rotation(self):
        avl = build([1, 2, 3])
        assert shape(avl.tree, avl.root) == (2, (1, None, None), (3, None, None))
        assert_avl(avl)

    def test_left_left_single_right_rotation(self):
        avl = build([3, 2, 1])
        assert shape(avl.tree, avl.root) == (2, (1, None, None), (3, None, None))
        assert_avl(avl)

    def test_left_right_double_rotation(self):
        avl = build([3, 1, 2])
        assert shape(avl.tree, avl.root) == (2, (1, None, None), (3, None, None))
        assert_avl(avl)

    def test_right_left_double_rotation(self):
        avl = build([1, 3, 2])
        assert shape(avl.tree, avl.root) == (2, (1, None, None), (3, None, None))
        assert_avl(avl)

    def test_rotation_below_root(self):
        avl = build([50, 25, 75, 100, 125])
        assert shape(avl.tree, avl.root) == (
            50,
            (25, None, None),
            (100, (75, None, None), (125, None, None)),
        )
        assert_avl(avl)

    def test_rotation_keeps_node_identity(self):
        avl = AVLTree(8)
        first = avl.insert(1)
        avl.insert(2)
        third = avl.insert(3)
        assert avl.get_value(first) == 1
        assert avl.get_value(third) == 3
        assert avl.get_parent(first) == avl.root

    def test_ascending_run_stays_logarithmic(self):
        avl = build(range(1, 128), capacity=128)
        assert avl.height == 6
        assert_avl(avl)


class TestInsertFailures:

    def test_duplicate_is_idempotent(self):
        avl = build([40, 20, 60, 10, 30])
        before = shape(avl.tree, avl.root)
        root = avl.root

        assert avl.insert(30) == NIL
        assert shape(avl.tree, avl.root) == before
        assert avl.root == root
        assert len(avl) == 5

    def test_full_arena(self):
        avl = build([1, 2, 3], capacity=3)
        before = shape(avl.tree, avl.root)

        assert avl.insert(4) == NIL
        assert shape(avl.tree, avl.root) == before
        assert len(avl) == 3

        avl.remove(1)
        assert avl.insert(4) != NIL
        assert list(avl.inorder()) == [2, 3, 4]
        assert_avl(avl)

    @pytest.mark.parametrize("capacity", [0, -5])
    def test_invalid_capacity(self, capacity):
        with pytest.raises(ValueError):
            AVLTree(capacity)


class TestRemoveScenarios:

    def test_remove_leaf_triggers_single_rotation(self):
        avl = build([2, 1, 3, 4])
        assert avl.remove(1) == 1
        assert shape(avl.tree, avl.root) == (3, (2, None, None), (4, None, None))
        assert_avl(avl)

    def test_remove_with_balanced_heavy_child(self):
        avl = build([2, 1, 4, 3, 5])
        assert avl.remove(1) == 1
        assert shape(avl.tree, avl.root) == (4, (2, None, (3, None, None)), (5, None, None))
        assert_avl(avl)

    def test_remove_triggers_double_rotation(self):
        avl = build([2, 1, 4, 3])
        assert avl.remove(1) == 1
        assert shape(avl.tree, avl.root) == (3, (2, None, None), (4, None, None))
        assert_avl(avl)

    def test_remove_two_children(self):
        avl = build([5, 3, 8, 7, 9])
        assert avl.remove(5) == 1
        assert avl.get_value(avl.root) == 7
        assert list(avl.inorder()) == [3, 7, 8, 9]
        assert_avl(avl)

    def test_remove_rebalances_several_ancestors(self):
        # Minimal AVL tree of height 4: removing its shallowest leaf
        # unbalances two levels.
        avl = build([8, 5, 11, 3, 7, 10, 12, 2, 4, 6, 9, 1])
        assert avl.height == 4
        assert avl.remove(12) == 1
        assert_avl(avl)
        assert avl.height == 3

    def test_remove_absent_is_idempotent(self):
        avl = build([5, 3, 8])
        before = shape(avl.tree, avl.root)
        assert avl.remove(42) == 0
        assert shape(avl.tree, avl.root) == before
        assert len(avl) == 3

    def test_remove_from_empty(self):
        avl = AVLTree(4)
        assert avl.remove(1) == 0
        assert avl.root == NIL

    def test_remove_all(self):
        values = [8, 4, 12, 2, 6, 10, 14, 1, 3, 5, 7]
        avl = build(values)
        for value in values:
            assert avl.remove(value) == 1
            if len(avl):
                assert_avl(avl)
        assert avl.root == NIL
        assert avl.height == -1


class TestRandomSequences:

    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    def test_mixed_inserts_and_removes(self, seed):
        rng = np.random.default_rng(seed)
        avl = AVLTree(512)
        expected = set()

        for _ in range(600):
            value = int(rng.integers(0, 300))
            if rng.random() < 0.6:
                node = avl.insert(value)
                assert (node != NIL) == (value not in expected)
                expected.add(value)
            else:
                removed = avl.remove(value)
                assert removed == (1 if value in expected else 0)
                expected.discard(value)

            if expected:
                assert_avl(avl)

        assert list(avl.inorder()) == sorted(expected)

    def test_batch_helpers(self, rng):
        values = rng.permutation(200).astype(np.int64)
        avl = AVLTree(200)
        assert fill_avl(avl, values) == 200
        assert fill_avl(avl, values[:10]) == 0
        assert len(avl) == 200
        assert_avl(avl)

        assert remove_avl(avl, values[:150]) == 150
        assert remove_avl(avl, values[:150]) == 0
        assert len(avl) == 50
        assert list(avl.inorder()) == sorted(values[150:].tolist())
        assert_avl(avl)


class TestBuilders:

    def test_array_to_avl(self):
        avl = array_to_avl(as_array([98, 402, 12, 46, 128, 256, 512, 50]))
        assert binary_tree_is_avl(avl.tree, avl.root)
        assert list(avl.inorder()) == [12, 46, 50, 98, 128, 256, 402, 512]

    def test_array_to_avl_skips_duplicates(self):
        avl = array_to_avl(as_array([5, 5, 3, 3]))
        assert len(avl) == 2

    def test_sorted_array_to_avl(self):
        avl = sorted_array_to_avl(as_array([1, 2, 3, 4, 5, 6, 7]))
        assert shape(avl.tree, avl.root) == (
            4,
            (2, (1, None, None), (3, None, None)),
            (6, (5, None, None), (7, None, None)),
        )
        assert len(avl) == 7
        assert_avl(avl)

    @pytest.mark.parametrize("size", [1, 2, 10, 33])
    def test_sorted_array_to_avl_sizes(self, size):
        avl = sorted_array_to_avl(as_array(range(0, 3 * size, 3)))
        assert len(avl) == size
        assert_avl(avl)

    def test_sorted_array_to_avl_rejects_unsorted(self):
        with pytest.raises(ValueError):
            sorted_array_to_avl(as_array([1, 3, 2]))
        with pytest.raises(ValueError):
            sorted_array_to_avl(as_array([1, 1, 2]))

    def test_load_sorted_rejects_unsorted(self):
        avl = AVLTree(4)
        with pytest.raises(ValueError):
            avl.load_sorted(as_array([3, 1, 2]))
        assert avl.root == NIL
        assert len(avl) == 0

    def test_load_sorted_needs_empty_tree(self):
        avl = AVLTree(8)
        assert avl.load_sorted(as_array([1, 2, 3])) == 3
        assert avl.load_sorted(as_array([4, 5])) == 0
        assert list(avl.inorder()) == [1, 2, 3]
        assert_avl(avl)

    def test_sorted_tree_accepts_more_inserts(self):
        avl = sorted_array_to_avl(as_array([10, 20, 30]))
        assert avl.insert(40) == NIL  # capacity is the array size
        assert avl.remove(10) == 1
        assert avl.insert(40) != NIL
        assert_avl(avl)


class TestNavigation:

    def setup_method(self):
        self.avl = build([4, 2, 6, 1, 3, 5, 7])

    def test_min_max(self):
        assert self.avl.get_value(self.avl._min) == 1
        assert self.avl.get_value(self.avl._max) == 7
        assert AVLTree(1)._min == NIL
        assert AVLTree(1)._max == NIL

    def test_successor_predecessor(self):
        root = self.avl.root
        assert self.avl.get_value(self.avl.successor(root)) == 5
        assert self.avl.get_value(self.avl.predecessor(root)) == 3
        leaf = self.avl.search(7)
        assert self.avl.successor(leaf) == NIL
        assert self.avl.predecessor(leaf) == NIL

    def test_node_accessors(self):
        root = self.avl.root
        value, left, right, height = self.avl.root_info
        assert (value, height) == (4, 2)
        assert self.avl.get_left(root) == left
        assert self.avl.get_right(root) == right
        assert self.avl.get_height(left) == 1
        assert self.avl.get_height(NIL) == -1
        assert self.avl.get_node(999) == (0, 0, 0, 0)

    def test_update_value(self):
        assert self.avl.update_value(1, 10) == 1
        assert list(self.avl.inorder()) == [2, 3, 4, 5, 6, 7, 10]
        assert self.avl.update_value(99, 100) == 0
        assert self.avl.update_value(2, 3) == 0
        assert list(self.avl.inorder()) == [2, 3, 4, 5, 6, 7, 10]
        assert_avl(self.avl)
