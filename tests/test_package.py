"""Package-level tests: exports and JIT warmup."""

import logging

import pytest

import BinaryTrees
from BinaryTrees import AVLTree, BST, BinaryTree, MaxHeap, MAX_CAPACITY, AVLTreeArray, HeapArray


class TestPackage:

    def test_exports(self):
        for name in BinaryTrees.__all__:
            assert hasattr(BinaryTrees, name), name

    @pytest.mark.parametrize("structure", [BinaryTree, BST, AVLTree, MaxHeap])
    def test_capacity_limit(self, structure):
        with pytest.raises(ValueError):
            structure(MAX_CAPACITY + 1)

    def test_module_warmups(self):
        assert AVLTreeArray.warmup(16)
        assert HeapArray.warmup(16)

    def test_warmup_all_logs_timing(self, caplog):
        with caplog.at_level(logging.INFO, logger="BinaryTrees"):
            elapsed = BinaryTrees.warmup_all(16)
        assert elapsed >= 0
        assert "JIT warmup finished" in caplog.text
