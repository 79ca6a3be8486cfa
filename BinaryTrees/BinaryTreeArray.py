import numpy as np
from numba import njit, int64
from numba.experimental import jitclass
from typing import Tuple

from .config import MAX_CAPACITY
from .NodeArray import (
    NIL, VALUE, PARENT, LEFT, RIGHT,
    new_arena, new_allocator, new_free_list,
    alloc_node, delete_subtree, check_index, is_live_node,
)
from .TreeUtils import (
    binary_tree_height,
    binary_tree_rotate_left,
    binary_tree_rotate_right,
)



# ---------- JIT-Compiled Construction ----------
@njit
def binary_tree_insert_child(
    tree:      np.ndarray,
    free_list: np.ndarray,
    alloc:     np.ndarray,
    parent:    int,
    value:     int,
    side:      int

) -> int:

    """
    Insert a new node as the `side` (LEFT or RIGHT) child of `parent`.

    If `parent` already has a child on that side, the old child becomes the
    new node's child on the same side.

    :return: Index of the new node, NIL if the arena is full
    :rtype: int
    """

    node = alloc_node(tree, free_list, alloc, parent, value)
    if node == NIL:
        return NIL

    old = tree[parent, side]
    if old != NIL:
        tree[node, side]  = old
        tree[old, PARENT] = node

    tree[parent, side] = node
    return node



# --------- BinaryTree API ---------
spec = [
    ("capacity"      , int64),
    ("count"         , int64),
    ("tree"          , int64[:, :]),
    ("root"          , int64),
    ("_free_list"    , int64[:]),
    ("_alloc"        , int64[:]),
]

@jitclass(spec)
class BinaryTree:
    """
    Plain binary tree with no ordering, built node by node.

    Attributes:
        capacity (int64): Maximum number of live nodes.
        count (int64): Current number of live nodes.
        tree (int64[:, :]): Node arena [capacity + 1, 5]; row 0 is NIL.
        root (int64): Index of the root node (0 if empty).
    """

    def __init__(
        self,
        capacity: int

    ) -> None:

        if not (0 < capacity <= MAX_CAPACITY):
            raise ValueError("capacity out of range")

        self.capacity   = capacity
        self.count      = 0
        self.tree       = new_arena(capacity)
        self.root       = NIL
        self._free_list = new_free_list(capacity)
        self._alloc     = new_allocator()

    @property
    def height(self) -> int:
        return binary_tree_height(self.tree, self.root)

    def get_node(
        self,
        index: int

    ) -> Tuple[int, int, int, int]:

        """(value, parent, left, right) of a node; zeros for an invalid index."""

        if not check_index(self.tree, index):
            return 0, 0, 0, 0

        return (
            self.tree[index, VALUE],
            self.tree[index, PARENT],
            self.tree[index, LEFT],
            self.tree[index, RIGHT]
        )

    def insert_root(
        self,
        value: int

    ) -> int:
        """Creates the root of an empty tree. Returns its index, 0 if a root exists."""

        if self.root != NIL:
            return NIL

        node = alloc_node(self.tree, self._free_list, self._alloc, NIL, value)
        if node != NIL:
            self.root   = node
            self.count += 1

        return node

    def insert_left(
        self,
        parent: int,
        value:  int

    ) -> int:
        """Inserts value as the left child of parent; an existing left child moves under it.
        Returns the new node index, 0 if parent is not a node of this tree or the arena is full."""

        if not is_live_node(self.tree, self.root, parent):
            return NIL

        node = binary_tree_insert_child(
            self.tree, self._free_list, self._alloc, parent, value, LEFT
        )
        if node != NIL:
            self.count += 1

        return node

    def insert_right(
        self,
        parent: int,
        value:  int

    ) -> int:
        """Inserts value as the right child of parent; an existing right child moves under it.
        Returns the new node index, 0 if parent is not a node of this tree or the arena is full."""

        if not is_live_node(self.tree, self.root, parent):
            return NIL

        node = binary_tree_insert_child(
            self.tree, self._free_list, self._alloc, parent, value, RIGHT
        )
        if node != NIL:
            self.count += 1

        return node

    def delete(
        self,
        index: int

    ) -> int:
        """Deletes the subtree rooted at index. Returns the number of nodes released,
        0 if index is not a node of this tree (already deleted, never allocated)."""

        if not is_live_node(self.tree, self.root, index):
            return 0

        if index == self.root:
            self.root = NIL

        released = delete_subtree(self.tree, self._free_list, self._alloc, index)
        self.count -= released

        return released

    def rotate_left(
        self,
        index: int

    ) -> int:
        """Left rotation at index. Returns the new subtree root."""

        if not is_live_node(self.tree, self.root, index):
            return NIL

        new_root = binary_tree_rotate_left(self.tree, index)
        if index == self.root:
            self.root = new_root

        return new_root

    def rotate_right(
        self,
        index: int

    ) -> int:
        """Right rotation at index. Returns the new subtree root."""

        if not is_live_node(self.tree, self.root, index):
            return NIL

        new_root = binary_tree_rotate_right(self.tree, index)
        if index == self.root:
            self.root = new_root

        return new_root

    def __len__(self) -> int:
        return self.count
