import numpy as np
from numba import njit, int64
from numba.experimental import jitclass
from typing import Tuple

from .config import MAX_CAPACITY
from .NodeArray import (
    NIL, VALUE, PARENT, LEFT, RIGHT,
    new_arena, new_allocator, new_free_list,
    alloc_node, release_node, replace_child, check_index,
)
from .TreeUtils import binary_tree_inorder, binary_tree_height, binary_tree_is_bst



# ---------- JIT-Compiled BST Core Operations ----------
@njit
def bst_search(
    tree:  np.ndarray,
    root:  int,
    value: int

) -> int:

    """
    Iterative binary search from `root`.

    :return: Index of the node holding `value`, or NIL if absent
    :rtype: int
    """

    current = root
    while current != NIL:
        current_value = tree[current, VALUE]

        if value == current_value:
            return current

        elif value < current_value:
            current = tree[current, LEFT]

        else:
            current = tree[current, RIGHT]

    return NIL

@njit(inline="always")
def bst_min_val(
    tree:  np.ndarray,
    index: int

) -> int:

    """
    Leftmost (minimum) node of the subtree rooted at `index`.
    """

    if index == NIL:
        return NIL

    while tree[index, LEFT] != NIL:
        index = tree[index, LEFT]

    return index

@njit
def bst_insert(
    tree:      np.ndarray,
    free_list: np.ndarray,
    alloc:     np.ndarray,
    root:      int,
    value:     int

) -> Tuple[int, int]:

    """
    Insert `value` as a new leaf, keeping the BST ordering.

    The insertion point is found before anything is allocated, so a
    duplicate or a full arena leaves the tree untouched.

    :param tree: Node arena
    :type tree: np.ndarray
    :param free_list: Stack of released rows
    :type free_list: np.ndarray
    :param alloc: Allocator state
    :type alloc: np.ndarray
    :param root: Current root index (NIL for an empty tree)
    :type root: int
    :param value: Value to insert
    :type value: int
    :return: (root, node): the root after insertion and the new node's index,
             node is NIL if `value` was already present or the arena is full
    :rtype: Tuple[int, int]
    """

    if root == NIL:
        node = alloc_node(tree, free_list, alloc, NIL, value)
        return node, node

    parent = root
    side   = LEFT
    while True:
        parent_value = tree[parent, VALUE]

        if value == parent_value:
            return root, NIL

        side = LEFT if value < parent_value else RIGHT
        if tree[parent, side] == NIL:
            break

        parent = tree[parent, side]

    node = alloc_node(tree, free_list, alloc, parent, value)
    if node != NIL:
        tree[parent, side] = node

    return root, node

@njit
def bst_delete_node(
    tree:      np.ndarray,
    free_list: np.ndarray,
    alloc:     np.ndarray,
    root:      int,
    target:    int

) -> Tuple[int, int]:

    """
    Remove the node at `target` from the tree rooted at `root`.

    - Leaf: unlinked directly.
    - One child: the child is spliced into the node's position.
    - Two children: the in-order successor's value is copied into the node
      and the successor row (at most one child) is removed instead.

    :return: (root, parent): the root after removal and the parent of the row
             that was physically removed, where retracing should start
    :rtype: Tuple[int, int]
    """

    if tree[target, LEFT] != NIL and tree[target, RIGHT] != NIL:
        successor            = bst_min_val(tree, tree[target, RIGHT])
        tree[target, VALUE]  = tree[successor, VALUE]
        target               = successor

    child  = tree[target, LEFT] if tree[target, LEFT] != NIL else tree[target, RIGHT]
    parent = tree[target, PARENT]

    replace_child(tree, parent, target, child)
    if parent == NIL:
        root = child

    release_node(tree, free_list, alloc, target)

    return root, parent

@njit
def bst_remove(
    tree:      np.ndarray,
    free_list: np.ndarray,
    alloc:     np.ndarray,
    root:      int,
    value:     int

) -> Tuple[int, bool]:

    """
    Remove `value` from the tree.

    :return: (root, removed): the root after removal, and False if `value`
             was not in the tree (which is then unchanged)
    :rtype: Tuple[int, bool]
    """

    target = bst_search(tree, root, value)
    if target == NIL:
        return root, False

    root, _ = bst_delete_node(tree, free_list, alloc, root, target)
    return root, True



# --------- Utils ---------
@njit
def array_to_bst(
    data: np.ndarray

) -> 'BST':

    """
    Build a BST by inserting the values of `data` in order.
    Duplicates are skipped.

    Args:
        data (np.ndarray): 1D array of int64 values.

    Returns:
        BST: Tree holding every distinct value of data.
    """

    bst = BST(max(data.size, 1))

    for i in range(data.size):
        bst.insert(data[i])

    return bst



# --------- BST API ---------
spec = [
    ("capacity"      , int64),
    ("count"         , int64),
    ("tree"          , int64[:, :]),
    ("root"          , int64),
    ("_free_list"    , int64[:]),
    ("_alloc"        , int64[:]),
]

@jitclass(spec)
class BST:
    """
    Unbalanced binary search tree stored in a node arena.

    Attributes:
        capacity (int64): Maximum number of live nodes.
        count (int64): Current number of live nodes.
        tree (int64[:, :]): Node arena, one [value, parent, left, right, height] row per node.
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

    def insert(
        self,
        value: int

    ) -> int:
        """Inserts a unique value. Returns the new node index, 0 on duplicate or full arena."""

        self.root, node = bst_insert(
            self.tree,
            self._free_list,
            self._alloc,
            self.root,
            value
        )

        if node != NIL:
            self.count += 1

        return node

    def search(
        self,
        value: int

    ) -> int:
        """Returns the node index holding value, or 0 if not found."""

        return bst_search(self.tree, self.root, value)

    def remove(
        self,
        value: int

    ) -> int:
        """Removes a value. Returns 1 if found and removed, 0 otherwise."""

        root, removed = bst_remove(
            self.tree,
            self._free_list,
            self._alloc,
            self.root,
            value
        )

        if removed:
            self.root   = root
            self.count -= 1
            return 1

        return 0

    def inorder(self) -> np.ndarray:
        return binary_tree_inorder(self.tree, self.root)

    def is_valid(self) -> bool:
        """True if the ordering invariant holds (an empty tree is valid)."""

        if self.root == NIL:
            return True
        return binary_tree_is_bst(self.tree, self.root)

    def __len__(self) -> int:
        return self.count
