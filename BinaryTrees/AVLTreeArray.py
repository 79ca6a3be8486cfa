import numpy as np
from numba import njit, int64
from numba.experimental import jitclass
from typing import Tuple

from .config import MAX_CAPACITY, WARMUP_DATA
from .NodeArray import (
    NIL, VALUE, PARENT, LEFT, RIGHT, HEIGHT,
    new_arena, new_allocator, new_free_list, alloc_node, check_index,
)
from .TreeUtils import (
    collect_preorder,
    binary_tree_inorder,
    binary_tree_is_avl,
    binary_tree_rotate_left,
    binary_tree_rotate_right,
)
from .BSTArray import bst_search, bst_insert, bst_delete_node, bst_min_val



# AVL nodes cache their height in the HEIGHT column: leaf = 0, and the NIL
# row holds -1, so a node's height is always
#     max(tree[left, HEIGHT], tree[right, HEIGHT]) + 1
# without checking for missing children.



# ---------- JIT-Compiled Height / Balance Helpers ----------
@njit(inline="always")
def _update_height(
    tree:  np.ndarray,
    index: int

) -> None:

    """
    Recompute the cached height of `index` from its children's cached heights.
    """

    tree[index, HEIGHT] = max(
        tree[tree[index, LEFT], HEIGHT],
        tree[tree[index, RIGHT], HEIGHT]
    ) + 1

@njit(inline="always")
def _balance_factor(
    tree:  np.ndarray,
    index: int

) -> int:

    """
    height(left) - height(right) from the cached heights.
    """

    return tree[tree[index, LEFT], HEIGHT] - tree[tree[index, RIGHT], HEIGHT]



# ---------- JIT-Compiled Rotations ----------
@njit(inline="always")
def right_rotation( # SRR: Single Right Rotation
    tree:  np.ndarray,
    index: int

) -> int:

    """
    Perform a single right rotation (SRR) and refresh the cached heights.

    The demoted node is updated first since it is now the promoted node's
    child.

    :param tree: Node arena
    :type tree: np.ndarray
    :param index: Index of the node to rotate
    :type index: int
    :return: Index of the new root of the rotated subtree
    :rtype: int
    """

    new_root = binary_tree_rotate_right(tree, index)

    _update_height(tree, index)
    _update_height(tree, new_root)

    return new_root

@njit(inline="always")
def left_rotation( # SLR: Single Left Rotation
    tree:  np.ndarray,
    index: int

) -> int:

    """
    Perform a single left rotation (SLR) and refresh the cached heights.

    :param tree: Node arena
    :type tree: np.ndarray
    :param index: Index of the subtree root to rotate
    :type index: int
    :return: Index of the new root after rotation
    :rtype: int
    """

    new_root = binary_tree_rotate_left(tree, index)

    _update_height(tree, index)
    _update_height(tree, new_root)

    return new_root

@njit
def rebalance(
    tree:  np.ndarray,
    index: int

) -> int:

    """
    Restore the AVL condition at `index`, whose children are already balanced
    and whose cached height is current.

    Cases are chosen by the sign of the heavy child's balance factor; a
    balanced child (possible after a deletion) takes the single rotation.

        bf > 1,  child bf >= 0 -> LL: right rotation
        bf > 1,  child bf <  0 -> LR: left on child, right on node
        bf < -1, child bf <= 0 -> RR: left rotation
        bf < -1, child bf >  0 -> RL: right on child, left on node

    :return: Index of the subtree root after any rotation
    :rtype: int
    """

    bf = _balance_factor(tree, index)

    if bf > 1: # L
        if _balance_factor(tree, tree[index, LEFT]) < 0: # LR
            left_rotation(tree, tree[index, LEFT])
        return right_rotation(tree, index)

    elif bf < -1: # R
        if _balance_factor(tree, tree[index, RIGHT]) > 0: # RL
            right_rotation(tree, tree[index, RIGHT])
        return left_rotation(tree, index)

    return index

@njit
def retrace(
    tree:  np.ndarray,
    root:  int,
    start: int

) -> int:

    """
    Walk parent links from `start` up to the root, refreshing each cached
    height and rebalancing where needed.

    :param tree: Node arena
    :type tree: np.ndarray
    :param root: Current root index
    :type root: int
    :param start: First node to visit (parent of the changed position)
    :type start: int
    :return: Root index after rebalancing
    :rtype: int
    """

    current = start
    while current != NIL:
        _update_height(tree, current)
        sub_root = rebalance(tree, current)

        parent = tree[sub_root, PARENT]
        if parent == NIL:
            root = sub_root

        current = parent

    return root



# ---------- JIT-Compiled AVLTree Core Operations ----------
@njit
def avl_insert(
    tree:      np.ndarray,
    free_list: np.ndarray,
    alloc:     np.ndarray,
    root:      int,
    value:     int

) -> Tuple[int, int]:

    """
    Insert a new value into an array-based AVL tree with rebalancing.

    The value is placed as a BST leaf, then every ancestor from the new
    node's parent up to the root gets its height refreshed and is rotated if
    its balance factor left [-1, 1]. Rotations relink rows and never move
    values, so the returned node index keeps holding `value`.

    Parameters
    ----------
    tree : np.ndarray
        The node arena of the AVL tree.
    free_list : np.ndarray
        Stack of previously freed rows for reuse.
    alloc : np.ndarray
        Allocator state [next row | free list top].
    root : int
        Index of the current root node (0 if tree is empty).
    value : int
        The value to insert into the AVL tree.

    Returns
    -------
    Tuple[int, int]
        (root, node): the possibly new root, and the new node's index or 0
        if the value was a duplicate or the arena is full.
    """

    root, node = bst_insert(tree, free_list, alloc, root, value)

    if node == NIL:
        return root, NIL

    return retrace(tree, root, tree[node, PARENT]), node

@njit
def avl_remove(
    tree:      np.ndarray,
    free_list: np.ndarray,
    alloc:     np.ndarray,
    root:      int,
    value:     int

) -> Tuple[int, bool]:

    """
    AVL tree node deletion with rebalancing.

    1. Search: locate the node holding `value`; absent values leave the tree
       untouched.
    2. Deletion: leaf, single-child and two-child cases (the latter copies
       the in-order successor's value and removes the successor row).
    3. Retracing: heights are refreshed and rotations applied from the
       parent of the removed row up to the root. Unlike insertion, several
       ancestors may need a rotation.

    Args:
        tree (np.ndarray): Node arena.
        free_list (np.ndarray): Stack of available rows for node recycling.
        alloc (np.ndarray): Allocator state.
        root (int): Index of the current tree root.
        value (int): The target value to be removed.

    Returns:
        Tuple[int, bool]:
            - new_root_index.
            - removed flag (False if not found).
    """

    target = bst_search(tree, root, value)
    if target == NIL:
        return root, False

    root, start = bst_delete_node(tree, free_list, alloc, root, target)

    return retrace(tree, root, start), True



# --------- Utils ---------
@njit
def warmup(tree_size: int = 100):
    """
    Minimally triggers JIT compilation for core AVL operations.
    """

    avl         = AVLTree(tree_size)
    warmup_data = np.array(WARMUP_DATA, dtype=np.int64)

    for x in warmup_data:
        avl.insert(x)

    _ = avl.search(20)
    _ = avl.inorder()

    avl.remove(10)
    avl.remove(30)

    return True

@njit
def array_to_avl(
    data: np.ndarray

) -> 'AVLTree':

    """
    Builds and populates an AVLTree from a NumPy array, one insert per element.
    Duplicates are skipped.

    Args:
        data (np.ndarray): 1D array of int64 values to insert.

    Returns:
        AVLTree: A balanced tree containing every distinct element of data.
    """

    avl = AVLTree(max(data.size, 1))

    for i in range(data.size):
        avl.insert(data[i])

    return avl

@njit
def sorted_array_to_avl(
    data: np.ndarray

) -> 'AVLTree':

    """
    Builds an AVLTree from a strictly increasing array without rotations:
    each range's middle element becomes the subtree root.

    Args:
        data (np.ndarray): 1D array of strictly increasing int64 values.

    Returns:
        AVLTree: A height-balanced tree holding data.

    Raises:
        ValueError: if data is not strictly increasing (nothing is built).
    """

    avl = AVLTree(max(data.size, 1))
    avl.load_sorted(data)

    return avl

@njit
def fill_avl(
    avl:  'AVLTree',
    data: np.ndarray

) -> int:

    """
    Insert every element of `data` into an existing tree, in order.

    :return: How many values were inserted (duplicates and values that did
             not fit are not counted)
    :rtype: int
    """

    inserted = 0
    for i in range(data.size):
        if avl.insert(data[i]) != NIL:
            inserted += 1

    return inserted

@njit
def remove_avl(
    avl:    'AVLTree',
    values: np.ndarray

) -> int:

    """
    Remove every element of `values` from the tree; absent values are skipped.

    :return: How many values were actually removed
    :rtype: int
    """

    removed = 0
    for i in range(values.size):
        removed += avl.remove(values[i])

    return removed



# --------- AVLTree API ---------
spec = [
    ("capacity"      , int64),
    ("count"         , int64),
    ("tree"          , int64[:, :]),
    ("root"          , int64),
    ("_free_list"    , int64[:]),
    ("_alloc"        , int64[:]),
]

@jitclass(spec)
class AVLTree:
    """
    Self-balancing AVL tree stored in a node arena and compiled as a Numba jitclass.

    Each node is one int64 row [value, parent, left, right, height]. Parent
    links drive the bottom-up rebalancing walk; heights are cached per node
    and maintained by the rotations.

    Attributes:
        capacity (int64): Maximum number of live nodes.
        count (int64): Current number of live nodes in the tree.
        tree (int64[:, :]): Node arena [capacity + 1, 5]; row 0 is NIL.
        root (int64): Index of the current root node (0 if empty).
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
        """Height of the whole tree, -1 when empty."""
        return self.tree[self.root, HEIGHT]

    @property
    def root_info(self) -> Tuple[int, int, int, int]:
        return self.get_node(self.root)

    @property
    def _max(self) -> int:
        """
        Find the index of the node with the maximum value in the tree.

        Returns:
            int: The index of the rightmost node, or 0 if the tree is empty.
        """

        current = self.root
        if current == NIL:
            return NIL

        while self.tree[current, RIGHT] != NIL:
            current = self.tree[current, RIGHT]

        return current

    @property
    def _min(self) -> int:
        """
        Find the index of the node with the minimum value in the tree.

        Returns:
            int: The index of the leftmost node, or 0 if the tree is empty.
        """

        return bst_min_val(self.tree, self.root)

    def get_node(
        self,
        index: int

    ) -> Tuple[int, int, int, int]:

        """
        Read all fields of a node except its parent link.

        Args:
            index (int): The index of the node in the arena.

        Returns:
            Tuple[int, int, int, int]: (value, left_index, right_index, height).
        """

        if not check_index(self.tree, index):
            return 0, 0, 0, 0

        return (
            self.tree[index, VALUE],
            self.tree[index, LEFT],
            self.tree[index, RIGHT],
            self.tree[index, HEIGHT]
        )

    def get_value(self, index: int) -> int:
        value, _, _, _ = self.get_node(index)
        return value

    def get_left(self, index: int) -> int:
        _, left, _, _ = self.get_node(index)
        return left

    def get_right(self, index: int) -> int:
        _, _, right, _ = self.get_node(index)
        return right

    def get_height(self, index: int) -> int:
        """Cached height of a node; -1 for NIL or an invalid index."""

        if not check_index(self.tree, index):
            return -1
        return self.tree[index, HEIGHT]

    def get_parent(self, index: int) -> int:
        if not check_index(self.tree, index):
            return NIL
        return self.tree[index, PARENT]

    def successor(
        self,
        index: int

    ) -> int:
        """
        Find the in-order successor of a node within its own subtree.

        Returns:
            int: The index of the smallest node in the right subtree,
                 or 0 if no right child exists.
        """

        if not check_index(self.tree, index):
            return NIL
        return bst_min_val(self.tree, self.tree[index, RIGHT])

    def predecessor(
        self,
        index: int

    ) -> int:
        """
        Find the in-order predecessor of a node within its own subtree.

        Returns:
            int: The index of the largest node in the left subtree,
                 or 0 if no left child exists.
        """

        if not check_index(self.tree, index):
            return NIL

        current = self.tree[index, LEFT]
        if current == NIL:
            return NIL

        while self.tree[current, RIGHT] != NIL:
            current = self.tree[current, RIGHT]

        return current

    def insert(
        self,
        value: int

    ) -> int:
        """Inserts a unique value with auto-rebalancing. Returns the node index, 0 if duplicate/full."""

        self.root, node = avl_insert(
            self.tree,
            self._free_list,
            self._alloc,
            self.root,
            value
        )

        if node != NIL:
            self.count += 1

        return node

    def remove(
        self,
        value: int

    ) -> int:
        """Deletes a value and stabilizes the tree. Returns 1 if found and removed, 0 otherwise."""

        if self.count == 0:
            return 0

        root, removed = avl_remove(
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

    def search(
        self,
        value: int

    ) -> int:
        """Locates a value using iterative BST search. Returns the node index or 0 if not found."""

        return bst_search(self.tree, self.root, value)

    def update_value(
        self,
        old_value: int,
        new_value: int

    ) -> int:
        """
        Replaces a value by removal and re-insertion to maintain AVL properties.
        Nothing changes if old_value is absent or new_value is already present.
        """

        if bst_search(self.tree, self.root, old_value) == NIL:
            return 0

        if old_value != new_value and bst_search(self.tree, self.root, new_value) != NIL:
            return 0

        self.remove(old_value)
        self.insert(new_value)
        return 1

    def load_sorted(
        self,
        data: np.ndarray

    ) -> int:

        """
        Fill an empty tree from strictly increasing data by midpoint splitting.

        Ranges are processed from an explicit stack of (lo, hi, parent, side)
        entries. Heights are filled in afterwards, children before parents.

        Returns:
            int: Number of nodes built (0 if the tree is not empty or data
                 does not fit).

        Raises:
            ValueError: if data is not strictly increasing (nothing is built).
        """

        for i in range(1, data.size):
            if data[i - 1] >= data[i]:
                raise ValueError("data must be strictly increasing")

        if self.root != NIL or data.size > self.capacity:
            return 0

        n     = data.size
        stack = np.zeros((n + 1, 4), dtype=np.int64)
        top   = 0

        if n > 0:
            stack[0, 0] = 0
            stack[0, 1] = n - 1
            stack[0, 2] = NIL
            stack[0, 3] = LEFT
            top = 1

        while top > 0:
            top -= 1
            lo     = stack[top, 0]
            hi     = stack[top, 1]
            parent = stack[top, 2]
            side   = stack[top, 3]

            mid  = lo + (hi - lo) // 2
            node = alloc_node(self.tree, self._free_list, self._alloc, parent, data[mid])

            if parent == NIL:
                self.root = node
            else:
                self.tree[parent, side] = node

            if mid + 1 <= hi:
                stack[top, 0] = mid + 1
                stack[top, 1] = hi
                stack[top, 2] = node
                stack[top, 3] = RIGHT
                top += 1

            if lo <= mid - 1:
                stack[top, 0] = lo
                stack[top, 1] = mid - 1
                stack[top, 2] = node
                stack[top, 3] = LEFT
                top += 1

        order = collect_preorder(self.tree, self.root)
        for i in range(order.size - 1, -1, -1):
            _update_height(self.tree, order[i])

        self.count = n
        return n

    def inorder(self) -> np.ndarray:
        """
        Sorted array of all values using In-order traversal.
        """
        return binary_tree_inorder(self.tree, self.root)

    def is_valid(self) -> bool:
        """
        Recheck ordering and balance from scratch (ignores cached heights).
        An empty tree is valid.
        """

        if self.root == NIL:
            return True
        return binary_tree_is_avl(self.tree, self.root)

    def __len__(self) -> int:
        return self.count

    def __str__(self) -> str:
        return "AVLTree(size=" + str(self.count) + ", root=" + str(self.root) + ", height=" + str(self.height) + ")"
