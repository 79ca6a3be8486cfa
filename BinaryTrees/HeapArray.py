import numpy as np
from numba import njit, int64
from numba.experimental import jitclass
from typing import Tuple

from .config import MAX_CAPACITY, WARMUP_DATA
from .NodeArray import (
    NIL, VALUE, PARENT, LEFT, RIGHT,
    new_arena, new_allocator, new_free_list,
    alloc_node, release_node, replace_child, swap_values, check_index,
)
from .TreeUtils import binary_tree_levelorder, binary_tree_is_heap



# The heap is a complete binary tree of linked arena rows, not a packed
# array. Rows are recycled through the free list, so a node's row index says
# nothing about its place in the tree. Positions are 1-based level-order
# numbers instead:
#     root = 1, children of p = 2p (left) and 2p + 1 (right)
# Below the leading 1 bit, the bits of a position spell the path from the
# root, most significant first: 0 -> left, 1 -> right.



class EmptyHeapError(IndexError):
    """Raised when extracting from or peeking at an empty heap."""



# ---------- JIT-Compiled Position Mapping ----------
@njit(inline="always")
def _position_depth(
    position: int

) -> int:

    """
    Depth of a 1-based level-order position (floor(log2(position))).
    """

    depth = 0
    while position > 1:
        position >>= 1
        depth += 1
    return depth

@njit
def heap_node_at(
    tree:     np.ndarray,
    root:     int,
    position: int

) -> int:

    """
    Locate the node at a 1-based level-order position.

    E.g. position 6 = 0b110: skip the leading 1, then 1 -> right, 0 -> left.

    :param tree: Node arena
    :type tree: np.ndarray
    :param root: Index of the heap root
    :type root: int
    :param position: Level-order position, 1 for the root
    :type position: int
    :return: Index of the node, NIL if the position is not populated
    :rtype: int
    """

    if position < 1:
        return NIL

    node = root
    for level in range(_position_depth(position) - 1, -1, -1):
        if node == NIL:
            return NIL

        if (position >> level) & 1:
            node = tree[node, RIGHT]
        else:
            node = tree[node, LEFT]

    return node



# ---------- JIT-Compiled Sifts ----------
@njit(inline="always")
def sift_up(
    tree:  np.ndarray,
    index: int

) -> int:

    """
    Swap the value at `index` toward the root while it exceeds its parent's.

    :return: Index of the node that holds the value when it stops
    :rtype: int
    """

    parent = tree[index, PARENT]
    while parent != NIL and tree[index, VALUE] > tree[parent, VALUE]:
        swap_values(tree, index, parent)
        index  = parent
        parent = tree[index, PARENT]

    return index

@njit(inline="always")
def sift_down(
    tree:  np.ndarray,
    index: int

) -> int:

    """
    Swap the value at `index` with its larger child while that child exceeds it.

    :return: Index of the node that holds the value when it stops
    :rtype: int
    """

    while True:
        largest = index
        left    = tree[index, LEFT]
        right   = tree[index, RIGHT]

        if left != NIL and tree[left, VALUE] > tree[largest, VALUE]:
            largest = left
        if right != NIL and tree[right, VALUE] > tree[largest, VALUE]:
            largest = right

        if largest == index:
            return index

        swap_values(tree, index, largest)
        index = largest



# ---------- JIT-Compiled Heap Core Operations ----------
@njit
def heap_insert(
    tree:      np.ndarray,
    free_list: np.ndarray,
    alloc:     np.ndarray,
    root:      int,
    count:     int,
    value:     int

) -> Tuple[int, int]:

    """
    Insert a value into a max-heap of `count` nodes.

    The new node takes position count + 1, the first free slot in level
    order, so the shape stays complete. Its parent is the node at position
    (count + 1) // 2 and the low bit chooses the side. The value then sifts
    up.

    Parameters
    ----------
    tree : np.ndarray
        The node arena of the heap.
    free_list : np.ndarray
        Stack of previously freed rows for reuse.
    alloc : np.ndarray
        Allocator state [next row | free list top].
    root : int
        Index of the heap root (0 if empty).
    count : int
        Number of nodes currently in the heap.
    value : int
        The value to insert.

    Returns
    -------
    Tuple[int, int]
        (root, node): the root, and the index of the node holding the
        inserted value after sifting, 0 if the arena is full.
    """

    if root == NIL:
        node = alloc_node(tree, free_list, alloc, NIL, value)
        return node, node

    position = count + 1
    parent   = heap_node_at(tree, root, position >> 1)

    node = alloc_node(tree, free_list, alloc, parent, value)
    if node == NIL:
        return root, NIL

    if position & 1:
        tree[parent, RIGHT] = node
    else:
        tree[parent, LEFT] = node

    return root, sift_up(tree, node)

@njit
def heap_extract(
    tree:      np.ndarray,
    free_list: np.ndarray,
    alloc:     np.ndarray,
    root:      int,
    count:     int

) -> Tuple[int, bool, int]:

    """
    Remove and return the root value of a max-heap of `count` nodes.

    The last node in level order (position `count`) gives its value to the
    root and is unlinked and released, then the root value sifts down.

    Args:
        tree (np.ndarray): Node arena.
        free_list (np.ndarray): Stack of available rows for node recycling.
        alloc (np.ndarray): Allocator state.
        root (int): Index of the heap root.
        count (int): Number of nodes in the heap.

    Returns:
        Tuple[int, bool, int]:
            - new_root_index.
            - ok flag, False if the heap was empty.
            - extracted value (0 when ok is False, not a real value).
    """

    if root == NIL:
        return root, False, 0

    value = tree[root, VALUE]

    if count <= 1:
        release_node(tree, free_list, alloc, root)
        return NIL, True, value

    last = heap_node_at(tree, root, count)
    tree[root, VALUE] = tree[last, VALUE]

    replace_child(tree, tree[last, PARENT], last, NIL)
    release_node(tree, free_list, alloc, last)

    sift_down(tree, root)

    return root, True, value



# --------- Utils ---------
@njit
def warmup(heap_size: int = 100):
    """
    Minimally triggers JIT compilation for core heap operations.
    """

    heap        = MaxHeap(heap_size)
    warmup_data = np.array(WARMUP_DATA, dtype=np.int64)

    for x in warmup_data:
        heap.insert(x)

    _ = heap.peek()
    _ = heap.try_extract()
    _ = heap_to_sorted_array(heap)

    return True

@njit
def array_to_heap(
    data: np.ndarray

) -> 'MaxHeap':

    """
    Builds a MaxHeap by inserting the elements of `data` one by one, in
    order (O(n log n), not a linear heapify).

    Args:
        data (np.ndarray): 1D array of int64 values, duplicates allowed.

    Returns:
        MaxHeap: Heap holding every element of data.
    """

    heap = MaxHeap(max(data.size, 1))

    for i in range(data.size):
        heap.insert(data[i])

    return heap

@njit
def heap_to_sorted_array(
    heap: 'MaxHeap'

) -> np.ndarray:

    """
    Drain a heap into an array by repeated extraction.

    The heap is left empty.

    Args:
        heap (MaxHeap): The heap to drain.

    Returns:
        np.ndarray: Every value of the heap in descending order.
    """

    out = np.zeros(heap.count, dtype=np.int64)

    for i in range(out.size):
        _, value = heap.try_extract()
        out[i]   = value

    return out



# --------- MaxHeap API ---------
spec = [
    ("capacity"      , int64),
    ("count"         , int64),
    ("tree"          , int64[:, :]),
    ("root"          , int64),
    ("_free_list"    , int64[:]),
    ("_alloc"        , int64[:]),
]

@jitclass(spec)
class MaxHeap:
    """
    Max-heap kept as a complete binary tree of linked arena rows.

    Attributes:
        capacity (int64): Maximum number of values.
        count (int64): Current number of values.
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

    def node_at(self, position: int) -> int:
        """Index of the node at a 1-based level-order position, 0 if none."""

        if position > self.count:
            return NIL
        return heap_node_at(self.tree, self.root, position)

    def insert(
        self,
        value: int

    ) -> int:
        """Adds a value. Returns the index of the node holding it, 0 if the heap is full."""

        self.root, node = heap_insert(
            self.tree,
            self._free_list,
            self._alloc,
            self.root,
            self.count,
            value
        )

        if node != NIL:
            self.count += 1

        return node

    def try_extract(self) -> Tuple[bool, int]:
        """Removes the largest value. Returns (True, value), or (False, 0) if empty."""

        root, ok, value = heap_extract(
            self.tree,
            self._free_list,
            self._alloc,
            self.root,
            self.count
        )

        if ok:
            self.root   = root
            self.count -= 1

        return ok, value

    def extract(self) -> int:
        """Removes and returns the largest value. Raises EmptyHeapError if empty."""

        if self.count == 0:
            raise EmptyHeapError("extract from an empty heap")

        _, value = self.try_extract()
        return value

    def peek(self) -> int:
        """Largest value without removing it. Raises EmptyHeapError if empty."""

        if self.count == 0:
            raise EmptyHeapError("peek at an empty heap")

        return self.tree[self.root, VALUE]

    def levelorder(self) -> np.ndarray:
        """Values in level order, i.e. the equivalent packed heap array."""
        return binary_tree_levelorder(self.tree, self.root)

    def is_valid(self) -> bool:
        """
        Recheck heap order and completeness from scratch.
        An empty heap is valid.
        """

        if self.root == NIL:
            return True
        return binary_tree_is_heap(self.tree, self.root)

    def __len__(self) -> int:
        return self.count
