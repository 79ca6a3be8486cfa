import numpy as np
from numba import njit



# Node layout, one int64 row per node:
#     ROW[5]: [value | parent | left | right | height]
#     Row 0 is the NIL sentinel. Its height is -1 so that
#     height(NIL) needs no branch; it is never written after creation.
VALUE       = 0
PARENT      = 1
LEFT        = 2
RIGHT       = 3
HEIGHT      = 4
NODE_FIELDS = 5

NIL         = 0

# Allocator state, a 2-slot int64 array:
#     [next never-used row | free list top]
ALLOC_NEXT  = 0
ALLOC_TOP   = 1



# ---------- Arena Creation ----------
@njit
def new_arena(
    capacity: int

) -> np.ndarray:

    """
    Allocate a node arena able to hold `capacity` live nodes.

    :param capacity: Maximum number of live nodes
    :type capacity: int
    :return: Zeroed [capacity + 1, NODE_FIELDS] int64 array with the NIL row set up
    :rtype: np.ndarray
    """

    tree = np.zeros((capacity + 1, NODE_FIELDS), dtype=np.int64)
    tree[NIL, HEIGHT] = -1
    return tree

@njit
def new_allocator() -> np.ndarray:
    """
    Allocator state for a fresh arena: first usable row is 1, free list empty.
    """

    alloc = np.zeros(2, dtype=np.int64)
    alloc[ALLOC_NEXT] = 1
    return alloc

@njit
def new_free_list(
    capacity: int

) -> np.ndarray:

    """
    Stack of released row indices, large enough to hold every row.
    """

    return np.zeros(capacity + 1, dtype=np.int64)



# ---------- Value Swap ----------
@njit(inline="always")
def swap_values(
    tree: np.ndarray,
    a:    int,
    b:    int

) -> None:

    tmp             = tree[a, VALUE]
    tree[a, VALUE]  = tree[b, VALUE]
    tree[b, VALUE]  = tmp



# ---------- Allocation ----------
@njit(inline="always")
def alloc_node(
    tree:      np.ndarray,
    free_list: np.ndarray,
    alloc:     np.ndarray,
    parent:    int,
    value:     int

) -> int:

    """
    Take a row for a new leaf node.

    Released rows are reused first; otherwise the next never-used row is
    taken. The new node's parent link is set, but the parent's child link is
    left to the caller.

    :param tree: Node arena
    :type tree: np.ndarray
    :param free_list: Stack of released rows
    :type free_list: np.ndarray
    :param alloc: Allocator state [next row | free list top]
    :type alloc: np.ndarray
    :param parent: Index of the parent node, NIL for a root
    :type parent: int
    :param value: Value stored in the new node
    :type value: int
    :return: Index of the new node, or NIL when the arena is full
    :rtype: int
    """

    if alloc[ALLOC_TOP] > 0:
        alloc[ALLOC_TOP] -= 1
        index = free_list[alloc[ALLOC_TOP]]

    elif alloc[ALLOC_NEXT] < tree.shape[0]:
        index = alloc[ALLOC_NEXT]
        alloc[ALLOC_NEXT] += 1

    else:
        return NIL

    tree[index, VALUE]  = value
    tree[index, PARENT] = parent
    tree[index, LEFT]   = NIL
    tree[index, RIGHT]  = NIL
    tree[index, HEIGHT] = 0

    return index

@njit(inline="always")
def release_node(
    tree:      np.ndarray,
    free_list: np.ndarray,
    alloc:     np.ndarray,
    index:     int

) -> None:

    """
    Zero a row and push it onto the free list. The node must already be
    unlinked from its parent.
    """

    tree[index, VALUE]  = 0
    tree[index, PARENT] = NIL
    tree[index, LEFT]   = NIL
    tree[index, RIGHT]  = NIL
    tree[index, HEIGHT] = 0

    free_list[alloc[ALLOC_TOP]] = index
    alloc[ALLOC_TOP] += 1



# ---------- Linking ----------
@njit(inline="always")
def replace_child(
    tree:   np.ndarray,
    parent: int,
    old:    int,
    new:    int

) -> None:

    """
    Point `parent`'s link that currently holds `old` at `new` and set
    `new`'s parent link. With parent == NIL only the back-reference is set,
    the caller owns the root pointer.
    """

    if parent != NIL:
        if tree[parent, LEFT] == old:
            tree[parent, LEFT] = new
        else:
            tree[parent, RIGHT] = new

    if new != NIL:
        tree[new, PARENT] = parent

@njit
def delete_subtree(
    tree:      np.ndarray,
    free_list: np.ndarray,
    alloc:     np.ndarray,
    index:     int

) -> int:

    """
    Unlink the subtree rooted at `index` from its parent and release every
    node in it.

    :return: Number of released nodes
    :rtype: int
    """

    if index == NIL:
        return 0

    replace_child(tree, tree[index, PARENT], index, NIL)

    stack     = np.zeros(tree.shape[0], dtype=np.int64)
    stack[0]  = index
    stack_idx = 1
    released  = 0

    while stack_idx > 0:
        stack_idx -= 1
        current = stack[stack_idx]

        left  = tree[current, LEFT]
        right = tree[current, RIGHT]
        if left != NIL:
            stack[stack_idx] = left
            stack_idx += 1
        if right != NIL:
            stack[stack_idx] = right
            stack_idx += 1

        release_node(tree, free_list, alloc, current)
        released += 1

    return released



# ---------- Node Predicates ----------
@njit(inline="always")
def binary_tree_is_leaf(
    tree:  np.ndarray,
    index: int

) -> bool:

    if index == NIL:
        return False
    return tree[index, LEFT] == NIL and tree[index, RIGHT] == NIL

@njit(inline="always")
def binary_tree_is_root(
    tree:  np.ndarray,
    index: int

) -> bool:

    if index == NIL:
        return False
    return tree[index, PARENT] == NIL

@njit(inline="always")
def check_index(
    tree:  np.ndarray,
    index: int

) -> bool:

    """
    True if `index` addresses a real row (not NIL, inside the arena).
    """

    return 0 < index < tree.shape[0]

@njit(inline="always")
def is_live_node(
    tree:  np.ndarray,
    root:  int,
    index: int

) -> bool:

    """
    True if `index` is a node currently linked into the tree at `root`:
    the root itself, or a node whose parent points back at it. Released
    and never-used rows have no parent and fail the check.
    """

    if not check_index(tree, index):
        return False

    if index == root:
        return True

    parent = tree[index, PARENT]
    if parent == NIL:
        return False

    return tree[parent, LEFT] == index or tree[parent, RIGHT] == index
