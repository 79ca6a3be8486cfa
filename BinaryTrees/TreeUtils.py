import numpy as np
from numba import njit

from .NodeArray import NIL, VALUE, PARENT, LEFT, RIGHT



# Structural utilities over a node arena. Every function takes the arena and
# the index of a subtree root and treats NIL as the empty tree. None of them
# read the cached HEIGHT column, so they work on any tree built in an arena.



# ---------- Node Collection ----------
@njit
def collect_preorder(
    tree:  np.ndarray,
    index: int

) -> np.ndarray:

    """
    Indices of the subtree's nodes in pre-order (NLR).

    Every parent precedes its children, so walking the result backwards
    visits children before parents.
    """

    out       = np.zeros(tree.shape[0], dtype=np.int64)
    stack     = np.zeros(tree.shape[0], dtype=np.int64)
    out_idx   = 0
    stack_idx = 0

    if index != NIL:
        stack[0]  = index
        stack_idx = 1

    while stack_idx > 0:
        stack_idx -= 1
        current = stack[stack_idx]
        out[out_idx] = current
        out_idx += 1

        # Right first so that left is popped first
        if tree[current, RIGHT] != NIL:
            stack[stack_idx] = tree[current, RIGHT]
            stack_idx += 1
        if tree[current, LEFT] != NIL:
            stack[stack_idx] = tree[current, LEFT]
            stack_idx += 1

    return out[:out_idx]

@njit
def collect_levelorder(
    tree:  np.ndarray,
    index: int

) -> np.ndarray:

    """
    Indices of the subtree's nodes in breadth-first order.
    """

    queue = np.zeros(tree.shape[0], dtype=np.int64)
    head  = 0
    tail  = 0

    if index != NIL:
        queue[0] = index
        tail     = 1

    while head < tail:
        current = queue[head]
        head += 1

        if tree[current, LEFT] != NIL:
            queue[tail] = tree[current, LEFT]
            tail += 1
        if tree[current, RIGHT] != NIL:
            queue[tail] = tree[current, RIGHT]
            tail += 1

    return queue[:tail]

@njit
def collect_inorder(
    tree:  np.ndarray,
    index: int

) -> np.ndarray:

    """
    Indices of the subtree's nodes in in-order (LNR).
    """

    out       = np.zeros(tree.shape[0], dtype=np.int64)
    stack     = np.zeros(tree.shape[0], dtype=np.int64)
    out_idx   = 0
    stack_idx = 0
    current   = index

    while current != NIL or stack_idx > 0:

        while current != NIL:
            stack[stack_idx] = current
            stack_idx += 1
            current = tree[current, LEFT]

        stack_idx -= 1
        current = stack[stack_idx]
        out[out_idx] = current
        out_idx += 1

        current = tree[current, RIGHT]

    return out[:out_idx]

@njit
def collect_postorder(
    tree:  np.ndarray,
    index: int

) -> np.ndarray:

    """
    Indices of the subtree's nodes in post-order (LRN).

    Built as the reverse of a node-right-left walk.
    """

    out       = np.zeros(tree.shape[0], dtype=np.int64)
    stack     = np.zeros(tree.shape[0], dtype=np.int64)
    out_idx   = 0
    stack_idx = 0

    if index != NIL:
        stack[0]  = index
        stack_idx = 1

    while stack_idx > 0:
        stack_idx -= 1
        current = stack[stack_idx]
        out[out_idx] = current
        out_idx += 1

        if tree[current, LEFT] != NIL:
            stack[stack_idx] = tree[current, LEFT]
            stack_idx += 1
        if tree[current, RIGHT] != NIL:
            stack[stack_idx] = tree[current, RIGHT]
            stack_idx += 1

    return out[:out_idx][::-1].copy()

@njit
def _values_of(
    tree:    np.ndarray,
    indices: np.ndarray

) -> np.ndarray:

    values = np.zeros(indices.size, dtype=np.int64)
    for i in range(indices.size):
        values[i] = tree[indices[i], VALUE]
    return values



# ---------- Traversals ----------
@njit
def binary_tree_preorder(tree: np.ndarray, index: int) -> np.ndarray:
    """Values of the subtree in pre-order."""
    return _values_of(tree, collect_preorder(tree, index))

@njit
def binary_tree_inorder(tree: np.ndarray, index: int) -> np.ndarray:
    """Values of the subtree in in-order."""
    return _values_of(tree, collect_inorder(tree, index))

@njit
def binary_tree_postorder(tree: np.ndarray, index: int) -> np.ndarray:
    """Values of the subtree in post-order."""
    return _values_of(tree, collect_postorder(tree, index))

@njit
def binary_tree_levelorder(tree: np.ndarray, index: int) -> np.ndarray:
    """Values of the subtree level by level, left to right."""
    return _values_of(tree, collect_levelorder(tree, index))



# ---------- Measures ----------
@njit
def subtree_heights(
    tree:  np.ndarray,
    index: int

) -> np.ndarray:

    """
    Height of every node of the subtree, indexed by row.

    Rows outside the subtree (NIL included) hold -1. Children are handled
    before their parents by walking the pre-order backwards.
    """

    heights = np.full(tree.shape[0], -1, dtype=np.int64)
    order   = collect_preorder(tree, index)

    for i in range(order.size - 1, -1, -1):
        node = order[i]
        heights[node] = max(
            heights[tree[node, LEFT]],
            heights[tree[node, RIGHT]]
        ) + 1

    return heights

@njit
def binary_tree_height(
    tree:  np.ndarray,
    index: int

) -> int:

    """
    Number of edges on the longest downward path, -1 for an empty tree.
    """

    if index == NIL:
        return -1

    level  = -1
    queue  = collect_levelorder(tree, index)
    depths = np.zeros(tree.shape[0], dtype=np.int64)

    for i in range(queue.size):
        node = queue[i]
        if node != index:
            depths[node] = depths[tree[node, PARENT]] + 1
        level = max(level, depths[node])

    return level

@njit
def binary_tree_depth(
    tree:  np.ndarray,
    index: int

) -> int:

    """
    Number of edges from the node up to its root, 0 for NIL.
    """

    depth = 0
    if index == NIL:
        return depth

    current = tree[index, PARENT]
    while current != NIL:
        depth += 1
        current = tree[current, PARENT]

    return depth

@njit
def binary_tree_size(tree: np.ndarray, index: int) -> int:
    return collect_preorder(tree, index).size

@njit
def binary_tree_leaves(
    tree:  np.ndarray,
    index: int

) -> int:

    order  = collect_preorder(tree, index)
    leaves = 0
    for i in range(order.size):
        if tree[order[i], LEFT] == NIL and tree[order[i], RIGHT] == NIL:
            leaves += 1
    return leaves

@njit
def binary_tree_nodes(
    tree:  np.ndarray,
    index: int

) -> int:

    """
    Count of nodes with at least one child.
    """

    order = collect_preorder(tree, index)
    inner = 0
    for i in range(order.size):
        if tree[order[i], LEFT] != NIL or tree[order[i], RIGHT] != NIL:
            inner += 1
    return inner

@njit
def binary_tree_balance(
    tree:  np.ndarray,
    index: int

) -> int:

    """
    Balance factor: height(left) - height(right), 0 for NIL.
    """

    if index == NIL:
        return 0

    return (
        binary_tree_height(tree, tree[index, LEFT]) -
        binary_tree_height(tree, tree[index, RIGHT])
    )



# ---------- Shape Predicates ----------
@njit
def binary_tree_is_full(
    tree:  np.ndarray,
    index: int

) -> bool:

    """
    Every node has zero or two children.
    """

    if index == NIL:
        return False

    order = collect_preorder(tree, index)
    for i in range(order.size):
        has_left  = tree[order[i], LEFT] != NIL
        has_right = tree[order[i], RIGHT] != NIL
        if has_left != has_right:
            return False

    return True

@njit
def binary_tree_is_perfect(
    tree:  np.ndarray,
    index: int

) -> bool:

    """
    Full with every leaf on the same level, i.e. size == 2^(h+1) - 1.
    """

    if index == NIL:
        return False

    height = binary_tree_height(tree, index)
    return binary_tree_size(tree, index) == (1 << (height + 1)) - 1

@njit
def binary_tree_is_complete(
    tree:  np.ndarray,
    index: int

) -> bool:

    """
    Every level is full except possibly the last, which fills left to
    right. Walks breadth-first; once a missing child is seen no later node
    may have a child.
    """

    if index == NIL:
        return False

    queue   = np.zeros(tree.shape[0], dtype=np.int64)
    head    = 0
    tail    = 1
    gap     = False
    queue[0] = index

    while head < tail:
        current = queue[head]
        head += 1

        # LEFT and RIGHT are adjacent columns
        for side in range(LEFT, RIGHT + 1):
            child = tree[current, side]
            if child == NIL:
                gap = True
            elif gap:
                return False
            else:
                queue[tail] = child
                tail += 1

    return True



# ---------- Relatives ----------
@njit
def binary_tree_sibling(
    tree:  np.ndarray,
    index: int

) -> int:

    """
    The other child of the node's parent, NIL if there is none.
    """

    if index == NIL:
        return NIL

    parent = tree[index, PARENT]
    if parent == NIL:
        return NIL

    if tree[parent, LEFT] == index:
        return tree[parent, RIGHT]
    return tree[parent, LEFT]

@njit
def binary_tree_uncle(
    tree:  np.ndarray,
    index: int

) -> int:

    if index == NIL:
        return NIL
    return binary_tree_sibling(tree, tree[index, PARENT])

@njit
def binary_trees_ancestor(
    tree:   np.ndarray,
    first:  int,
    second: int

) -> int:

    """
    Lowest common ancestor of two nodes of the same arena.

    Lifts the deeper node to the other's depth, then moves both up in step
    until they meet. A node counts as its own ancestor.

    :return: Index of the common ancestor, NIL if the nodes share no root
    :rtype: int
    """

    if first == NIL or second == NIL:
        return NIL

    depth_first  = binary_tree_depth(tree, first)
    depth_second = binary_tree_depth(tree, second)

    while depth_first > depth_second:
        first = tree[first, PARENT]
        depth_first -= 1

    while depth_second > depth_first:
        second = tree[second, PARENT]
        depth_second -= 1

    while first != second:
        first  = tree[first, PARENT]
        second = tree[second, PARENT]

    return first



# ---------- Rotations ----------
@njit
def binary_tree_rotate_left(
    tree:  np.ndarray,
    index: int

) -> int:

    """
    Perform a single left rotation on the subtree rooted at `index`.

    The right child is promoted into the node's position: the node's parent
    (if any) is re-pointed at it, the node becomes its left child, and the
    promoted node's former left subtree becomes the node's right subtree.
    Parent links of all three nodes are consistent on return. Cached heights
    are not touched.

    :param tree: Node arena
    :type tree: np.ndarray
    :param index: Root of the subtree to rotate
    :type index: int
    :return: Index of the new subtree root (`index` itself if it has no right child)
    :rtype: int
    """

    if index == NIL or tree[index, RIGHT] == NIL:
        return index

    pivot  = tree[index, RIGHT]
    parent = tree[index, PARENT]
    inner  = tree[pivot, LEFT]

    # Rotate
    tree[index, RIGHT] = inner
    if inner != NIL:
        tree[inner, PARENT] = index

    tree[pivot, LEFT]   = index
    tree[index, PARENT] = pivot

    # Hook the promoted node where the old root was
    tree[pivot, PARENT] = parent
    if parent != NIL:
        if tree[parent, LEFT] == index:
            tree[parent, LEFT] = pivot
        else:
            tree[parent, RIGHT] = pivot

    return pivot

@njit
def binary_tree_rotate_right(
    tree:  np.ndarray,
    index: int

) -> int:

    """
    Perform a single right rotation on the subtree rooted at `index`.

    Mirror of binary_tree_rotate_left: the left child is promoted and the
    node becomes its right child.

    :param tree: Node arena
    :type tree: np.ndarray
    :param index: Root of the subtree to rotate
    :type index: int
    :return: Index of the new subtree root (`index` itself if it has no left child)
    :rtype: int
    """

    if index == NIL or tree[index, LEFT] == NIL:
        return index

    pivot  = tree[index, LEFT]
    parent = tree[index, PARENT]
    inner  = tree[pivot, RIGHT]

    # Rotate
    tree[index, LEFT] = inner
    if inner != NIL:
        tree[inner, PARENT] = index

    tree[pivot, RIGHT]  = index
    tree[index, PARENT] = pivot

    # Hook the promoted node where the old root was
    tree[pivot, PARENT] = parent
    if parent != NIL:
        if tree[parent, LEFT] == index:
            tree[parent, LEFT] = pivot
        else:
            tree[parent, RIGHT] = pivot

    return pivot



# ---------- Ordering Predicates ----------
@njit
def binary_tree_is_bst(
    tree:  np.ndarray,
    index: int

) -> bool:

    """
    In-order values are strictly increasing. False for an empty tree.
    """

    if index == NIL:
        return False

    values = binary_tree_inorder(tree, index)
    for i in range(1, values.size):
        if values[i - 1] >= values[i]:
            return False

    return True

@njit
def binary_tree_is_avl(
    tree:  np.ndarray,
    index: int

) -> bool:

    """
    A valid BST whose every node has |height(left) - height(right)| <= 1.
    Heights are recomputed from the structure, not read from the cache.
    """

    if not binary_tree_is_bst(tree, index):
        return False

    heights = subtree_heights(tree, index)
    order   = collect_preorder(tree, index)

    for i in range(order.size):
        node = order[i]
        bf   = heights[tree[node, LEFT]] - heights[tree[node, RIGHT]]
        if bf > 1 or bf < -1:
            return False

    return True

@njit
def binary_tree_is_heap(
    tree:  np.ndarray,
    index: int

) -> bool:

    """
    A complete tree whose every node's value is >= its children's (max-heap).
    """

    if not binary_tree_is_complete(tree, index):
        return False

    order = collect_preorder(tree, index)
    for i in range(order.size):
        node  = order[i]
        left  = tree[node, LEFT]
        right = tree[node, RIGHT]
        if left != NIL and tree[left, VALUE] > tree[node, VALUE]:
            return False
        if right != NIL and tree[right, VALUE] > tree[node, VALUE]:
            return False

    return True
