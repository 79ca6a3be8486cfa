"""
Arena limits shared by every tree structure.

Capacities are counted in live nodes; each arena allocates one extra row for
the NIL sentinel.
"""

# Largest capacity an arena accepts (rows are addressed with int64, but the
# free list and traversal buffers are sized to the arena, so keep it sane).
MAX_CAPACITY     = (1 << 30) - 1

# Values used to trigger JIT compilation in warmup().
WARMUP_DATA      = (30, 20, 10, 40, 50, 25)
