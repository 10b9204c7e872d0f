"""
HuffIndex Red-Black Tree
========================
In-memory red-black tree over integer keys. Each node carries a posting
list of row ids; duplicate keys aggregate into that list.

Structure:
  - One shared NIL sentinel per tree stands in for every leaf. It is
    always black and its key is meaningless.
  - Children are owned references; parent is a back-reference used only
    to walk upward during fix-up and rotation.

Invariants (hold after every insert):
  1. Root is black.
  2. NIL is black.
  3. No red node has a red parent.
  4. Every path from a node down to NIL has the same number of black nodes.
  5. Left subtree keys < node key < right subtree keys.

Insert:
  - Equal key found on descent → append posting and return. No structural
    change, no rebalancing.
  - Otherwise a red node is linked in and fix-up runs (cases 1/2/3 and
    their mirrors), then the root is forced black.

Concurrency: single-writer, no locking.
Delete: not supported.
"""

import logging
from typing import Iterator, List, Optional, Tuple

from indexing.diagnostics import NULL_SINK, TraceEvent, TraceSink

logger = logging.getLogger(__name__)

RED = True
BLACK = False


class RBNode:
    __slots__ = ('key', 'color', 'left', 'right', 'parent', 'postings')

    def __init__(self, key: int, color: bool = RED):
        self.key = key
        self.color = color
        self.left: 'RBNode' = self
        self.right: 'RBNode' = self
        self.parent: 'RBNode' = self
        self.postings: List[int] = []

    @property
    def is_red(self) -> bool:
        return self.color == RED

    @property
    def color_name(self) -> str:
        return "R" if self.color == RED else "B"

    def __repr__(self) -> str:
        return f"RBNode({self.key}[{self.color_name}], postings={len(self.postings)})"


class RedBlackTree:
    """
    Red-black tree with posting lists.

    Usage:
        tree = RedBlackTree()
        tree.insert(5, 0)
        tree.insert(5, 3)
        tree.get(5)                 # [0, 3]
        tree.size_distinct_keys()   # 1
    """

    def __init__(self, sink: TraceSink = NULL_SINK, verbose: bool = False,
                 snapshot_after_fixup: bool = False):
        self.nil = RBNode(0, BLACK)
        self.root: RBNode = self.nil
        self._sink = sink
        self._verbose = verbose
        self._snapshot_after_fixup = snapshot_after_fixup
        self._distinct_keys: int = 0
        self._posting_count: int = 0

    # ─── Public API ─────────────────────────────────────────────────

    def insert(self, key: int, row_id: int) -> None:
        """Insert (key, row_id). A duplicate key only appends the posting."""
        parent = self.nil
        x = self.root
        while x is not self.nil:
            parent = x
            if key == x.key:
                x.postings.append(row_id)
                self._posting_count += 1
                self._emit("rbtree.duplicate",
                           f"key {key} exists; append row {row_id} "
                           f"(postings={len(x.postings)})",
                           key=key, row_id=row_id)
                return
            x = x.left if key < x.key else x.right

        z = RBNode(key, RED)
        z.left = z.right = self.nil
        z.parent = parent
        z.postings.append(row_id)

        if parent is self.nil:
            self.root = z
        elif key < parent.key:
            parent.left = z
        else:
            parent.right = z

        self._distinct_keys += 1
        self._posting_count += 1
        self._emit("rbtree.insert",
                   f"insert key {key} (row {row_id}) as red node",
                   key=key, row_id=row_id)

        self._insert_fixup(z)

        if self._snapshot_after_fixup:
            self._sink.emit(TraceEvent(
                "rbtree.snapshot", f"tree after inserting key {key}",
                {"key": key, "tree": self},
            ))

    def get(self, key: int) -> List[int]:
        """Postings for key, in insertion order. Empty list if absent."""
        node = self._search_node(key)
        if node is self.nil:
            return []
        return list(node.postings)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, int) and self._search_node(key) is not self.nil

    def size_distinct_keys(self) -> int:
        """Number of nodes (distinct keys), not postings."""
        return self._distinct_keys

    def __len__(self) -> int:
        return self._distinct_keys

    @property
    def posting_count(self) -> int:
        return self._posting_count

    def items(self) -> Iterator[Tuple[int, List[int]]]:
        """In-order (key, postings) pairs."""
        stack: List[RBNode] = []
        x = self.root
        while stack or x is not self.nil:
            while x is not self.nil:
                stack.append(x)
                x = x.left
            x = stack.pop()
            yield x.key, list(x.postings)
            x = x.right

    def keys(self) -> List[int]:
        return [k for k, _ in self.items()]

    def height(self) -> int:
        """Number of nodes on the longest root-to-leaf path (0 when empty)."""
        return self._height(self.root)

    def black_height(self) -> int:
        """Black nodes on the leftmost path below the root, root excluded."""
        count = 0
        x = self.root
        while x is not self.nil:
            x = x.left
            if x.color == BLACK:
                count += 1
        return count

    # ─── Rotation ───────────────────────────────────────────────────

    def rotate_left(self, x: RBNode) -> None:
        """
        Rotate x down to the left; its right child takes its place.

              x                y
             / \\             / \\
            a   y     →      x   c
               / \\          / \\
              b   c         a   b
        """
        y = x.right
        x.right = y.left
        if y.left is not self.nil:
            y.left.parent = x
        y.parent = x.parent
        if x.parent is self.nil:
            self.root = y
        elif x is x.parent.left:
            x.parent.left = y
        else:
            x.parent.right = y
        y.left = x
        x.parent = y
        self._emit("rbtree.rotate_left", f"rotate left at {x.key}", key=x.key)

    def rotate_right(self, x: RBNode) -> None:
        """Mirror of rotate_left: x's left child takes its place."""
        y = x.left
        x.left = y.right
        if y.right is not self.nil:
            y.right.parent = x
        y.parent = x.parent
        if x.parent is self.nil:
            self.root = y
        elif x is x.parent.right:
            x.parent.right = y
        else:
            x.parent.left = y
        y.right = x
        x.parent = y
        self._emit("rbtree.rotate_right", f"rotate right at {x.key}", key=x.key)

    # ─── Fix-up ─────────────────────────────────────────────────────

    def _insert_fixup(self, z: RBNode) -> None:
        while z.parent.color == RED:
            # A red parent is never the root, so the grandparent is real.
            grand = z.parent.parent
            if z.parent is grand.left:
                uncle = grand.right
                if uncle.color == RED:
                    self._emit("rbtree.case1",
                               f"case 1 at {z.key}: recolor parent {z.parent.key}, "
                               f"uncle {uncle.key}, grandparent {grand.key}",
                               key=z.key, mirror=False)
                    z.parent.color = BLACK
                    uncle.color = BLACK
                    grand.color = RED
                    z = grand
                else:
                    if z is z.parent.right:
                        self._emit("rbtree.case2",
                                   f"case 2 at {z.key}: inner child, rotate parent left",
                                   key=z.key, mirror=False)
                        z = z.parent
                        self.rotate_left(z)
                    self._emit("rbtree.case3",
                               f"case 3 at {z.key}: recolor and rotate "
                               f"grandparent {z.parent.parent.key} right",
                               key=z.key, mirror=False)
                    z.parent.color = BLACK
                    z.parent.parent.color = RED
                    self.rotate_right(z.parent.parent)
            else:
                uncle = grand.left
                if uncle.color == RED:
                    self._emit("rbtree.case1",
                               f"case 1 (mirror) at {z.key}: recolor parent {z.parent.key}, "
                               f"uncle {uncle.key}, grandparent {grand.key}",
                               key=z.key, mirror=True)
                    z.parent.color = BLACK
                    uncle.color = BLACK
                    grand.color = RED
                    z = grand
                else:
                    if z is z.parent.left:
                        self._emit("rbtree.case2",
                                   f"case 2 (mirror) at {z.key}: inner child, rotate parent right",
                                   key=z.key, mirror=True)
                        z = z.parent
                        self.rotate_right(z)
                    self._emit("rbtree.case3",
                               f"case 3 (mirror) at {z.key}: recolor and rotate "
                               f"grandparent {z.parent.parent.key} left",
                               key=z.key, mirror=True)
                    z.parent.color = BLACK
                    z.parent.parent.color = RED
                    self.rotate_left(z.parent.parent)
        self.root.color = BLACK

    # ─── Helpers ────────────────────────────────────────────────────

    def _search_node(self, key: int) -> RBNode:
        x = self.root
        while x is not self.nil:
            if key == x.key:
                return x
            x = x.left if key < x.key else x.right
        return self.nil

    def _height(self, node: RBNode) -> int:
        if node is self.nil:
            return 0
        return 1 + max(self._height(node.left), self._height(node.right))

    def _emit(self, kind: str, message: str, **data) -> None:
        if not self._verbose:
            return
        self._sink.emit(TraceEvent(kind, message, data))

    # ─── Debug / Verification ───────────────────────────────────────

    def verify_structure(self) -> List[str]:
        """
        Check all red-black and ordering invariants.
        Returns list of issues found (empty = healthy).
        """
        issues: List[str] = []
        if self.nil.color != BLACK:
            issues.append("Sentinel is not black")
        if self.root.color != BLACK:
            issues.append(f"Root {self.root.key} is not black")
        if self.root is not self.nil and self.root.parent is not self.nil:
            issues.append(f"Root {self.root.key} has a parent")

        count = self._verify_node(self.root, None, None, issues)
        if count != self._distinct_keys:
            issues.append(
                f"Node count {count} does not match distinct key count "
                f"{self._distinct_keys}")
        return issues

    def _verify_node(self, node: RBNode, low: Optional[int],
                     high: Optional[int], issues: List[str]) -> int:
        """
        Iterative post-order walk. Returns the number of real nodes and
        records black-height mismatches, red-red pairs, order violations
        and broken parent links.
        """
        count = 0
        black_heights = {}
        stack: List[Tuple[RBNode, Optional[int], Optional[int], bool]] = [
            (node, low, high, False)]
        while stack:
            n, lo, hi, visited = stack.pop()
            if n is self.nil:
                continue
            if not visited:
                count += 1
                if lo is not None and n.key <= lo:
                    issues.append(f"Key {n.key} not greater than lower bound {lo}")
                if hi is not None and n.key >= hi:
                    issues.append(f"Key {n.key} not less than upper bound {hi}")
                for child in (n.left, n.right):
                    if child is not self.nil:
                        if child.parent is not n:
                            issues.append(f"Node {child.key} has wrong parent link")
                        if n.color == RED and child.color == RED:
                            issues.append(f"Red node {n.key} has red child {child.key}")
                stack.append((n, lo, hi, True))
                stack.append((n.right, n.key, hi, False))
                stack.append((n.left, lo, n.key, False))
            else:
                left_bh = black_heights.get(id(n.left), 0) + (n.left.color == BLACK)
                right_bh = black_heights.get(id(n.right), 0) + (n.right.color == BLACK)
                if left_bh != right_bh:
                    issues.append(
                        f"Black-height mismatch at {n.key}: left {left_bh}, right {right_bh}")
                black_heights[id(n)] = max(left_bh, right_bh)
        return count
