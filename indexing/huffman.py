"""
HuffIndex Code Builder
======================
Token-level Huffman coding. Each DISTINCT token of a column is a symbol;
the builder assigns it a variable-length binary code ("0"/"1" string).

Construction:
  - Every symbol starts as a leaf candidate.
  - Candidates are ordered by (frequency, tiebreak). The tiebreak is
    (1, token) for leaves and (0, "") for internal nodes, so on equal
    frequency an internal node sorts before any token, including "".
  - The two lowest candidates are merged (first popped = left child)
    until a single root remains.
  - Codes come from a root-to-leaf walk: "0" left, "1" right.
  - A single-symbol table gets the code "0" (no merges happen).

Codes are prefix-free by construction. They are used only as keys for
the tree index, never packed into a bit stream.
"""

import heapq
import itertools
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

from indexing.diagnostics import NULL_SINK, TraceEvent, TraceSink
from indexing.errors import EmptyInputError, UnknownTokenError

logger = logging.getLogger(__name__)


# ─── Code Tree ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class HuffmanLeaf:
    token: str
    frequency: int

    @property
    def tiebreak(self) -> Tuple[int, str]:
        return (1, self.token)

    @property
    def label(self) -> str:
        return f"'{self.token}'"


@dataclass(frozen=True)
class HuffmanInternal:
    frequency: int
    left: "HuffmanNode"
    right: "HuffmanNode"

    @property
    def tiebreak(self) -> Tuple[int, str]:
        return (0, "")

    @property
    def label(self) -> str:
        return "(internal)"


HuffmanNode = Union[HuffmanLeaf, HuffmanInternal]


# ─── Codebook ───────────────────────────────────────────────────────────────

class Codebook:
    """
    Immutable token -> code mapping plus the code tree it was derived from.

    Usage:
        cb = build_codebook({"mother": 5, "father": 3})
        cb.encode("mother")       # "1"
        cb.try_encode("uncle")    # None
    """

    def __init__(self, root: HuffmanNode, codes: Dict[str, str]):
        self._root = root
        self._codes = dict(codes)
        self._frequencies: Dict[str, int] = {}
        for leaf in _leaves(root):
            self._frequencies[leaf.token] = leaf.frequency

    @property
    def root(self) -> HuffmanNode:
        return self._root

    def encode(self, token: str) -> str:
        """Return the code for token. Raises UnknownTokenError if absent."""
        code = self._codes.get(token)
        if code is None:
            raise UnknownTokenError(token)
        return code

    def try_encode(self, token: str) -> Optional[str]:
        """Return the code for token, or None if the token has no code."""
        return self._codes.get(token)

    def frequency(self, token: str) -> int:
        if token not in self._frequencies:
            raise UnknownTokenError(token)
        return self._frequencies[token]

    def items(self) -> List[Tuple[str, str]]:
        """(token, code) pairs sorted by token."""
        return sorted(self._codes.items())

    def weighted_length(self) -> int:
        """Sum of frequency * code length over all symbols."""
        return sum(self._frequencies[t] * len(c) for t, c in self._codes.items())

    def __len__(self) -> int:
        return len(self._codes)

    def __contains__(self, token: object) -> bool:
        return token in self._codes

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._codes))

    def __repr__(self) -> str:
        return f"Codebook({len(self._codes)} symbols)"


# ─── Builder ────────────────────────────────────────────────────────────────

def build_codebook(frequencies: Mapping[str, int],
                   sink: TraceSink = NULL_SINK) -> Codebook:
    """
    Build an optimal prefix code for the given token frequencies.

    Raises EmptyInputError for an empty table and ValueError for a
    non-positive count.
    """
    if not frequencies:
        raise EmptyInputError()

    for token, freq in frequencies.items():
        if freq <= 0:
            raise ValueError(f"Frequency for {token!r} must be positive, got {freq}")

    # Heap entries: (frequency, tiebreak, seq, node). The sequence number
    # keeps heapq from ever comparing node objects.
    seq = itertools.count()
    heap: List[Tuple[int, Tuple[int, str], int, HuffmanNode]] = []
    for token, freq in frequencies.items():
        leaf = HuffmanLeaf(token, freq)
        heap.append((freq, leaf.tiebreak, next(seq), leaf))
    heapq.heapify(heap)

    if len(heap) == 1:
        only = heap[0][3]
        logger.debug("Single-symbol codebook for %r", only.token)
        return Codebook(only, {only.token: "0"})

    step = 1
    while len(heap) > 1:
        a = heapq.heappop(heap)[3]
        b = heapq.heappop(heap)[3]
        merged = HuffmanInternal(a.frequency + b.frequency, a, b)
        sink.emit(TraceEvent(
            "huffman.merge",
            f"Merge #{step}: {a.label}[{a.frequency}] + "
            f"{b.label}[{b.frequency}] -> {merged.frequency}",
            {"step": step, "left": a.label, "right": b.label,
             "left_freq": a.frequency, "right_freq": b.frequency,
             "freq": merged.frequency},
        ))
        heapq.heappush(heap, (merged.frequency, merged.tiebreak, next(seq), merged))
        step += 1

    root = heap[0][3]
    codes = assign_codes(root)
    logger.debug("Built codebook: %d symbols, %d merges", len(codes), step - 1)
    return Codebook(root, codes)


def assign_codes(root: HuffmanNode) -> Dict[str, str]:
    """
    Walk the code tree and collect each leaf's path.
    Iterative to stay clear of the recursion limit on skewed trees.
    """
    codes: Dict[str, str] = {}
    stack: List[Tuple[HuffmanNode, str]] = [(root, "")]
    while stack:
        node, path = stack.pop()
        if isinstance(node, HuffmanLeaf):
            codes[node.token] = path or "0"
        else:
            stack.append((node.right, path + "1"))
            stack.append((node.left, path + "0"))
    return codes


def _leaves(root: HuffmanNode) -> Iterator[HuffmanLeaf]:
    stack: List[HuffmanNode] = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, HuffmanLeaf):
            yield node
        else:
            stack.append(node.right)
            stack.append(node.left)


def is_prefix_free(codes: Mapping[str, str]) -> bool:
    """True if no code is a prefix of another code."""
    ordered = sorted(codes.values())
    # After sorting, a prefix always sorts immediately before some extension.
    for prev, cur in zip(ordered, ordered[1:]):
        if cur.startswith(prev):
            return False
    return True
