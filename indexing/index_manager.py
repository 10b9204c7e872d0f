"""
HuffIndex Index Manager
=======================
Column index lifecycle: count token frequencies, build the codebook,
and load (token, row_id) pairs into a red-black tree.

Path of a value:
  token → Codebook.encode → code → code_to_key → int key → RedBlackTree

Queries take the same path and return [] when the token has no code.

Concurrency: single-writer assumed. Guard add() with one external lock
if several threads write; find() is safe alongside other reads only.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from indexing.diagnostics import NULL_SINK, TraceSink
from indexing.errors import KeyCollisionError
from indexing.huffman import Codebook, build_codebook
from indexing.key_encoding import DEFAULT_KEY_BITS, code_to_key
from indexing.rbtree import RedBlackTree
from storage.table import MemoryTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexConfig:
    key_bits: int = DEFAULT_KEY_BITS
    strict_keys: bool = True            # raise on hashed-key collisions
    verbose: bool = False               # send tree steps to the sink
    snapshot_after_fixup: bool = False  # send tree snapshots to the sink


class ColumnIndex:
    """
    Equality index over one column.

    Usage:
        cb = build_codebook({"mother": 5, "father": 3})
        idx = ColumnIndex("guardian", cb)
        idx.add("mother", 0)
        idx.find("mother")   # [0]
        idx.find("uncle")    # []
    """

    def __init__(self, name: str, codebook: Codebook,
                 config: Optional[IndexConfig] = None,
                 sink: TraceSink = NULL_SINK):
        self._name = name
        self._codebook = codebook
        self._config = config or IndexConfig()
        self._tree = RedBlackTree(
            sink=sink,
            verbose=self._config.verbose,
            snapshot_after_fixup=self._config.snapshot_after_fixup,
        )
        # key -> code that produced it, for collision detection
        self._key_codes: Dict[int, str] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def codebook(self) -> Codebook:
        return self._codebook

    @property
    def tree(self) -> RedBlackTree:
        return self._tree

    @property
    def config(self) -> IndexConfig:
        return self._config

    def add(self, token: str, row_id: int) -> None:
        """
        Index one row's token.
        Raises UnknownTokenError if token is not in the codebook.
        """
        if not isinstance(row_id, int) or isinstance(row_id, bool) or row_id < 0:
            raise ValueError(f"Row id must be a non-negative integer, got {row_id!r}")
        code = self._codebook.encode(token)
        key = code_to_key(code, self._config.key_bits)
        if self._config.strict_keys:
            existing = self._key_codes.setdefault(key, code)
            if existing != code:
                raise KeyCollisionError(key, existing, code)
        self._tree.insert(key, row_id)

    def find(self, token: str) -> List[int]:
        """Row ids for token in insertion order; [] for unseen tokens."""
        code = self._codebook.try_encode(token)
        if code is None:
            return []
        return self._tree.get(code_to_key(code, self._config.key_bits))

    def key_for(self, token: str) -> Optional[int]:
        code = self._codebook.try_encode(token)
        if code is None:
            return None
        return code_to_key(code, self._config.key_bits)

    def size(self) -> int:
        """Number of distinct keys stored."""
        return self._tree.size_distinct_keys()

    def __len__(self) -> int:
        return self.size()

    def __repr__(self) -> str:
        return f"ColumnIndex({self._name!r}, keys={self.size()})"


# ─── Building ───────────────────────────────────────────────────────────────

def token_frequencies(pairs: Iterable[Tuple[int, str]]) -> Dict[str, int]:
    """Count occurrences of each token in (row_id, token) pairs."""
    return dict(Counter(token for _, token in pairs))


def index_pairs(name: str, pairs: List[Tuple[int, str]],
                config: Optional[IndexConfig] = None,
                sink: TraceSink = NULL_SINK) -> ColumnIndex:
    """
    Build a codebook from (row_id, token) pairs and index every pair
    in the given order.
    """
    codebook = build_codebook(token_frequencies(pairs), sink=sink)
    index = ColumnIndex(name, codebook, config=config, sink=sink)
    for row_id, token in pairs:
        index.add(token, row_id)
    logger.info("Index '%s': %d rows, %d distinct keys",
                name, len(pairs), index.size())
    return index


def build_index(table: MemoryTable, column_name: str,
                config: Optional[IndexConfig] = None,
                sink: TraceSink = NULL_SINK) -> ColumnIndex:
    """
    Build an index over one column of a table.

    1. Scans the table for all values in the target column.
    2. Counts token frequencies and builds the codebook.
    3. Inserts each (token, row_id) pair in row order.

    Raises ValueError if the column does not exist and EmptyInputError
    if the column holds no values.
    """
    if not table.has_column(column_name):
        raise ValueError(
            f"Column '{column_name}' not found in table '{table.name}'. "
            f"Available: {table.columns}"
        )
    pairs = list(table.column_values(column_name))
    return index_pairs(column_name, pairs, config=config, sink=sink)
