"""
HuffIndex Indexing Module
=========================
Equality index: Huffman-coded tokens stored in a red-black tree.

Components:
  - huffman: optimal prefix codes from token frequencies
  - key_encoding: code string → integer tree key
  - rbtree: red-black tree with posting lists
  - index_manager: ColumnIndex (add / find / size) and build helpers
  - diagnostics: trace sinks for merge and fix-up steps
"""

from indexing.errors import (
    HuffIndexError, EmptyInputError, UnknownTokenError, KeyCollisionError,
)
from indexing.huffman import Codebook, build_codebook
from indexing.key_encoding import code_to_key
from indexing.rbtree import RedBlackTree
from indexing.index_manager import ColumnIndex, IndexConfig, build_index

__all__ = [
    "HuffIndexError", "EmptyInputError", "UnknownTokenError", "KeyCollisionError",
    "Codebook", "build_codebook",
    "code_to_key",
    "RedBlackTree",
    "ColumnIndex", "IndexConfig", "build_index",
]
