"""
HuffIndex Report Renderer
=========================
Formats index structures and query results as text.

Features:
  - Frequency tables and codebooks ("token -> code", sorted by token)
  - ASCII Huffman tree with 0/1 edge labels
  - ASCII red-black tree: key[color] (postings=n), NIL[B] leaves
  - Query results as aligned ASCII tables, "(no hit)" when empty
  - Error rendering with a classification prefix
  - Output goes to an explicit stream; nothing touches sys.stdout globally
"""

import sys
from typing import Dict, List, Optional, Sequence, TextIO

from indexing.diagnostics import TraceEvent, TraceSink
from indexing.huffman import Codebook, HuffmanLeaf, HuffmanNode
from indexing.rbtree import RBNode, RedBlackTree
from storage.table import MemoryTable


class Renderer:

    def __init__(self, output: TextIO = None):
        self.output = output or sys.stdout
        self.mode: str = "table"        # table, raw
        self.show_headers: bool = True
        self.show_nil: bool = True
        self.max_col_width: int = 50

    # ─── Codes ──────────────────────────────────────────────────────

    def render_frequency_table(self, frequencies: Dict[str, int]):
        self._print("Huffman frequency table:")
        for token in sorted(frequencies):
            self._print(f"  {token} : {frequencies[token]}")
        self._print("")

    def render_codebook(self, codebook: Codebook):
        for token, code in codebook.items():
            self._print(f"{token} -> {code}")

    def render_huffman_tree(self, codebook: Codebook):
        self._print("(Huffman tree; left=0, right=1)")
        self._huffman_ascii(codebook.root, "", True, "")

    def _huffman_ascii(self, node: HuffmanNode, prefix: str, is_tail: bool, edge: str):
        head = f"{edge} " if edge else ""
        branch = "└─ " if is_tail else "├─ "
        self._print(f"{prefix}{head}{branch}{node.label} [{node.frequency}]")
        if isinstance(node, HuffmanLeaf):
            return
        child_prefix = prefix + ("   " if is_tail else "│  ")
        self._huffman_ascii(node.left, child_prefix, False, "0")
        self._huffman_ascii(node.right, child_prefix, True, "1")

    # ─── Trees ──────────────────────────────────────────────────────

    def render_rb_tree(self, tree: RedBlackTree):
        self._print("(RB-tree: key[color], postings)")
        self._rb_ascii(tree, tree.root, "", True)

    def _rb_ascii(self, tree: RedBlackTree, node: RBNode, prefix: str, is_tail: bool):
        branch = "└─ " if is_tail else "├─ "
        if node is tree.nil:
            if self.show_nil:
                self._print(f"{prefix}{branch}NIL[B]")
            return
        self._print(f"{prefix}{branch}{node.key}[{node.color_name}] "
                    f"(postings={len(node.postings)})")
        child_prefix = prefix + ("   " if is_tail else "│  ")
        if node.left is not tree.nil or node.right is not tree.nil:
            self._rb_ascii(tree, node.left, child_prefix, False)
            self._rb_ascii(tree, node.right, child_prefix, True)

    def render_index_stats(self, name: str, distinct_keys: int):
        self._print(f"{name} index distinct keys: {distinct_keys}")

    # ─── Queries ────────────────────────────────────────────────────

    def render_query(self, title: str, row_ids: Sequence[int],
                     table: MemoryTable,
                     columns: Optional[List[str]] = None) -> int:
        """
        Render the rows behind a posting list.
        Returns number of rows rendered.
        """
        self._print(f"\n-- Query: {title} --")
        if not row_ids:
            self._print("(no hit)")
            return 0

        headers = ["row"] + list(columns or table.columns)
        rows = []
        for row_id in row_ids:
            row = table.get_row(row_id)
            if row is None:
                continue
            vals = {"row": row.row_id}
            for col in headers[1:]:
                vals[col] = row.get(col)
            rows.append(vals)

        if self.mode == "raw":
            if self.show_headers:
                self._print("|".join(headers))
            for vals in rows:
                self._print("|".join(self._format_value(vals.get(h)) for h in headers))
        else:
            widths = self._calculate_widths(headers, rows)
            if self.show_headers:
                self._print_table_separator(widths, headers)
                self._print_table_row(widths, headers, {h: h for h in headers})
            self._print_table_separator(widths, headers)
            for vals in rows:
                self._print_table_row(widths, headers, vals)
            self._print_table_separator(widths, headers)

        self._print(f"{len(rows)} row(s)")
        return len(rows)

    # ─── Messages ───────────────────────────────────────────────────

    def render_heading(self, text: str):
        self._print(f"\n== {text} ==")

    def render_message(self, message: str):
        if message:
            self._print(message)

    def render_error(self, error: Exception):
        """Render an error with classification prefix."""
        prefix = self._classify_error(type(error).__name__)
        self._print(f"{prefix}: {error}")

    # ─── Table Helpers ──────────────────────────────────────────────

    def _calculate_widths(self, headers: List[str], rows: List[Dict]) -> Dict[str, int]:
        widths = {}
        for h in headers:
            widths[h] = min(len(h), self.max_col_width)

        for row in rows:
            for h in headers:
                val = self._format_value(row.get(h))
                widths[h] = max(widths[h], min(len(val), self.max_col_width))

        return widths

    def _print_table_separator(self, widths: Dict[str, int], headers: List[str]):
        """Print +----+------+ separator line."""
        parts = ["+"]
        for h in headers:
            parts.append("-" * (widths[h] + 2) + "+")
        self._print("".join(parts))

    def _print_table_row(self, widths: Dict[str, int], headers: List[str], vals: Dict):
        """Print | col1 | col2 | row."""
        parts = ["|"]
        for h in headers:
            val_str = self._format_value(vals.get(h))
            if len(val_str) > self.max_col_width:
                val_str = val_str[:self.max_col_width - 3] + "..."
            w = widths[h]
            # Right-align numbers, left-align strings
            if isinstance(vals.get(h), int):
                parts.append(f" {val_str:>{w}} |")
            else:
                parts.append(f" {val_str:<{w}} |")
        self._print("".join(parts))

    def _format_value(self, value) -> str:
        if value is None:
            return "NULL"
        return str(value)

    def _classify_error(self, error_type: str) -> str:
        """Map error class name to user-friendly prefix."""
        mapping = {
            "EmptyInputError": "IndexError",
            "UnknownTokenError": "IndexError",
            "KeyCollisionError": "IndexError",
            "CsvFormatError": "InputError",
            "FileNotFoundError": "InputError",
            "ValueError": "InputError",
            "KeyboardInterrupt": "Interrupted",
        }
        return mapping.get(error_type, f"Error[{error_type}]")

    def _print(self, text: str):
        print(text, file=self.output)


class SnapshotSink(TraceSink):
    """
    Renders the tree carried by each rbtree.snapshot event.
    Other events are passed to an optional inner sink.
    """

    def __init__(self, renderer: Renderer, inner: Optional[TraceSink] = None):
        self.renderer = renderer
        self.inner = inner

    def emit(self, event: TraceEvent) -> None:
        if event.kind == "rbtree.snapshot":
            self.renderer.render_message(f"[snapshot] {event.message}")
            self.renderer.render_rb_tree(event.data["tree"])
        elif self.inner is not None:
            self.inner.emit(event)


class EchoSink(TraceSink):
    """Writes event messages through a renderer (used for --trace)."""

    def __init__(self, renderer: Renderer):
        self.renderer = renderer

    def emit(self, event: TraceEvent) -> None:
        if event.kind != "rbtree.snapshot":
            self.renderer.render_message(event.message)
