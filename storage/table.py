"""
HuffIndex Memory Table
======================
Ordered in-memory row store with id-based lookup.

Rows are kept in insertion order and addressed by a dense row id
(0, 1, 2, ...). Row ids are assigned on append and never reused.

Scan order:
  Full table scan is deterministic: ascending row id, which is also
  insertion order. Index posting lists inherit this order.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple


@dataclass
class Row:
    row_id: int
    values: Dict[str, str] = field(default_factory=dict)

    def get(self, column: str, default: Optional[str] = None) -> Optional[str]:
        return self.values.get(column, default)


class MemoryTable:
    """
    Provides:
    - append(): Add a row, returns its row id
    - get_row(): Fetch a row by id (None if out of range)
    - scan(): Iterate (row_id, row) in insertion order
    - column_values(): Iterate (row_id, value) for one column
    """

    def __init__(self, columns: Sequence[str], name: str = ""):
        self._columns: List[str] = [c.strip() for c in columns]
        self._name = name
        self._rows: List[Row] = []

    @property
    def columns(self) -> List[str]:
        return list(self._columns)

    @property
    def name(self) -> str:
        return self._name

    def has_column(self, column: str) -> bool:
        return column in self._columns

    def append(self, values) -> int:
        """
        Append a row given as a dict (column -> value) or a sequence
        aligned with the table's columns. Returns the new row id.
        """
        if isinstance(values, dict):
            unknown = [c for c in values if c not in self._columns]
            if unknown:
                raise ValueError(f"Unknown column(s): {unknown}. Available: {self._columns}")
            row_values = dict(values)
        else:
            values = list(values)
            if len(values) != len(self._columns):
                raise ValueError(
                    f"Expected {len(self._columns)} values, got {len(values)}")
            row_values = dict(zip(self._columns, values))

        row_id = len(self._rows)
        self._rows.append(Row(row_id, row_values))
        return row_id

    def get_row(self, row_id: int) -> Optional[Row]:
        if row_id < 0 or row_id >= len(self._rows):
            return None
        return self._rows[row_id]

    def scan(self) -> Iterator[Tuple[int, Row]]:
        for row in self._rows:
            yield row.row_id, row

    def column_values(self, column: str) -> Iterator[Tuple[int, str]]:
        """(row_id, value) for every row that has a value in column."""
        if column not in self._columns:
            raise ValueError(
                f"Column '{column}' not found in table '{self._name}'. "
                f"Available: {self._columns}"
            )
        for row in self._rows:
            value = row.values.get(column)
            if value is None:
                continue
            yield row.row_id, value

    def __len__(self) -> int:
        return len(self._rows)
