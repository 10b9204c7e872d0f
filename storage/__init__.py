"""
HuffIndex Storage
=================
Public API for the storage layer.

Usage:
    from storage import MemoryTable, Row, load_csv, CsvFormatError
"""

from storage.table import MemoryTable, Row
from storage.csv_loader import load_csv, CsvFormatError

__all__ = [
    "MemoryTable", "Row",
    "load_csv", "CsvFormatError",
]
