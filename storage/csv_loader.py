"""
HuffIndex CSV Loader
====================
Reads a CSV file with a header row into a MemoryTable.

Rules:
  - First non-empty line is the header; column names are stripped.
  - Blank lines are skipped.
  - Rows shorter than the header are skipped (logged at WARNING).
  - Values are stripped strings. Numeric columns stay textual: the
    index treats every value as a token.
"""

import csv
import logging
import os
from typing import Iterable, Optional

from storage.table import MemoryTable

logger = logging.getLogger(__name__)


class CsvFormatError(Exception):
    """CSV file cannot be loaded (empty, or required columns missing)."""
    pass


def load_csv(path: str, required_columns: Optional[Iterable[str]] = None,
             delimiter: str = ",") -> MemoryTable:
    """
    Load a CSV file into a MemoryTable named after the file.

    Raises FileNotFoundError if path does not exist and CsvFormatError
    for an empty file or missing required columns.
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"CSV file not found: {path}")

    name = os.path.splitext(os.path.basename(path))[0]

    with open(path, "r", encoding="utf-8", newline="") as f:
        reader = csv.reader(f, delimiter=delimiter)
        header = None
        for fields in reader:
            if any(v.strip() for v in fields):
                header = [v.strip() for v in fields]
                break
        if header is None:
            raise CsvFormatError(f"Empty CSV: {path}")

        missing = [c for c in (required_columns or []) if c not in header]
        if missing:
            raise CsvFormatError(
                f"CSV header must contain {missing}. Found: {','.join(header)}")

        table = MemoryTable(header, name=name)
        skipped = 0
        for line_no, fields in enumerate(reader, start=2):
            if not any(v.strip() for v in fields):
                continue
            if len(fields) < len(header):
                skipped += 1
                logger.warning("%s:%d: expected %d fields, got %d; row skipped",
                               path, line_no, len(header), len(fields))
                continue
            table.append([v.strip() for v in fields[:len(header)]])

    logger.info("Loaded %d rows from %s (%d skipped)", len(table), path, skipped)
    return table
