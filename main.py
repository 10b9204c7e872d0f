"""
HuffIndex — Huffman-coded Red-Black Tree Index
==============================================
Entry point for the index report.

Usage:
    python main.py <csv> [options] [out.txt]

Options:
    --help              Show help
    -c, --column NAME   Index this column (repeatable)
    -q, --query C=V     Run an equality query (repeatable)
    -o PATH             Also write the report to PATH
    --trace             Print Huffman merges and RB-tree fix-up steps
    --rb-snap           Print the RB-tree after each fix-up
    --key-bits N        Integer key width (default 32)
    --log-level LEVEL   Logging level for diagnostics (default WARNING)

Default:
    Columns guardian and absences; queries guardian=mother, absences=0.
"""

import logging
import sys
from typing import List, Optional, TextIO, Tuple

DEFAULT_COLUMNS = ["guardian", "absences"]
DEFAULT_QUERIES = [("guardian", "mother"), ("absences", "0")]


def print_help():
    print("""
HuffIndex — Huffman-coded Red-Black Tree Index

Usage:
    python main.py <csv> [out.txt]                  Report to console (and file)
    python main.py <csv> -o out.txt --rb-snap       Include tree snapshots
    python main.py <csv> -c guardian -q guardian=father

Options:
    --help              Show this help
    -c, --column NAME   Column to index (repeatable; default guardian, absences)
    -q, --query C=V     Equality query (repeatable; default guardian=mother, absences=0)
    -o PATH             Tee the report to PATH
    --trace             Print Huffman merges and RB-tree fix-up steps
    --rb-snap           Print the RB-tree after each fix-up
    --key-bits N        Integer key width, 8..64 (default 32)
    --log-level LEVEL   DEBUG, INFO, WARNING, ERROR (default WARNING)
""")


class TeeOutput:
    """Text stream that writes to several streams at once."""

    def __init__(self, *streams: TextIO):
        self.streams = streams

    def write(self, text: str) -> int:
        for s in self.streams:
            s.write(text)
        return len(text)

    def flush(self) -> None:
        for s in self.streams:
            s.flush()


def run_report(csv_path: str, columns: List[str], queries: List[Tuple[str, str]],
               output: TextIO, *, trace: bool = False, snapshots: bool = False,
               key_bits: Optional[int] = None) -> int:
    """
    Build one index per column and print the report.
    Returns a process exit code.
    """
    from cli.renderer import EchoSink, Renderer, SnapshotSink
    from indexing.diagnostics import FanoutSink, LoggingSink
    from indexing.index_manager import IndexConfig, build_index, token_frequencies
    from storage.csv_loader import load_csv

    renderer = Renderer(output)
    try:
        table = load_csv(csv_path, required_columns=columns)
    except Exception as e:
        renderer.render_error(e)
        return 1

    # DEBUG logging receives the same step events as --trace
    log_steps = logging.getLogger("indexing").isEnabledFor(logging.DEBUG)
    config = IndexConfig(
        verbose=trace or log_steps,
        snapshot_after_fixup=snapshots,
        **({"key_bits": key_bits} if key_bits is not None else {}),
    )
    sink = FanoutSink(
        LoggingSink() if log_steps else None,
        EchoSink(renderer) if trace else None,
    )
    if snapshots:
        sink = SnapshotSink(renderer, inner=sink)

    indexes = {}
    try:
        for col in columns:
            if trace:
                renderer.render_heading(f"{col.capitalize()} Huffman build")
                renderer.render_frequency_table(
                    token_frequencies(table.column_values(col)))
            indexes[col] = build_index(table, col, config=config, sink=sink)
    except Exception as e:
        renderer.render_error(e)
        return 1

    for col, idx in indexes.items():
        renderer.render_heading(f"{col.capitalize()} Huffman Codebook")
        renderer.render_codebook(idx.codebook)

    for col, idx in indexes.items():
        renderer.render_heading(f"{col.capitalize()} Huffman ASCII Tree")
        renderer.render_huffman_tree(idx.codebook)

    renderer.render_message("")
    for col, idx in indexes.items():
        renderer.render_index_stats(col.capitalize(), idx.size())

    for col, idx in indexes.items():
        renderer.render_heading(f"{col.capitalize()} RB-tree")
        renderer.render_rb_tree(idx.tree)

    for col, value in queries:
        if col not in indexes:
            renderer.render_message(f"\n-- Query: {col}={value} --")
            renderer.render_message(f"(column '{col}' is not indexed)")
            continue
        renderer.render_query(f"{col}={value}", indexes[col].find(value),
                              table, columns)
    return 0


def _parse_query(text: str) -> Tuple[str, str]:
    if "=" not in text:
        raise ValueError(f"Query must be COLUMN=VALUE, got: {text}")
    col, value = text.split("=", 1)
    return col.strip(), value.strip()


def main(argv: Optional[List[str]] = None) -> int:
    """Parse CLI arguments and dispatch."""
    args = sys.argv[1:] if argv is None else argv

    if not args or "--help" in args or "-h" in args:
        print_help()
        return 0 if args else 1

    csv_path = None
    out_path = None
    columns: List[str] = []
    queries: List[Tuple[str, str]] = []
    trace = False
    snapshots = False
    key_bits = None
    log_level = "WARNING"

    i = 0
    try:
        while i < len(args):
            a = args[i]
            if a in ("-c", "--column") and i + 1 < len(args):
                columns.append(args[i + 1])
                i += 2
            elif a in ("-q", "--query") and i + 1 < len(args):
                queries.append(_parse_query(args[i + 1]))
                i += 2
            elif a == "-o" and i + 1 < len(args):
                out_path = args[i + 1]
                i += 2
            elif a == "--key-bits" and i + 1 < len(args):
                key_bits = int(args[i + 1])
                i += 2
            elif a == "--log-level" and i + 1 < len(args):
                log_level = args[i + 1].upper()
                i += 2
            elif a == "--trace":
                trace = True
                i += 1
            elif a in ("--rb-snap", "--rb-snapshots"):
                snapshots = True
                i += 1
            elif a.startswith("-"):
                print(f"Unknown option: {a}", file=sys.stderr)
                print_help()
                return 1
            elif csv_path is None:
                csv_path = a
                i += 1
            elif out_path is None:
                out_path = a
                i += 1
            else:
                print(f"Unexpected argument: {a}", file=sys.stderr)
                return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if csv_path is None:
        print("Error: CSV path is required", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    columns = columns or list(DEFAULT_COLUMNS)
    if not queries:
        queries = [q for q in DEFAULT_QUERIES if q[0] in columns]

    if out_path is None:
        return run_report(csv_path, columns, queries, sys.stdout,
                          trace=trace, snapshots=snapshots, key_bits=key_bits)

    with open(out_path, "w", encoding="utf-8") as f:
        print(f"[INFO] Output is being saved to: {out_path}", file=sys.stderr)
        return run_report(csv_path, columns, queries, TeeOutput(sys.stdout, f),
                          trace=trace, snapshots=snapshots, key_bits=key_bits)


if __name__ == "__main__":
    sys.exit(main())
