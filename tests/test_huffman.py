"""
HuffIndex Code Builder Tests
============================
Tests for Huffman codebook construction: prefix-freedom, the
single-symbol case, optimality, tie-breaking, lookups, and tracing.
"""

import itertools
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from indexing.diagnostics import RecordingSink
from indexing.errors import EmptyInputError, UnknownTokenError
from indexing.huffman import (
    HuffmanInternal, HuffmanLeaf, assign_codes, build_codebook, is_prefix_free,
)


GUARDIAN_FREQ = {"mother": 5, "father": 3, "other": 1, "none": 1}


# ═══════════════════════════════════════════════════════════════════
# Construction
# ═══════════════════════════════════════════════════════════════════

class TestBuildCodebook:

    def test_empty_input_rejected(self):
        with pytest.raises(EmptyInputError):
            build_codebook({})

    def test_non_positive_frequency_rejected(self):
        with pytest.raises(ValueError, match="positive"):
            build_codebook({"a": 2, "b": 0})

    def test_single_symbol_gets_zero(self):
        cb = build_codebook({"only": 7})
        assert cb.encode("only") == "0"
        assert len(cb) == 1
        assert isinstance(cb.root, HuffmanLeaf)

    def test_one_entry_per_symbol(self):
        cb = build_codebook(GUARDIAN_FREQ)
        assert len(cb) == 4
        assert set(cb) == set(GUARDIAN_FREQ)

    def test_codes_are_binary_and_non_empty(self):
        cb = build_codebook(GUARDIAN_FREQ)
        for _, code in cb.items():
            assert code
            assert set(code) <= {"0", "1"}

    def test_prefix_free(self):
        cb = build_codebook(GUARDIAN_FREQ)
        codes = dict(cb.items())
        for a, b in itertools.permutations(codes, 2):
            assert not codes[b].startswith(codes[a]), (a, b)
        assert is_prefix_free(codes)

    def test_prefix_free_many_symbols(self):
        freq = {f"t{i}": (i * 7) % 13 + 1 for i in range(60)}
        cb = build_codebook(freq)
        assert is_prefix_free(dict(cb.items()))
        assert len(cb) == 60

    def test_most_frequent_has_shortest_code(self):
        cb = build_codebook({"a": 5, "b": 3, "c": 1, "d": 1})
        a_len = len(cb.encode("a"))
        for tok in ("b", "c", "d"):
            assert a_len <= len(cb.encode(tok))

    def test_known_code_lengths(self):
        # c+d -> 2, +b -> 5, +a -> 10
        cb = build_codebook({"a": 5, "b": 3, "c": 1, "d": 1})
        assert len(cb.encode("a")) == 1
        assert len(cb.encode("b")) == 2
        assert len(cb.encode("c")) == 3
        assert len(cb.encode("d")) == 3
        assert cb.weighted_length() == 5 * 1 + 3 * 2 + 1 * 3 + 1 * 3

    def test_guardian_codebook_is_deterministic(self):
        # Merges: none+other -> 2; (internal 2)+father -> 5;
        # (internal 5) before mother on the tie -> root 10.
        cb = build_codebook(GUARDIAN_FREQ)
        assert dict(cb.items()) == {
            "none": "000",
            "other": "001",
            "father": "01",
            "mother": "1",
        }
        assert dict(build_codebook(GUARDIAN_FREQ).items()) == dict(cb.items())

    def test_equal_frequencies_ordered_by_token(self):
        cb = build_codebook({"b": 1, "a": 1})
        assert cb.encode("a") == "0"
        assert cb.encode("b") == "1"

    def test_internal_node_sorts_before_token_on_tie(self):
        # a+b -> internal[2]; tie with c[2]: internal pops first (left)
        cb = build_codebook({"a": 1, "b": 1, "c": 2})
        assert cb.encode("c") == "1"
        assert cb.encode("a") == "00"
        assert cb.encode("b") == "01"

    def test_internal_node_sorts_before_empty_token_on_tie(self):
        # a+b -> internal[2]; ties with the blank-cell token ""[2]
        cb = build_codebook({"": 2, "a": 1, "b": 1})
        assert cb.encode("") == "1"
        assert cb.encode("a") == "00"
        assert cb.encode("b") == "01"
        assert isinstance(cb.root.left, HuffmanInternal)

    def test_root_frequency_is_total(self):
        cb = build_codebook(GUARDIAN_FREQ)
        assert isinstance(cb.root, HuffmanInternal)
        assert cb.root.frequency == sum(GUARDIAN_FREQ.values())

    def test_optimal_against_fixed_length(self):
        freq = {"a": 45, "b": 13, "c": 12, "d": 16, "e": 9, "f": 5}
        cb = build_codebook(freq)
        # Classic textbook example: optimal cost is 224
        assert cb.weighted_length() == 224
        assert cb.weighted_length() <= 3 * sum(freq.values())


# ═══════════════════════════════════════════════════════════════════
# Lookups
# ═══════════════════════════════════════════════════════════════════

class TestCodebookLookup:

    def test_encode_unknown_raises(self):
        cb = build_codebook(GUARDIAN_FREQ)
        with pytest.raises(UnknownTokenError) as exc:
            cb.encode("uncle")
        assert exc.value.token == "uncle"

    def test_try_encode_unknown_returns_none(self):
        cb = build_codebook(GUARDIAN_FREQ)
        assert cb.try_encode("uncle") is None
        assert cb.try_encode("mother") == cb.encode("mother")

    def test_contains_and_frequency(self):
        cb = build_codebook(GUARDIAN_FREQ)
        assert "father" in cb
        assert "uncle" not in cb
        assert cb.frequency("father") == 3
        with pytest.raises(UnknownTokenError):
            cb.frequency("uncle")

    def test_items_sorted_by_token(self):
        cb = build_codebook(GUARDIAN_FREQ)
        tokens = [t for t, _ in cb.items()]
        assert tokens == sorted(tokens)

    def test_assign_codes_matches_codebook(self):
        cb = build_codebook(GUARDIAN_FREQ)
        assert assign_codes(cb.root) == dict(cb.items())


# ═══════════════════════════════════════════════════════════════════
# Tracing
# ═══════════════════════════════════════════════════════════════════

class TestMergeTrace:

    def test_merge_events(self):
        sink = RecordingSink()
        build_codebook(GUARDIAN_FREQ, sink=sink)
        merges = sink.of_kind("huffman.merge")
        assert len(merges) == len(GUARDIAN_FREQ) - 1
        assert [m.data["step"] for m in merges] == [1, 2, 3]
        assert merges[0].message == "Merge #1: 'none'[1] + 'other'[1] -> 2"
        assert merges[-1].data["freq"] == 10

    def test_single_symbol_has_no_merges(self):
        sink = RecordingSink()
        build_codebook({"x": 3}, sink=sink)
        assert sink.events == []

    def test_trace_does_not_change_codes(self):
        plain = build_codebook(GUARDIAN_FREQ)
        traced = build_codebook(GUARDIAN_FREQ, sink=RecordingSink())
        assert dict(plain.items()) == dict(traced.items())
