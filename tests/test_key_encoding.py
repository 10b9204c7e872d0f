"""
HuffIndex Key Encoding Tests
============================
Tests for code → integer key mapping: head bit, width limits,
hashed fallback, and input validation.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from indexing.key_encoding import (
    DEFAULT_KEY_BITS, code_to_key, is_direct_key, max_direct_code_length,
)


class TestDirectKeys:

    def test_head_bit_prepended(self):
        assert code_to_key("0") == 0b10
        assert code_to_key("1") == 0b11
        assert code_to_key("01") == 0b101
        assert code_to_key("001") == 0b1001

    def test_leading_zeros_distinguished(self):
        codes = ["1", "01", "001", "0001", "0", "00", "000"]
        keys = [code_to_key(c) for c in codes]
        assert len(set(keys)) == len(codes)

    def test_direct_keys_positive(self):
        for code in ["0", "1", "0110", "1" * 30]:
            assert code_to_key(code) > 0

    def test_longest_direct_code(self):
        code = "0" * max_direct_code_length()
        assert is_direct_key(code)
        assert code_to_key(code) == 1 << len(code)
        assert code_to_key(code).bit_length() <= DEFAULT_KEY_BITS - 1

    def test_deterministic(self):
        assert code_to_key("0101") == code_to_key("0101")


class TestHashedKeys:

    def test_fallback_used_past_width(self):
        code = "1" * (max_direct_code_length() + 1)
        assert not is_direct_key(code)
        key = code_to_key(code)
        assert key == code_to_key(code)
        assert -(1 << 31) <= key < (1 << 31)

    def test_fallback_respects_width(self):
        code = "01" * 40
        for bits in (8, 16, 32, 63, 64):
            key = code_to_key(code, key_bits=bits)
            assert -(1 << (bits - 1)) <= key < (1 << (bits - 1))

    def test_wider_keys_stay_direct(self):
        code = "1" * 40
        assert not is_direct_key(code, 32)
        assert is_direct_key(code, 64)
        assert code_to_key(code, 64) == int("1" + code, 2)

    def test_distinct_long_codes_differ(self):
        a = code_to_key("0" * 40)
        b = code_to_key("0" * 39 + "1")
        assert a != b


class TestValidation:

    def test_empty_code_rejected(self):
        with pytest.raises(ValueError, match="non-empty"):
            code_to_key("")

    def test_non_binary_rejected(self):
        with pytest.raises(ValueError, match="only"):
            code_to_key("012")

    def test_is_direct_key_validates_code(self):
        with pytest.raises(ValueError, match="non-empty"):
            is_direct_key("")
        with pytest.raises(ValueError, match="only"):
            is_direct_key("10a")

    def test_key_bits_range(self):
        with pytest.raises(ValueError, match="key_bits"):
            code_to_key("0", key_bits=4)
        with pytest.raises(ValueError, match="key_bits"):
            code_to_key("0", key_bits=65)
