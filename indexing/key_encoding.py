"""
HuffIndex Key Encoding
======================
Maps a Huffman code ("0"/"1" string) to an integer tree key.

Encoding rules:
  DIRECT → prepend "1" and parse as base 2. The head bit keeps leading
           zeros significant ("01" → 0b101 = 5, "1" → 0b11 = 3).
           Used when the value fits a signed integer of key_bits width.
  HASHED → otherwise, first 8 bytes of SHA-256 over the prefixed string,
           read as a signed big-endian int64 and folded to key_bits.

Known limitation:
  The hashed path is not collision-free, neither against other hashed
  keys nor against direct keys. ColumnIndex detects collisions when
  strict key checking is enabled (the default).

Deterministic across runs and processes (no use of builtin hash()).
"""

import hashlib
import struct

DEFAULT_KEY_BITS = 32

_MIN_KEY_BITS = 8
_MAX_KEY_BITS = 64


def code_to_key(code: str, key_bits: int = DEFAULT_KEY_BITS) -> int:
    """
    Convert a binary code to an integer key.

    Raises ValueError if code contains characters other than 0/1
    or if key_bits is out of range.
    """
    _check_key_bits(key_bits)
    _check_code(code)

    with_head = "1" + code
    if len(with_head) <= key_bits - 1:
        return int(with_head, 2)
    return _hash_key(with_head, key_bits)


def is_direct_key(code: str, key_bits: int = DEFAULT_KEY_BITS) -> bool:
    """True if code_to_key() uses the direct path for this code."""
    _check_key_bits(key_bits)
    _check_code(code)
    return len(code) + 1 <= key_bits - 1


def max_direct_code_length(key_bits: int = DEFAULT_KEY_BITS) -> int:
    """Longest code that still maps directly (head bit + sign bit reserved)."""
    _check_key_bits(key_bits)
    return key_bits - 2


def _hash_key(with_head: str, key_bits: int) -> int:
    """
    Fallback: SHA-256 prefix as a signed int64, folded into a signed
    integer of key_bits width.
    """
    digest = hashlib.sha256(with_head.encode("ascii")).digest()
    val = struct.unpack(">q", digest[:8])[0]
    if key_bits == 64:
        return val
    # Keep the low key_bits bits and re-sign them
    mask = (1 << key_bits) - 1
    folded = val & mask
    if folded >= 1 << (key_bits - 1):
        folded -= 1 << key_bits
    return folded


def _check_code(code: str) -> None:
    if not code:
        raise ValueError("Code must be a non-empty binary string")
    if code.strip("01"):
        raise ValueError(f"Code must contain only '0' and '1': {code!r}")


def _check_key_bits(key_bits: int) -> None:
    if not _MIN_KEY_BITS <= key_bits <= _MAX_KEY_BITS:
        raise ValueError(
            f"key_bits must be between {_MIN_KEY_BITS} and {_MAX_KEY_BITS}, got {key_bits}"
        )
