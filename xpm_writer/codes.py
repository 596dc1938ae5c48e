from __future__ import annotations

"""
Palette code primitives.

Exports:
- chars_per_pixel(ncols) -> int
- encode_index(idx, cpp) -> str
- encode_index_rows(indices, cpp) -> uint8 [H, W*cpp]
- encode_hex(rgb) -> str

Notes:
- Codes are radix-64 over BASE64_ALPHABET, most significant 6 bits first,
  padded on the left with the alphabet's zero symbol ("A").
"""

import numpy as np
from numpy.typing import NDArray

from .constants import BASE64_ALPHABET, BITS_PER_CHAR, RGB_MASK
from .core_types import IndexImage

_ALPHABET_U8: NDArray[np.uint8] = np.frombuffer(
    BASE64_ALPHABET.encode("ascii"), dtype=np.uint8
)
_CHAR_MASK = (1 << BITS_PER_CHAR) - 1


def chars_per_pixel(ncols: int) -> int:
    """Characters per palette code: ceil(bit_length(ncols) / 6), 0 for no colours."""
    if ncols < 0:
        raise ValueError(f"colour count must be >= 0, got {ncols}")
    bits = int(ncols).bit_length()
    return (bits + BITS_PER_CHAR - 1) // BITS_PER_CHAR


def encode_index(idx: int, cpp: int) -> str:
    """Encode a palette index as exactly cpp radix-64 characters."""
    if cpp < 0:
        raise ValueError(f"code width must be >= 0, got {cpp}")
    if idx < 0 or idx >> (BITS_PER_CHAR * cpp):
        raise ValueError(f"index {idx} does not fit in {cpp} code characters")
    return "".join(
        BASE64_ALPHABET[(idx >> (BITS_PER_CHAR * shift)) & _CHAR_MASK]
        for shift in range(cpp - 1, -1, -1)
    )


def encode_index_rows(indices: IndexImage, cpp: int) -> NDArray[np.uint8]:
    """
    Encode a (H, W) grid of palette indices into ASCII code bytes.

    Returns a (H, W*cpp) uint8 array; row y holds the codes of row y
    concatenated left to right.
    """
    idx = np.asarray(indices, dtype=np.int64)
    if idx.ndim != 2:
        raise TypeError("expected (H,W) index grid")
    height, width = idx.shape
    if idx.size and (int(idx.min()) < 0 or int(idx.max()) >> (BITS_PER_CHAR * cpp)):
        raise ValueError(f"palette indices do not fit in {cpp} code characters")
    out = np.empty((height, width, cpp), dtype=np.uint8)
    for k in range(cpp):
        shift = BITS_PER_CHAR * (cpp - 1 - k)
        out[..., k] = _ALPHABET_U8[(idx >> shift) & _CHAR_MASK]
    return out.reshape(height, width * cpp)


def encode_hex(rgb: int) -> str:
    """Six lowercase hex digits for the low 24 bits of rgb."""
    return f"{rgb & RGB_MASK:06x}"


__all__ = [
    "chars_per_pixel",
    "encode_index",
    "encode_index_rows",
    "encode_hex",
]
