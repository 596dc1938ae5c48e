# xpm_writer/constants.py
"""
Format constants and tunables used across the project.

- Colour key domain (MAX_COLOURS, TRANSPARENT_KEY) and the alpha threshold
- Radix-64 alphabet used for palette codes
- Output size estimation overheads
- File sink permissions and CLI file filters
"""
from __future__ import annotations

from typing import FrozenSet

# =========================
# Colour keys
# =========================
# 24-bit RGB gives 0x000000..0xffffff; the value just above is the sentinel
# standing in for every pixel that counts as transparent.
MAX_COLOURS: int = 0x1000000
TRANSPARENT_KEY: int = MAX_COLOURS
COLOUR_KEY_DOMAIN: int = MAX_COLOURS + 1

# Pixels with alpha below this are transparent (50% of 0..255).
ALPHA_THRESHOLD: int = 0x80

RGB_MASK: int = 0x00FFFFFF
ALPHA_SHIFT: int = 24

# =========================
# Palette codes
# =========================
BASE64_ALPHABET: str = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
)
BITS_PER_CHAR: int = 6

# =========================
# Size estimation
# =========================
# Opening comment, array declaration, dimensions literal and trailer.
HEADER_SLACK: int = 256
# ',\n"' + code + ' c #xxxxxx"'  ->  cpp + 14
COLOUR_LINE_OVERHEAD: int = 14
# ',\n"' + codes + '"'  ->  w * cpp + 4
ROW_LINE_OVERHEAD: int = 4

# =========================
# Output
# =========================
XPM_FILE_MODE: int = 0o644  # rw-r--r--
XPM_SUFFIX: str = ".xpm"
IMAGE_EXTENSIONS: FrozenSet[str] = frozenset(
    {".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp", ".tif", ".tiff"}
)

__all__ = [
    "MAX_COLOURS",
    "TRANSPARENT_KEY",
    "COLOUR_KEY_DOMAIN",
    "ALPHA_THRESHOLD",
    "RGB_MASK",
    "ALPHA_SHIFT",
    "BASE64_ALPHABET",
    "BITS_PER_CHAR",
    "HEADER_SLACK",
    "COLOUR_LINE_OVERHEAD",
    "ROW_LINE_OVERHEAD",
    "XPM_FILE_MODE",
    "XPM_SUFFIX",
    "IMAGE_EXTENSIONS",
]
