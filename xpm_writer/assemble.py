from __future__ import annotations

"""
XPM text assembly.

The colour table pass has to finish first: the header and every code depend
on the total colour count. The output is written once into a buffer sized by
estimate_xpm_size(), whose estimate is never smaller than the real text.

Layout (ASCII):
  /* XPM */
  static char *xpm_c<N>_[] = {
  "<W> <H> <N> <C>",
  "<code> c #rrggbb",      one per colour, ascending colour key
  "<code> c None",         transparent entry, if any
  "<codes>",               one per pixel row
  };
"""

import time
from dataclasses import dataclass
from typing import Union

from .codes import chars_per_pixel, encode_hex, encode_index, encode_index_rows
from .colour_table import ColourTable, colour_table_from_argb
from .constants import (
    ALPHA_THRESHOLD,
    COLOUR_LINE_OVERHEAD,
    HEADER_SLACK,
    ROW_LINE_OVERHEAD,
    TRANSPARENT_KEY,
)
from .core_types import SourceLike, as_argb_image
from .errors import XpmMemoryError
from .utils import debug_log, format_seconds_compact, key_value_pairs_to_string


def estimate_xpm_size(width: int, height: int, ncols: int, cpp: int) -> int:
    """Upper bound on the assembled length in bytes."""
    colour_table_size = (cpp + COLOUR_LINE_OVERHEAD) * ncols
    pixel_table_size = (width * cpp + ROW_LINE_OVERHEAD) * height
    return colour_table_size + pixel_table_size + HEADER_SLACK


@dataclass(frozen=True)
class XpmBuffer:
    """Assembled XPM text: buffer holds capacity bytes, the first length are valid."""

    buffer: bytearray
    length: int
    width: int
    height: int
    ncols: int
    cpp: int

    @property
    def capacity(self) -> int:
        return len(self.buffer)

    def view(self) -> memoryview:
        return memoryview(self.buffer)[: self.length]

    def tobytes(self) -> bytes:
        return bytes(self.buffer[: self.length])


class _BufferWriter:
    """Appends into a fixed-size bytearray and tracks the occupied length."""

    def __init__(self, capacity: int) -> None:
        try:
            self.buf = bytearray(capacity)
        except MemoryError as exc:
            raise XpmMemoryError(
                f"cannot allocate {capacity:,} byte XPM buffer"
            ) from exc
        self.pos = 0

    def put(self, data: Union[bytes, bytearray, memoryview]) -> None:
        end = self.pos + len(data)
        assert end <= len(self.buf), "XPM size estimate too small"
        self.buf[self.pos : end] = data
        self.pos = end

    def put_text(self, text: str) -> None:
        self.put(text.encode("ascii"))


def _header(width: int, height: int, ncols: int, cpp: int) -> str:
    return (
        f"/* XPM */\nstatic char *xpm_c{ncols}_[] = {{\n"
        f'"{width} {height} {ncols} {cpp}"'
    )


def _colour_line(key: int, idx: int, cpp: int) -> str:
    code = encode_index(idx, cpp)
    if key == TRANSPARENT_KEY:
        return f',\n"{code} c None"'
    return f',\n"{code} c #{encode_hex(key)}"'


def write_xpm(table: ColourTable, debug: bool = False) -> XpmBuffer:
    """Assemble the XPM text for an already built colour table."""
    height, width = (int(n) for n in table.pixels.shape)
    ncols = table.ncols
    cpp = chars_per_pixel(ncols)
    capacity = estimate_xpm_size(width, height, ncols, cpp)

    out = _BufferWriter(capacity)
    out.put_text(_header(width, height, ncols, cpp))

    for key, idx in table.entries():
        out.put_text(_colour_line(key, idx, cpp))

    codes = encode_index_rows(table.pixels, cpp)
    for y in range(height):
        out.put(b',\n"')
        out.put(codes[y].tobytes())
        out.put(b'"')

    out.put(b"\n};\n")

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Size", f"{width}x{height}"),
                    ("Colours", ncols),
                    ("Transparent", table.has_transparent),
                    ("Chars/pixel", cpp),
                    ("Estimated", capacity),
                    ("Length", out.pos),
                ]
            )
        )
    return XpmBuffer(
        buffer=out.buf,
        length=out.pos,
        width=width,
        height=height,
        ncols=ncols,
        cpp=cpp,
    )


def assemble_xpm(
    source: SourceLike,
    *,
    alpha_threshold: int = ALPHA_THRESHOLD,
    debug: bool = False,
) -> XpmBuffer:
    """
    Encode a pixel source as XPM text.

    Args:
      source          : PixelSource, ArrayPixelSource or uint32 [H,W] array
      alpha_threshold : pixels with alpha below this become "None"
      debug           : print table and buffer stats

    Returns:
      XpmBuffer with the text in buffer[:length].
    """
    t0 = time.perf_counter()
    argb = as_argb_image(source)
    table = colour_table_from_argb(argb, alpha_threshold)
    t1 = time.perf_counter()
    result = write_xpm(table, debug=debug)
    if debug:
        debug_log(
            f"colour table {format_seconds_compact(t1 - t0)}  "
            f"write {format_seconds_compact(time.perf_counter() - t1)}"
        )
    return result


def xpm_bytes(source: SourceLike, *, alpha_threshold: int = ALPHA_THRESHOLD) -> bytes:
    """Convenience: the assembled XPM text as bytes."""
    return assemble_xpm(source, alpha_threshold=alpha_threshold).tobytes()


__all__ = [
    "XpmBuffer",
    "estimate_xpm_size",
    "write_xpm",
    "assemble_xpm",
    "xpm_bytes",
]
