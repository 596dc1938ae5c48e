"""
xpm_writer package.

Purpose:
  Encode 32-bit ARGB pixel grids as XPM (X PixMap) text. See argb2xpm.py for CLI.

Public API:
  encode_to_memory : (buffer, length) for a pixel source.
  encode_to_stream : hand the text to a write_fn(context, data, length) once.
  encode_to_file   : write the text to a file (rw-r--r--).
  assemble_xpm     : full XpmBuffer result (buffer, length, ncols, cpp).
  colour_table     : palette building (first-seen indices, transparent sentinel).
  codes            : radix-64 palette codes and hex colours.
  core_types       : PixelSource interface, ArrayPixelSource, type aliases.
  image_io         : Pillow images to packed ARGB arrays.
  errors           : XpmError hierarchy.
  utils            : shared helpers (formatting, logging).

Quick start:
  from xpm_writer import ArrayPixelSource, encode_to_memory
  buf, n = encode_to_memory(ArrayPixelSource.from_rows([[0xFFFF0000]]))
  text = bytes(buf[:n]).decode("ascii")
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import constants
from . import errors
from . import core_types
from . import codes
from . import colour_table
from . import assemble
from . import sinks
from . import image_io
from . import utils

from .core_types import ArrayPixelSource, PixelSource  # noqa: E402,F401
from .colour_table import ColourTable, build_colour_table  # noqa: E402,F401
from .assemble import XpmBuffer, assemble_xpm, estimate_xpm_size, xpm_bytes  # noqa: E402,F401
from .sinks import encode_to_file, encode_to_memory, encode_to_stream  # noqa: E402,F401
from .errors import (  # noqa: E402,F401
    UnsupportedFormatError,
    XpmDeviceError,
    XpmError,
    XpmMemoryError,
    XpmWriteError,
)

__all__ = [
    "__version__",
    "constants",
    "errors",
    "core_types",
    "codes",
    "colour_table",
    "assemble",
    "sinks",
    "image_io",
    "utils",
    "ArrayPixelSource",
    "PixelSource",
    "ColourTable",
    "build_colour_table",
    "XpmBuffer",
    "assemble_xpm",
    "estimate_xpm_size",
    "xpm_bytes",
    "encode_to_memory",
    "encode_to_stream",
    "encode_to_file",
    "XpmError",
    "UnsupportedFormatError",
    "XpmMemoryError",
    "XpmWriteError",
    "XpmDeviceError",
]
