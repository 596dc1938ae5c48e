# xpm_writer/errors.py
"""
Exception hierarchy for XPM encoding.

Every failure the encoder or its sinks can report derives from XpmError, and
also from the closest builtin so callers catching ValueError, MemoryError or
OSError keep working.
"""
from __future__ import annotations


class XpmError(Exception):
    """Base class for all xpm_writer failures."""


class UnsupportedFormatError(XpmError, ValueError):
    """Source image data cannot be read as ARGB/RGB pixels."""


class XpmMemoryError(XpmError, MemoryError):
    """Palette lookup or output buffer could not be allocated."""


class XpmWriteError(XpmError, OSError):
    """A sink reported a short or failed write."""


class XpmDeviceError(XpmError, OSError):
    """Output file could not be opened or created."""


__all__ = [
    "XpmError",
    "UnsupportedFormatError",
    "XpmMemoryError",
    "XpmWriteError",
    "XpmDeviceError",
]
