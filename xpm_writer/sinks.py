from __future__ import annotations

"""
Output sinks: memory, caller-supplied write function, and file.

All three share one assembled buffer; nothing is written until the whole
text is ready, so a failure never leaves a half-built buffer with the caller.
"""

import os
from pathlib import Path
from typing import Optional, Tuple, Union

from .assemble import XpmBuffer, assemble_xpm
from .constants import ALPHA_THRESHOLD, XPM_FILE_MODE
from .core_types import SourceLike, WriteFunc
from .errors import XpmDeviceError, XpmWriteError


def encode_to_memory(
    source: SourceLike, *, alpha_threshold: int = ALPHA_THRESHOLD, debug: bool = False
) -> Tuple[bytearray, int]:
    """Return (buffer, length); the XPM text is buffer[:length]."""
    xpm = assemble_xpm(source, alpha_threshold=alpha_threshold, debug=debug)
    return xpm.buffer, xpm.length


def _write_once(xpm: XpmBuffer, write_fn: WriteFunc, context: object) -> None:
    written = write_fn(context, xpm.view(), xpm.length)
    if written is not None and written < xpm.length:
        raise XpmWriteError(f"short write: {written} of {xpm.length} bytes")


def encode_to_stream(
    source: SourceLike,
    write_fn: WriteFunc,
    context: object = None,
    *,
    alpha_threshold: int = ALPHA_THRESHOLD,
    debug: bool = False,
) -> None:
    """
    Encode and hand the whole text to write_fn(context, data, length) once.

    write_fn returns the number of bytes it accepted; anything short of length
    raises XpmWriteError. A None return counts as a complete write.
    """
    xpm = assemble_xpm(source, alpha_threshold=alpha_threshold, debug=debug)
    _write_once(xpm, write_fn, context)


def _fd_write(fd: int, data: memoryview, length: int) -> Optional[int]:
    return os.write(fd, data[:length])


def write_xpm_file(xpm: XpmBuffer, path: Union[str, os.PathLike]) -> Path:
    """
    Write an assembled XpmBuffer to path (created rw-r--r--, truncated if present).

    The descriptor is closed before returning, whether or not the write
    succeeded.
    """
    out_path = Path(path)
    try:
        fd = os.open(out_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, XPM_FILE_MODE)
    except OSError as exc:
        raise XpmDeviceError(exc.errno, f"cannot open {out_path}: {exc.strerror}") from exc
    try:
        _write_once(xpm, _fd_write, fd)
    finally:
        os.close(fd)
    return out_path


def encode_to_file(
    source: SourceLike,
    path: Union[str, os.PathLike],
    *,
    alpha_threshold: int = ALPHA_THRESHOLD,
    debug: bool = False,
) -> Path:
    """
    Encode, then write the XPM text to path.

    The file is only opened once the text is fully assembled, so an encoding
    failure leaves an existing file untouched.
    """
    xpm = assemble_xpm(source, alpha_threshold=alpha_threshold, debug=debug)
    return write_xpm_file(xpm, path)


def write_binary_stream(stream, data: memoryview, length: int) -> Optional[int]:
    """write_fn adapter for binary file objects (sys.stdout.buffer, BytesIO, ...)."""
    written = stream.write(data[:length])
    stream.flush()
    return written


__all__ = [
    "encode_to_memory",
    "encode_to_stream",
    "encode_to_file",
    "write_xpm_file",
    "write_binary_stream",
]
