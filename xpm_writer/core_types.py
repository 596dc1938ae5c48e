from __future__ import annotations

"""
Core type aliases, the pixel source interface, and small value objects.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence, Tuple, Union, runtime_checkable

import numpy as np
from numpy.typing import NDArray

from .constants import ALPHA_SHIFT, ALPHA_THRESHOLD, RGB_MASK, TRANSPARENT_KEY

# Basic aliases

ARGBPixel = int  # 0xAARRGGBB
ColourKey = int  # 0x000000..0xffffff or TRANSPARENT_KEY
PaletteIndex = int

ARGBImage = NDArray[np.uint32]  # (H, W) packed 0xAARRGGBB
U8Image = NDArray[np.uint8]  # (H, W, 4) RGBA
IndexImage = NDArray[np.int64]  # (H, W) palette indices

# write_fn(context, data, length) -> bytes written (None means all of them)
WriteFunc = Callable[[object, memoryview, int], Optional[int]]


@runtime_checkable
class PixelSource(Protocol):
    """Anything exposing a width, a height and row-major ARGB pixels."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def get_pixel(self, x: int, y: int) -> ARGBPixel: ...


# Value objects


@dataclass(frozen=True, eq=False)
class ArrayPixelSource:
    """PixelSource backed by a (H, W) uint32 array of 0xAARRGGBB values."""

    argb: ARGBImage

    def __post_init__(self) -> None:
        assert_argb_image(self.argb)

    @classmethod
    def from_rows(
        cls, rows: Sequence[Sequence[int]], width: Optional[int] = None
    ) -> "ArrayPixelSource":
        """Build from nested rows of ints; width is needed only when rows is empty."""
        return cls(argb_image_from_rows(rows, width))

    @property
    def width(self) -> int:
        return int(self.argb.shape[1])

    @property
    def height(self) -> int:
        return int(self.argb.shape[0])

    @property
    def shape(self) -> Tuple[int, int]:
        return int(self.argb.shape[0]), int(self.argb.shape[1])

    def get_pixel(self, x: int, y: int) -> ARGBPixel:
        return int(self.argb[y, x])

    def argb_array(self) -> ARGBImage:
        return self.argb


SourceLike = Union[PixelSource, ArrayPixelSource, ARGBImage]


# Small helpers


def colour_key(pixel: ARGBPixel, alpha_threshold: int = ALPHA_THRESHOLD) -> ColourKey:
    """Classify one ARGB pixel: its RGB value, or TRANSPARENT_KEY below the threshold."""
    if ((pixel >> ALPHA_SHIFT) & 0xFF) < alpha_threshold:
        return TRANSPARENT_KEY
    return pixel & RGB_MASK


def colour_keys(argb: ARGBImage, alpha_threshold: int = ALPHA_THRESHOLD) -> NDArray[np.uint32]:
    """Vectorised colour_key over a packed ARGB array."""
    alpha = (argb >> np.uint32(ALPHA_SHIFT)) & np.uint32(0xFF)
    rgb = argb & np.uint32(RGB_MASK)
    return np.where(
        alpha < np.uint32(alpha_threshold), np.uint32(TRANSPARENT_KEY), rgb
    ).astype(np.uint32, copy=False)


def check_alpha_threshold(alpha_threshold: int) -> int:
    """Validate an alpha threshold; 0 keeps every pixel opaque, 256 makes all transparent."""
    value = int(alpha_threshold)
    if not 0 <= value <= 256:
        raise ValueError(f"alpha threshold must be in 0..256, got {alpha_threshold}")
    return value


def argb_image_from_rows(
    rows: Sequence[Sequence[int]], width: Optional[int] = None
) -> ARGBImage:
    """Pack nested rows of ARGB ints into a (H, W) uint32 array."""
    if len(rows) == 0:
        return np.zeros((0, int(width or 0)), dtype=np.uint32)
    w = len(rows[0])
    if any(len(r) != w for r in rows):
        raise ValueError("rows must all have the same length")
    out = np.empty((len(rows), w), dtype=np.uint32)
    for y, row in enumerate(rows):
        for x, value in enumerate(row):
            out[y, x] = int(value) & 0xFFFFFFFF
    return out


def assert_argb_image(image: np.ndarray) -> ARGBImage:
    """Validate a uint32 (H,W) image and return it typed as ARGBImage."""
    if not isinstance(image, np.ndarray) or image.dtype != np.uint32 or image.ndim != 2:
        raise TypeError("expected uint32 (H,W) ARGB image")
    return image  # type: ignore[return-value]


def as_argb_image(source: SourceLike) -> ARGBImage:
    """
    Read every pixel of a source into a contiguous (H, W) uint32 array.

    Arrays are taken as they are, sources with argb_array() hand theirs over,
    and plain PixelSources are sampled through get_pixel() row by row.
    """
    if isinstance(source, np.ndarray):
        return np.ascontiguousarray(assert_argb_image(source))
    argb_array = getattr(source, "argb_array", None)
    if callable(argb_array):
        return np.ascontiguousarray(assert_argb_image(argb_array()))
    if not isinstance(source, PixelSource):
        raise TypeError(
            f"expected a pixel source or uint32 array, got {type(source).__name__}"
        )
    width, height = int(source.width), int(source.height)
    if width < 0 or height < 0:
        raise ValueError(f"invalid source size {width}x{height}")
    out = np.empty((height, width), dtype=np.uint32)
    for y in range(height):
        for x in range(width):
            out[y, x] = int(source.get_pixel(x, y)) & 0xFFFFFFFF
    return out


__all__ = [
    # aliases / types
    "ARGBPixel",
    "ColourKey",
    "PaletteIndex",
    "ARGBImage",
    "U8Image",
    "IndexImage",
    "WriteFunc",
    "SourceLike",
    # interface / value objects
    "PixelSource",
    "ArrayPixelSource",
    # helpers
    "colour_key",
    "colour_keys",
    "check_alpha_threshold",
    "argb_image_from_rows",
    "assert_argb_image",
    "as_argb_image",
]
