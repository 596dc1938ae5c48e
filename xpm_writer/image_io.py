from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .core_types import ARGBImage, ArrayPixelSource, U8Image, assert_argb_image
from .errors import UnsupportedFormatError

"""
Image I/O helpers: any Pillow image to packed 0xAARRGGBB pixels.

Images carrying alpha (RGBA, LA, palette or RGB with a transparency entry) are
read as RGBA; everything else is flattened to RGB with alpha 0xff.
"""

_ALPHA_MODES = frozenset({"RGBA", "RGBa", "LA", "La", "PA"})


def argb_from_rgba_array(rgba: U8Image) -> ARGBImage:
    """Pack uint8 [H,W,4] RGBA into uint32 [H,W] 0xAARRGGBB."""
    if rgba.dtype != np.uint8 or rgba.ndim != 3 or rgba.shape[-1] != 4:
        raise TypeError("expected uint8 (H,W,4) RGBA image")
    px = rgba.astype(np.uint32)
    return (
        (px[..., 3] << np.uint32(24))
        | (px[..., 0] << np.uint32(16))
        | (px[..., 1] << np.uint32(8))
        | px[..., 2]
    ).astype(np.uint32, copy=False)


def argb_to_rgba_array(argb: ARGBImage) -> U8Image:
    """Unpack uint32 [H,W] 0xAARRGGBB into uint8 [H,W,4] RGBA."""
    assert_argb_image(argb)
    out = np.empty(argb.shape + (4,), dtype=np.uint8)
    out[..., 0] = (argb >> np.uint32(16)) & np.uint32(0xFF)
    out[..., 1] = (argb >> np.uint32(8)) & np.uint32(0xFF)
    out[..., 2] = argb & np.uint32(0xFF)
    out[..., 3] = (argb >> np.uint32(24)) & np.uint32(0xFF)
    return out


def has_alpha(im: Image.Image) -> bool:
    return im.mode in _ALPHA_MODES or "transparency" in im.info


def argb_from_pil(im: Image.Image) -> ARGBImage:
    """Convert a Pillow image into a packed ARGB array."""
    target = "RGBA" if has_alpha(im) else "RGB"
    try:
        converted = im if im.mode == target else im.convert(target)
    except (ValueError, OSError) as exc:
        raise UnsupportedFormatError(
            f"cannot convert {im.mode} image to {target}: {exc}"
        ) from exc
    if target == "RGBA":
        return argb_from_rgba_array(np.array(converted, dtype=np.uint8))
    rgb = np.array(converted, dtype=np.uint8)
    rgba = np.empty(rgb.shape[:2] + (4,), dtype=np.uint8)
    rgba[..., :3] = rgb
    rgba[..., 3] = 0xFF
    return argb_from_rgba_array(rgba)


def load_argb(path: Path) -> ARGBImage:
    """Open an image file with Pillow, honour EXIF orientation, return ARGB."""
    try:
        with Image.open(path) as im0:
            im = ImageOps.exif_transpose(im0)
            return argb_from_pil(im)
    except UnidentifiedImageError as exc:
        raise UnsupportedFormatError(f"not a readable image: {path}") from exc
    except FileNotFoundError:
        raise
    except OSError as exc:
        # Truncated or corrupt data only surfaces once the pixels are decoded.
        raise UnsupportedFormatError(f"cannot decode {path}: {exc}") from exc


def load_pixel_source(path: Path) -> ArrayPixelSource:
    return ArrayPixelSource(load_argb(path))


def save_png_argb(path: Path, argb: ARGBImage) -> Path:
    """Save packed ARGB as an RGBA PNG."""
    if path.suffix.lower() != ".png":
        path = path.with_suffix(".png")
    Image.fromarray(argb_to_rgba_array(argb)).save(path)
    return path


def is_image_file(path: Path) -> bool:
    try:
        with Image.open(path) as im:
            im.seek(0)
            im.load()
        return True
    except (UnidentifiedImageError, OSError):
        return False


__all__ = [
    "argb_from_rgba_array",
    "argb_to_rgba_array",
    "has_alpha",
    "argb_from_pil",
    "load_argb",
    "load_pixel_source",
    "save_png_argb",
    "is_image_file",
]
