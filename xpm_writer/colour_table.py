from __future__ import annotations

"""
Colour table: deduplicate pixels into palette indices.

One row-major pass classifies every pixel into a colour key (24-bit RGB, or
TRANSPARENT_KEY when alpha is below the threshold) and numbers the distinct
keys in the order they are first met, starting at 0 from the top-left pixel.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Tuple

import numpy as np
from numpy.typing import NDArray

from .constants import ALPHA_THRESHOLD, TRANSPARENT_KEY
from .core_types import (
    ARGBImage,
    ColourKey,
    IndexImage,
    PaletteIndex,
    SourceLike,
    as_argb_image,
    check_alpha_threshold,
    colour_keys,
)
from .errors import XpmMemoryError


@dataclass(frozen=True, eq=False)
class ColourTable:
    """
    Palette built from one image.

    keys    : uint32 [N] distinct colour keys, ascending
    indices : int64 [N] palette index of keys[i]
    pixels  : int64 [H,W] palette index of every pixel

    Scalar lookups binary-search keys; no per-colour Python objects are
    created unless as_dict() asks for them.
    """

    keys: NDArray[np.uint32]
    indices: NDArray[np.int64]
    pixels: IndexImage

    @property
    def ncols(self) -> int:
        return int(self.keys.shape[0])

    @property
    def has_transparent(self) -> bool:
        # TRANSPARENT_KEY is the largest key, so it sorts last.
        return self.ncols > 0 and int(self.keys[-1]) == TRANSPARENT_KEY

    def __len__(self) -> int:
        return self.ncols

    def _position(self, key: object) -> int:
        if not isinstance(key, (int, np.integer)) or not 0 <= key <= TRANSPARENT_KEY:
            return -1
        pos = int(np.searchsorted(self.keys, np.uint32(key)))
        if pos < self.ncols and int(self.keys[pos]) == key:
            return pos
        return -1

    def __contains__(self, key: object) -> bool:
        return self._position(key) >= 0

    def index_of(self, key: ColourKey) -> PaletteIndex:
        """Palette index of a colour key; KeyError if the image never used it."""
        pos = self._position(key)
        if pos < 0:
            raise KeyError(key)
        return int(self.indices[pos])

    def entries(self) -> Iterator[Tuple[ColourKey, PaletteIndex]]:
        """(key, index) pairs in ascending key order, transparent last."""
        for key, idx in zip(self.keys.tolist(), self.indices.tolist()):
            yield int(key), int(idx)

    def as_dict(self) -> Dict[ColourKey, PaletteIndex]:
        return dict(self.entries())


def _first_seen_ranks(first_pos: np.ndarray) -> NDArray[np.int64]:
    """Rank unique keys by where they first appear in the scan."""
    order = np.argsort(first_pos, kind="stable")
    ranks = np.empty(order.shape[0], dtype=np.int64)
    ranks[order] = np.arange(order.shape[0], dtype=np.int64)
    return ranks


def colour_table_from_argb(
    argb: ARGBImage, alpha_threshold: int = ALPHA_THRESHOLD
) -> ColourTable:
    """Build the colour table for a packed (H, W) ARGB array."""
    threshold = check_alpha_threshold(alpha_threshold)
    height, width = argb.shape
    try:
        flat_keys = colour_keys(argb, threshold).reshape(-1)
        uniq, first_pos, inverse = np.unique(
            flat_keys, return_index=True, return_inverse=True
        )
        ranks = _first_seen_ranks(first_pos)
        pixels = ranks[inverse.reshape(-1)].reshape(height, width)
    except MemoryError as exc:
        raise XpmMemoryError(
            f"cannot allocate colour table for {width}x{height} image"
        ) from exc

    keys = uniq.astype(np.uint32, copy=False)
    return ColourTable(keys=keys, indices=ranks, pixels=pixels)


def build_colour_table(
    source: SourceLike, alpha_threshold: int = ALPHA_THRESHOLD
) -> ColourTable:
    """Scan a pixel source and return its ColourTable."""
    return colour_table_from_argb(as_argb_image(source), alpha_threshold)


__all__ = [
    "ColourTable",
    "colour_table_from_argb",
    "build_colour_table",
]
