"""Tests for colour deduplication and palette index assignment."""
import numpy as np
import pytest

from xpm_writer.colour_table import build_colour_table
from xpm_writer.constants import TRANSPARENT_KEY
from xpm_writer.core_types import ArrayPixelSource, colour_key

GREEN = 0xFF00FF00
RED = 0xFFFF0000
CLEAR = 0x00123456


class ListSource:
    """Minimal PixelSource with no array fast path."""

    def __init__(self, rows):
        self.rows = rows

    @property
    def width(self):
        return len(self.rows[0]) if self.rows else 0

    @property
    def height(self):
        return len(self.rows)

    def get_pixel(self, x, y):
        return self.rows[y][x]


def test_first_seen_indices():
    table = build_colour_table(ArrayPixelSource.from_rows([[GREEN, RED], [GREEN, CLEAR]]))
    assert table.ncols == 3
    assert table.index_of(0x00FF00) == 0
    assert table.index_of(0xFF0000) == 1
    assert table.index_of(TRANSPARENT_KEY) == 2
    assert table.pixels.tolist() == [[0, 1], [0, 2]]


def test_entries_ascending_key_order():
    table = build_colour_table(ArrayPixelSource.from_rows([[0xFFFFFFFF, CLEAR, 0xFF000000]]))
    assert list(table.entries()) == [(0x000000, 2), (0xFFFFFF, 0), (TRANSPARENT_KEY, 1)]


def test_transparent_pixels_collapse():
    rows = [[0x00000000, 0x7FFFFFFF, 0x10ABCDEF, 0x80ABCDEF]]
    table = build_colour_table(ArrayPixelSource.from_rows(rows))
    assert table.ncols == 2
    assert table.has_transparent
    assert table.index_of(TRANSPARENT_KEY) == 0
    assert table.index_of(0xABCDEF) == 1


def test_alpha_is_ignored_for_opaque_pixels():
    table = build_colour_table(ArrayPixelSource.from_rows([[0x80123456, 0xFF123456]]))
    assert table.ncols == 1
    assert not table.has_transparent


def test_alpha_threshold_override():
    rows = [[0x00000000, 0xFFFFFFFF]]
    assert build_colour_table(ArrayPixelSource.from_rows(rows), alpha_threshold=0).ncols == 2
    assert not build_colour_table(ArrayPixelSource.from_rows(rows), alpha_threshold=0).has_transparent
    table = build_colour_table(ArrayPixelSource.from_rows(rows), alpha_threshold=256)
    assert table.ncols == 1
    assert table.has_transparent


def test_alpha_threshold_validated():
    with pytest.raises(ValueError):
        build_colour_table(ArrayPixelSource.from_rows([[RED]]), alpha_threshold=300)


def test_ncols_matches_distinct_keys():
    rng = np.random.default_rng(7)
    argb = rng.integers(0, 2**32, size=(40, 30), dtype=np.uint64).astype(np.uint32)
    argb[::3] &= np.uint32(0xFF00000F)  # force repeats
    table = build_colour_table(argb)
    expected = {colour_key(int(p)) for p in argb.ravel().tolist()}
    assert table.ncols == len(expected)
    assert set(table.as_dict()) == expected
    assert sorted(table.as_dict().values()) == list(range(table.ncols))


def test_index_zero_is_top_left():
    rng = np.random.default_rng(3)
    argb = (rng.integers(0, 50, size=(10, 10)).astype(np.uint32) | np.uint32(0xFF000000))
    table = build_colour_table(argb)
    assert table.pixels[0, 0] == 0
    assert table.index_of(colour_key(int(argb[0, 0]))) == 0


def test_pixels_agree_with_lookup():
    rows = [[RED, GREEN, CLEAR], [CLEAR, 0xFF0000FF, RED]]
    table = build_colour_table(ArrayPixelSource.from_rows(rows))
    for y, row in enumerate(rows):
        for x, px in enumerate(row):
            assert table.pixels[y, x] == table.index_of(colour_key(px))


def test_plain_pixel_source_matches_array_source():
    rows = [[RED, GREEN, CLEAR], [CLEAR, 0xFF0000FF, RED]]
    plain = build_colour_table(ListSource(rows))
    fast = build_colour_table(ArrayPixelSource.from_rows(rows))
    assert plain.as_dict() == fast.as_dict()
    assert plain.pixels.tolist() == fast.pixels.tolist()


def test_empty_image():
    table = build_colour_table(ArrayPixelSource(np.zeros((0, 0), dtype=np.uint32)))
    assert table.ncols == 0
    assert len(table) == 0
    assert list(table.entries()) == []


def test_unknown_key_raises():
    table = build_colour_table(ArrayPixelSource.from_rows([[RED]]))
    assert 0xFF0000 in table
    with pytest.raises(KeyError):
        table.index_of(0x00FF00)


def test_rejects_non_uint32_arrays():
    with pytest.raises(TypeError):
        build_colour_table(np.zeros((2, 2), dtype=np.int32))


def test_membership_without_dict():
    table = build_colour_table(ArrayPixelSource.from_rows([[RED, CLEAR]]))
    assert table.has_transparent
    assert TRANSPARENT_KEY in table
    assert 0x00FF00 not in table
    assert -1 not in table
    assert TRANSPARENT_KEY + 1 not in table
    assert "red" not in table
    assert table.as_dict() == {0xFF0000: 0, TRANSPARENT_KEY: 1}


def test_empty_table_has_no_transparent():
    table = build_colour_table(np.zeros((0, 4), dtype=np.uint32))
    assert not table.has_transparent
    assert 0 not in table
