"""Tests for the argb2xpm command line tool."""
import numpy as np
import pytest

import argb2xpm
from xpm_writer.assemble import xpm_bytes
from xpm_writer.image_io import save_png_argb


@pytest.fixture
def png(tmp_path):
    argb = np.array([[0xFFFF0000, 0x00000000, 0xFF00FF00]], dtype=np.uint32)
    return save_png_argb(tmp_path / "sprite.png", argb), argb


def test_single_file_to_output(tmp_path, png, capsys):
    path, argb = png
    out = tmp_path / "sprite.xpm"
    assert argb2xpm.main([str(path), str(out)]) == 0
    assert out.read_bytes() == xpm_bytes(argb)
    text = capsys.readouterr().out
    assert "=== sprite.png ===" in text
    assert "Wrote sprite.xpm" in text


def test_single_file_to_stdout(png, capsysbinary):
    path, argb = png
    assert argb2xpm.main([str(path)]) == 0
    captured = capsysbinary.readouterr()
    assert captured.out == xpm_bytes(argb)


def test_debug_logs_go_to_stderr(png, capsysbinary):
    path, argb = png
    assert argb2xpm.main([str(path), "--debug"]) == 0
    captured = capsysbinary.readouterr()
    assert captured.out == xpm_bytes(argb)
    assert b"[debug]" in captured.err


def test_alpha_threshold_flag(tmp_path, png):
    path, argb = png
    out = tmp_path / "opaque.xpm"
    assert argb2xpm.main([str(path), str(out), "--alpha-threshold", "0"]) == 0
    assert b"None" not in out.read_bytes()
    assert out.read_bytes() == xpm_bytes(argb, alpha_threshold=0)


def test_bad_alpha_threshold(png):
    path, _ = png
    with pytest.raises(SystemExit) as exc_info:
        argb2xpm.main([str(path), "--alpha-threshold", "999"])
    assert exc_info.value.code == 2


def test_missing_input(tmp_path, capsys):
    assert argb2xpm.main([str(tmp_path / "nope.png")]) == 2
    assert "not found" in capsys.readouterr().err


def test_unreadable_input(tmp_path, capsys):
    path = tmp_path / "broken.png"
    path.write_text("garbage")
    assert argb2xpm.main([str(path), str(tmp_path / "broken.xpm")]) == 1
    assert "[error]" in capsys.readouterr().err


@pytest.mark.parametrize("jobs", ["1", "3"])
def test_folder_mode(tmp_path, capsys, jobs):
    src = tmp_path / "in"
    src.mkdir()
    images = {
        "a": np.array([[0xFFFF0000]], dtype=np.uint32),
        "b": np.array([[0xFF00FF00, 0x00000000]], dtype=np.uint32),
        "c": np.array([[0xFF0000FF], [0xFFFFFFFF]], dtype=np.uint32),
    }
    for name, argb in images.items():
        save_png_argb(src / f"{name}.png", argb)
    (src / "readme.txt").write_text("skip me")
    (src / "fake.png").write_text("skip me too")
    outdir = tmp_path / "out"

    assert argb2xpm.main([str(src), "--outdir", str(outdir), "--jobs", jobs]) == 0
    for name, argb in images.items():
        assert (outdir / f"{name}.xpm").read_bytes() == xpm_bytes(argb)
    assert sorted(p.name for p in outdir.iterdir()) == ["a.xpm", "b.xpm", "c.xpm"]

    text = capsys.readouterr().out
    assert "[run]" in text
    assert text.index("=== a.png ===") < text.index("=== b.png ===") < text.index("=== c.png ===")


def test_empty_folder(tmp_path, capsys):
    assert argb2xpm.main([str(tmp_path)]) == 0
    assert "[warn] no images" in capsys.readouterr().out


def test_truncated_input(tmp_path, capsys):
    rng = np.random.default_rng(11)
    argb = rng.integers(0, 2**32, size=(64, 64), dtype=np.uint64).astype(np.uint32)
    path = save_png_argb(tmp_path / "cut.png", argb)
    data = path.read_bytes()
    path.write_bytes(data[: len(data) // 2])
    assert argb2xpm.main([str(path), str(tmp_path / "cut.xpm")]) == 1
    assert "[error]" in capsys.readouterr().err


def test_debug_encodes_once(tmp_path, png, capsys, monkeypatch):
    path, argb = png
    calls = []
    real_assemble = argb2xpm.assemble_xpm

    def counting_assemble(*args, **kwargs):
        calls.append(1)
        return real_assemble(*args, **kwargs)

    monkeypatch.setattr(argb2xpm, "assemble_xpm", counting_assemble)
    out = tmp_path / "once.xpm"
    assert argb2xpm.main([str(path), str(out), "--debug"]) == 0
    assert len(calls) == 1
    assert out.read_bytes() == xpm_bytes(argb)
    assert "Colours: 3" in capsys.readouterr().out
