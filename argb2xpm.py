#!/usr/bin/env python3
"""
argb2xpm.py
Convert images to XPM (X PixMap) text.

Usage:
  python argb2xpm.py INPUT [OUTPUT] --outdir DIR --alpha-threshold T --jobs N --debug

Input:
  Any Pillow-readable image, or a folder of them. Pixels whose alpha is below
  the threshold (default 128) share the single "None" colour.

Output:
  INPUT only     : XPM text on stdout, log lines on stderr.
  INPUT OUTPUT   : XPM file at OUTPUT.
  FOLDER         : <stem>.xpm per image, next to the images or in --outdir.

Notes:
  Every distinct RGB value gets its own palette entry; there is no quantisation.
  Folder mode converts files in parallel with ThreadPoolExecutor.
"""

from __future__ import annotations

import argparse
import os
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import redirect_stdout
from pathlib import Path
from typing import List, Optional, Tuple

from xpm_writer.assemble import assemble_xpm
from xpm_writer.constants import ALPHA_THRESHOLD, IMAGE_EXTENSIONS, XPM_SUFFIX
from xpm_writer.errors import XpmError
from xpm_writer.image_io import is_image_file, load_pixel_source
from xpm_writer.sinks import encode_to_stream, write_binary_stream, write_xpm_file
from xpm_writer.utils import (
    # formatting
    format_bytes_compact,
    format_total_duration_compact,
    key_value_pairs_to_string,
    # pretty logging
    debug_log,
    enable_line_buffered_stdout,
    error,
    log,
    print_banner,
    print_config_line,
    warn,
)

# CLI args & small helpers


def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments for XPM conversion.

    Returns:
      argparse.Namespace with:
        src: Path to image or folder
        output: optional Path for a single-image output file
        outdir: optional Path for folder outputs
        alpha_threshold: int, alpha below this is transparent
        jobs: parallel file workers
        debug: bool for verbose stats
    """
    parser = argparse.ArgumentParser(
        prog="argb2xpm",
        description="Convert image(s) to XPM text with an exact, unquantised palette.",
    )
    parser.add_argument("src", type=Path, help="Input image or folder")
    parser.add_argument(
        "output",
        type=Path,
        nargs="?",
        default=None,
        help="Output XPM file (single image). Omit to print to stdout.",
    )
    parser.add_argument(
        "--outdir", type=Path, default=None, help="Output directory for folder mode"
    )
    parser.add_argument(
        "--alpha-threshold",
        type=int,
        default=ALPHA_THRESHOLD,
        help="Alpha below this value becomes the transparent colour (0..256).",
    )
    parser.add_argument(
        "--jobs", type=int, default=2, help="Files processed in parallel"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose encoder stats")
    args = parser.parse_args(argv)
    if not 0 <= args.alpha_threshold <= 256:
        parser.error("--alpha-threshold must be in 0..256")
    if args.jobs < 1:
        parser.error("--jobs must be >= 1")
    return args


def _folder_images(src: Path) -> List[Path]:
    files = [
        p
        for p in src.iterdir()
        if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS and is_image_file(p)
    ]
    files.sort(key=lambda p: p.name.lower())
    return files


# Per-file processing

Report = List[Tuple[str, str]]  # [(kind, message), ...] with kind in log/debug/warn


def _emit(report: Report) -> None:
    emitters = {"log": log, "debug": debug_log, "warn": warn}
    for kind, message in report:
        emitters[kind](message)


def _convert_to_stdout(src_path: Path, alpha_threshold: int, debug: bool) -> None:
    """Encode one image and stream the text to stdout; logs go to stderr."""
    t_start = time.perf_counter()
    out = sys.stdout.buffer
    with redirect_stdout(sys.stderr):
        source = load_pixel_source(src_path)
        if debug:
            debug_log(f"loaded {src_path.name}  {source.width}x{source.height}")
        encode_to_stream(
            source,
            write_binary_stream,
            out,
            alpha_threshold=alpha_threshold,
            debug=debug,
        )
        if debug:
            debug_log(
                f"Total {format_total_duration_compact(time.perf_counter() - t_start)}"
            )


def _convert_single_image(
    src_path: Path, out_path: Optional[Path], alpha_threshold: int, debug: bool
) -> Report:
    """
    Convert a single image end-to-end:
      load -> colour table -> assemble -> write.

    Returns the report lines instead of printing them, so worker threads never
    touch stdout.
    """
    t_start = time.perf_counter()
    if out_path is None:
        out_path = src_path.with_suffix(XPM_SUFFIX)
    report: Report = []

    source = load_pixel_source(src_path)
    t_loaded = time.perf_counter()
    xpm = assemble_xpm(source, alpha_threshold=alpha_threshold)
    if debug:
        report.append(
            (
                "debug",
                key_value_pairs_to_string(
                    [
                        ("Loaded", f"{source.width}x{source.height}"),
                        ("Colours", xpm.ncols),
                        ("Chars/pixel", xpm.cpp),
                        ("Buffer", f"{format_bytes_compact(xpm.length)} of {format_bytes_compact(xpm.capacity)}"),
                    ]
                ),
            )
        )
    write_xpm_file(xpm, out_path)
    t_written = time.perf_counter()

    report.append(
        (
            "log",
            f"Wrote {out_path.name} | size={source.width}x{source.height} | bytes={xpm.length:,}",
        )
    )
    if debug:
        report.append(
            (
                "debug",
                f"Total {format_total_duration_compact(t_written - t_start)}  "
                f"(load={format_total_duration_compact(t_loaded - t_start)}, "
                f"encode+write={format_total_duration_compact(t_written - t_loaded)})",
            )
        )
    else:
        report.append(
            ("log", f"Total time {format_total_duration_compact(t_written - t_start)}")
        )
    return report


def _convert_one_reported(
    path: Path, outdir: Optional[Path], alpha_threshold: int, debug: bool
) -> Tuple[str, Report]:
    """Convert one folder entry; failures become a warning in its report."""
    dst = (outdir / f"{path.stem}{XPM_SUFFIX}") if outdir else None
    try:
        return path.name, _convert_single_image(path, dst, alpha_threshold, debug)
    except XpmError as e:
        return path.name, [("warn", f"{path.name}: {e}")]


# Entry point


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point.

    Handles a single file (to stdout or OUTPUT) or a folder, where --jobs
    parallelism keeps the per-file output in order.
    """
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)

    src = args.src
    if not src.exists():
        error(f"not found: {src}")
        return 2

    try:
        if not src.is_dir():
            if args.output is None:
                _convert_to_stdout(src, args.alpha_threshold, args.debug)
            else:
                print_banner(src.name)
                _emit(
                    _convert_single_image(
                        src, args.output, args.alpha_threshold, args.debug
                    )
                )
            return 0

        print_config_line(
            "run",
            [
                ("CPU cores", os.cpu_count() or 1),
                ("Jobs", args.jobs),
                ("Alpha threshold", args.alpha_threshold),
            ],
            debug=False,
        )
        if args.outdir is not None:
            args.outdir.mkdir(parents=True, exist_ok=True)
        files = _folder_images(src)
        if not files:
            warn(f"no images in {src}")
            return 0

        if args.jobs == 1:
            results = [
                _convert_one_reported(p, args.outdir, args.alpha_threshold, args.debug)
                for p in files
            ]
        else:
            with ThreadPoolExecutor(max_workers=args.jobs) as ex:
                futures = [
                    ex.submit(
                        _convert_one_reported,
                        p,
                        args.outdir,
                        args.alpha_threshold,
                        args.debug,
                    )
                    for p in files
                ]
                results = [f.result() for f in futures]
        for name, report in results:
            print_banner(name)
            _emit(report)
        return 0
    except XpmError as e:
        error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
