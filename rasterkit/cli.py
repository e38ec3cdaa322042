"""Command-line interface for rasterkit.

Each subcommand loads one image, runs one demo pipeline and writes PNG
files to the output directory. ``--json`` switches to structured output
for scripting.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from rasterkit.core.image import Image, ImageLoadError
from rasterkit.core.pipeline import (
    BOX_BLUR_OUTPUT,
    GAUSSIAN_BLUR_OUTPUT,
    KernelName,
    Settings,
)

logger = logging.getLogger(__name__)


def _levels(value: str) -> int:
    levels = int(value)
    if levels < 2:
        raise argparse.ArgumentTypeError("levels must be >= 2")
    return levels


def _add_common_arguments(sub: argparse.ArgumentParser) -> None:
    sub.add_argument(
        "filename",
        nargs="?",
        help="Input image (PNG, JPEG, BMP, GIF or anything Pillow decodes).",
    )
    sub.add_argument(
        "-o", "--output-dir",
        default=".",
        help="Directory for output files (default: current directory).",
    )
    sub.add_argument(
        "--json",
        action="store_true",
        help="Output structured JSON (pipe-friendly).",
    )
    sub.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    sub.set_defaults(subparser=sub)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rasterkit",
        description="Box blur, Gaussian blur and error diffusion dithering demos.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # --- blur subcommand ---
    blur = subparsers.add_parser(
        "blur",
        help=f"3x3 box blur, written to {BOX_BLUR_OUTPUT}.",
    )
    _add_common_arguments(blur)
    blur.add_argument(
        "--radius",
        type=int,
        default=1,
        help="Kernel half-width (default: 1, a 3x3 box).",
    )

    # --- gaussian subcommand ---
    gaussian = subparsers.add_parser(
        "gaussian",
        help=f"Gaussian blur, written to {GAUSSIAN_BLUR_OUTPUT}.",
    )
    _add_common_arguments(gaussian)
    gaussian.add_argument(
        "--sigma",
        type=float,
        default=1.0,
        help="Standard deviation in pixels (default: 1.0).",
    )

    # --- dither subcommand ---
    dither = subparsers.add_parser(
        "dither",
        help="Greyscale, quantise and dither an image.",
    )
    _add_common_arguments(dither)
    dither.add_argument(
        "ip",
        nargs="?",
        help="Optional IPv4/IPv6 address to push the dithered frame to.",
    )
    dither.add_argument(
        "--kernel",
        choices=[k.value for k in KernelName],
        default=KernelName.FLOYD_STEINBERG.value,
        help="Error diffusion kernel (default: floyd-steinberg).",
    )
    dither.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="1-bit quantisation threshold (default: 0.5). Only valid with --levels 2.",
    )
    dither.add_argument(
        "--levels",
        type=_levels,
        default=2,
        help="Output levels per channel (default: 2, black and white).",
    )
    dither.add_argument(
        "--port",
        type=int,
        default=80,
        help="TCP port for the frame push (default: 80).",
    )

    # --- preview subcommand ---
    preview = subparsers.add_parser(
        "preview",
        help="Interactive terminal preview of the dither pipeline.",
    )
    preview.add_argument("filename", nargs="?", help="Image to open.")

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _json_error(message: str, code: str) -> None:
    """Print JSON error to stderr and exit with code 1."""
    err = {"status": "error", "error": message, "code": code}
    print(json.dumps(err), file=sys.stderr)
    sys.exit(1)


def _fail(args: argparse.Namespace, message: str, code: str) -> None:
    if args.json:
        _json_error(message, code)
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _load_input(args: argparse.Namespace) -> Image:
    """Resolve and decode the input file, exiting with 1 on failure."""
    if not args.filename:
        if not args.json:
            print("Error: No file given", file=sys.stderr)
            args.subparser.print_usage(sys.stderr)
            sys.exit(1)
        _json_error("No file given", "NO_INPUT")

    input_path = Path(args.filename)
    if not input_path.exists():
        _fail(args, f'File not found: "{input_path}"', "FILE_NOT_FOUND")

    try:
        return Image.open(input_path)
    except ImageLoadError as e:
        _fail(args, str(e), "INVALID_INPUT")


def _write_outputs(
    outputs: list[tuple[str, Image]], output_dir: Path, is_json: bool
) -> tuple[list[Path], list[str]]:
    """Write each output; encode failures are reported, not fatal."""
    from rasterkit.core.writer import write_png

    written: list[Path] = []
    errors: list[str] = []
    for name, image in outputs:
        path = output_dir / name
        try:
            write_png(path, image)
        except (OSError, ValueError) as e:
            logger.debug("Encoder failed for %s", path, exc_info=True)
            errors.append(f"{path}: {e}")
            if not is_json:
                print(f"Error writing {path}: {e}", file=sys.stderr)
            continue
        written.append(path)
        if not is_json:
            print(f"Saved to {path}", file=sys.stderr)
    return written, errors


def _report(
    args: argparse.Namespace,
    img: Image,
    settings: dict,
    written: list[Path],
    errors: list[str],
    extra: dict | None = None,
) -> None:
    if not args.json:
        return
    result = {
        "status": "success",
        "input": str(Path(args.filename).resolve()),
        "outputs": [str(p) for p in written],
        "settings": settings,
        "metadata": {
            "width": img.width,
            "height": img.height,
            "channels": img.channels,
        },
    }
    if errors:
        result["write_errors"] = errors
    if extra:
        result.update(extra)
    print(json.dumps(result, indent=2))


def _run_blur(args: argparse.Namespace) -> None:
    from rasterkit.core.pipeline import run_box_blur

    img = _load_input(args)
    if args.radius < 0:
        _fail(args, f"radius must be >= 0, got {args.radius}", "INVALID_INPUT")
    settings = Settings(blur_radius=args.radius)
    out = run_box_blur(img, settings)
    written, errors = _write_outputs(
        [(BOX_BLUR_OUTPUT, out)], Path(args.output_dir), args.json
    )
    _report(args, img, {"radius": settings.blur_radius}, written, errors)


def _run_gaussian(args: argparse.Namespace) -> None:
    from rasterkit.core.pipeline import run_gaussian_blur

    img = _load_input(args)
    if args.sigma <= 0:
        _fail(args, f"sigma must be > 0, got {args.sigma}", "INVALID_INPUT")
    settings = Settings(sigma=args.sigma)
    out = run_gaussian_blur(img, settings)
    written, errors = _write_outputs(
        [(GAUSSIAN_BLUR_OUTPUT, out)], Path(args.output_dir), args.json
    )
    _report(args, img, {"sigma": settings.sigma}, written, errors)


def _run_dither(args: argparse.Namespace) -> None:
    from rasterkit.core.pipeline import dither_outputs, run_dither
    from rasterkit.utils.push import PushError, push_frame

    img = _load_input(args)
    if args.threshold is not None and args.levels > 2:
        _fail(
            args,
            f"--threshold only applies to 1-bit output, got --levels {args.levels}",
            "INVALID_INPUT",
        )
    settings = Settings(
        kernel=KernelName(args.kernel),
        threshold=0.5 if args.threshold is None else args.threshold,
        levels=args.levels,
    )
    result = run_dither(img, settings)
    written, errors = _write_outputs(
        dither_outputs(result), Path(args.output_dir), args.json
    )

    extra = None
    if args.ip:
        try:
            sent = push_frame(result.dithered, args.ip, port=args.port)
        except PushError as e:
            logger.debug("Push failed: %s", e)
            if args.json:
                _json_error(str(e), "CONNECT_FAILED")
            print("Error connecting...", file=sys.stderr)
            sys.exit(1)
        if not args.json:
            print(f"Pushed {sent} bytes to {args.ip}:{args.port}", file=sys.stderr)
        extra = {"push": {"host": args.ip, "port": args.port, "bytes": sent}}

    _report(
        args,
        img,
        {
            "kernel": settings.kernel.value,
            "threshold": settings.threshold,
            "levels": settings.levels,
        },
        written,
        errors,
        extra,
    )


def _run_preview(args: argparse.Namespace) -> None:
    from rasterkit.app import run_app

    run_app(input_path=args.filename)


def main(argv: list[str] | None = None) -> None:
    """Main entry point.

    Routing:
      rasterkit blur <file> [opts]           → box blur
      rasterkit gaussian <file> [opts]       → gaussian blur
      rasterkit dither <file> [ip] [opts]    → greyscale / quantise / dither
      rasterkit preview [file]               → launch TUI
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_usage(sys.stderr)
        sys.exit(1)

    _configure_logging(getattr(args, "verbose", False))

    if args.command == "blur":
        _run_blur(args)
    elif args.command == "gaussian":
        _run_gaussian(args)
    elif args.command == "dither":
        _run_dither(args)
    elif args.command == "preview":
        _run_preview(args)
