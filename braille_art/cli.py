"""Command-line interface for braille_art.

Prints braille art to stdout, saves it to a file, or emits JSON for
scripting.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from braille_art.core.luminance import GrayMethod
from braille_art.core.processor import (
    DEFAULT_HIGH,
    DEFAULT_LOW,
    DEFAULT_SIGMA,
    ConversionOptions,
)

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="braille-art",
        description="Convert images to Unicode braille art.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # --- convert subcommand ---
    convert = subparsers.add_parser(
        "convert",
        help="Convert an image file to braille art.",
    )
    convert.add_argument("input", help="Input image file path.")
    convert.add_argument(
        "-o", "--output",
        help="Output file (.txt, or an image format to render). Prints to stdout if omitted.",
    )
    convert.add_argument(
        "-w", "--width",
        type=int,
        default=None,
        help="Output width in characters (default: terminal width).",
    )
    convert.add_argument(
        "--full-size",
        action="store_true",
        help="Keep the image's pixel size instead of fitting a width.",
    )
    convert.add_argument(
        "-i", "--invert",
        action="store_true",
        help="Invert the braille pattern.",
    )
    convert.add_argument(
        "-g", "--gray",
        choices=[m.value for m in GrayMethod],
        default=GrayMethod.LUMINOSITY.value,
        help="Method to convert the image to grayscale (default: luminosity).",
    )
    convert.add_argument(
        "--gray-levels",
        type=int,
        default=0,
        help="Quantize luminance to this many levels before thresholding (default: off).",
    )
    convert.add_argument(
        "-m", "--monospace",
        action="store_true",
        help="Keep empty cells blank. If not set, they get a single dot for proportional fonts.",
    )
    convert.add_argument(
        "-t", "--threshold",
        type=float,
        default=128,
        help="Luminance threshold between dot and blank, 0 to 255 (default: 128).",
    )
    convert.add_argument(
        "--canny",
        action="store_true",
        help="Draw Canny edges instead of thresholding.",
    )
    convert.add_argument(
        "-s", "--sigma",
        type=float,
        help=f"Gaussian blur sigma for Canny (default: {DEFAULT_SIGMA}). Implies --canny.",
    )
    convert.add_argument(
        "-l", "--low",
        type=float,
        help=f"Canny low threshold, fraction of max gradient (default: {DEFAULT_LOW}). Implies --canny.",
    )
    convert.add_argument(
        "-H", "--high",
        type=float,
        help=f"Canny high threshold, fraction of max gradient (default: {DEFAULT_HIGH}). Implies --canny.",
    )
    convert.add_argument(
        "--json",
        action="store_true",
        help="Output structured JSON (pipe-friendly).",
    )
    convert.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log pipeline details to stderr.",
    )

    return parser


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


def options_from_args(args: argparse.Namespace) -> ConversionOptions:
    """Build conversion options from parsed CLI flags."""
    canny_enabled = args.canny or any(
        v is not None for v in (args.sigma, args.low, args.high)
    )
    return ConversionOptions(
        invert=args.invert,
        monospace=args.monospace,
        gray_method=GrayMethod(args.gray),
        gray_levels=args.gray_levels,
        threshold=args.threshold,
        canny_enabled=canny_enabled,
        canny_sigma=args.sigma,
        canny_low=args.low,
        canny_high=args.high,
    )


def _run_convert(args: argparse.Namespace) -> None:
    """Run the convert pipeline."""
    from braille_art.core.errors import ConversionError
    from braille_art.core.processor import convert_path
    from braille_art.core.writer import save_output
    from braille_art.utils.terminal import default_columns

    input_path = Path(args.input).resolve()
    if not input_path.exists():
        _fail(args, f"File not found: {input_path}", "FILE_NOT_FOUND")

    options = options_from_args(args)
    if args.full_size:
        columns = None
    elif args.width is None:
        columns = default_columns()
    else:
        columns = args.width

    try:
        result = convert_path(input_path, options, columns)
    except ConversionError as e:
        _fail(args, str(e), e.code)
    except (ValueError, OSError) as e:
        _fail(args, str(e), "INVALID_INPUT")

    output_path = Path(args.output).resolve() if args.output else None
    if output_path is not None:
        try:
            save_output(result, output_path)
        except (ValueError, OSError) as e:
            _fail(args, str(e), "WRITE_FAILED")
        logger.info("Saved to %s", output_path)

    if args.json:
        document = {
            "status": "success",
            "input": str(input_path),
            "output": str(output_path) if output_path else None,
            "text": result.text,
            "char_count": result.char_count,
            "columns": result.columns,
            "rows": result.rows,
            "settings": {
                "invert": options.invert,
                "monospace": options.monospace,
                "gray": GrayMethod(options.gray_method).value,
                "gray_levels": options.gray_levels,
                "threshold": options.threshold,
                "canny": None
                if options.canny_params is None
                else {
                    "sigma": options.canny_params.sigma,
                    "low": options.canny_params.low,
                    "high": options.canny_params.high,
                },
            },
        }
        print(json.dumps(document, indent=2, ensure_ascii=False))
    elif output_path is None:
        print(result.text)
    else:
        print(f"Saved {result.char_count} characters to {output_path}", file=sys.stderr)


def main(argv: list[str] | None = None) -> None:
    """Main entry point.

    Routing:
      braille-art convert <file> [opts]  -> convert subcommand
      braille-art <file> [opts]          -> same as convert
    """
    raw_args = sys.argv[1:] if argv is None else list(argv)
    if raw_args and raw_args[0] not in ("convert", "-h", "--help"):
        raw_args = ["convert", *raw_args]

    parser = _build_parser()
    args = parser.parse_args(raw_args)
    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    _run_convert(args)


if __name__ == "__main__":
    main()
