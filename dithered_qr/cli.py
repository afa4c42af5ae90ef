"""Command-line interface for dithered_qr.

Human-readable progress goes to stderr; --json prints a structured result
on stdout for scripting.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dithered_qr.core.matrix import ErrorCorrection


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dithered-qr",
        description=(
            "Generate dithered QR codes with image overlay using "
            "Floyd-Steinberg dithering."
        ),
    )
    parser.add_argument("-t", "--text", required=True, help="Text to encode in the QR code.")
    parser.add_argument(
        "-i", "--image", required=True, help="Input image path or HTTP(S) URL."
    )
    parser.add_argument(
        "-o", "--output",
        required=True,
        help="Output image path. Format is chosen by extension.",
    )
    parser.add_argument(
        "-r", "--ratio",
        type=int,
        default=3,
        help="Cell subdivision ratio, must be odd (default: 3).",
    )
    parser.add_argument(
        "-g", "--gamma",
        type=float,
        default=2.2,
        help="Gamma correction (default: 2.2).",
    )
    parser.add_argument(
        "-c", "--contrast",
        type=float,
        default=1.0,
        help="Contrast multiplier (default: 1.0).",
    )
    parser.add_argument(
        "-b", "--brightness",
        type=float,
        default=0.0,
        help="Brightness offset (default: 0.0).",
    )
    parser.add_argument(
        "-e", "--error-correction",
        type=str.upper,
        choices=[e.value for e in ErrorCorrection],
        default="L",
        help="QR code error correction level (default: L).",
    )
    parser.add_argument(
        "-u", "--upscale",
        type=int,
        default=1,
        help="Upscale factor for the output image (default: 1, no upscaling).",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Decode the result with OpenCV and report whether it scans.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output structured JSON (pipe-friendly).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show stack traces on error.",
    )
    return parser


def _fail(message: str, code: str, is_json: bool, debug: bool = False) -> None:
    """Report an error on stderr and exit with code 1."""
    if debug:
        import traceback
        traceback.print_exc(file=sys.stderr)
    if is_json:
        err = {"status": "error", "error": message, "code": code}
        print(json.dumps(err), file=sys.stderr)
    else:
        print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _run(args: argparse.Namespace) -> None:
    """Run the generate pipeline for parsed arguments."""
    from dithered_qr.core.matrix import generate_qr_matrix
    from dithered_qr.core.processor import Settings, dither_matrix
    from dithered_qr.core.reader import load_image
    from dithered_qr.core.writer import render_grid, save_output, upscale

    is_json = args.json

    def progress(message: str) -> None:
        if not is_json:
            print(message, file=sys.stderr)

    settings = Settings(
        ratio=args.ratio,
        gamma=args.gamma,
        contrast=args.contrast,
        brightness=args.brightness,
        error_correction=ErrorCorrection(args.error_correction),
        upscale=args.upscale,
    )

    # Validate before touching the image or building any grid
    try:
        settings.validate()
    except ValueError as e:
        _fail(str(e), "INVALID_ARGUMENT", is_json)

    output_path = Path(args.output).resolve()

    progress(f"Generating QR code for: {args.text}")
    try:
        matrix = generate_qr_matrix(args.text, settings.error_correction)
    except ValueError as e:
        _fail(str(e), "ENCODING_FAILED", is_json, args.debug)

    progress(f"Loading image: {args.image}")
    try:
        source = load_image(args.image)
    except (ValueError, OSError) as e:
        _fail(str(e), "INVALID_INPUT", is_json, args.debug)

    try:
        grid, _ = dither_matrix(matrix, source, settings)
        output_img = upscale(render_grid(grid), settings.upscale)
    except Exception as e:
        _fail(str(e), "PROCESSING_ERROR", is_json, args.debug)

    scannable = None
    if args.verify:
        import cv2

        from dithered_qr.core.verify import verify_image

        try:
            scannable = verify_image(
                output_img, args.text, module_px=settings.ratio * settings.upscale
            )
        except cv2.error as e:
            progress(f"Verification: decoder failed ({e})")
            scannable = False
        progress(
            "Verification: decodes OK"
            if scannable
            else "Verification: could not decode (try a larger ratio or a higher "
            "error-correction level)"
        )

    try:
        save_output(output_img, output_path)
    except (ValueError, OSError) as e:
        _fail(str(e), "SAVE_FAILED", is_json, args.debug)

    if not is_json:
        print(f"Saved to: {output_path}")
    else:
        result = {
            "status": "success",
            "output": str(output_path),
            "settings": {
                "ratio": settings.ratio,
                "gamma": settings.gamma,
                "contrast": settings.contrast,
                "brightness": settings.brightness,
                "error_correction": settings.error_correction.value,
                "upscale": settings.upscale,
            },
            "metadata": {
                "modules": int(matrix.shape[0]),
                "size": settings.output_size(int(matrix.shape[0])),
                "output_format": output_path.suffix.lstrip("."),
                "verified": scannable,
            },
        }
        print(json.dumps(result, indent=2))


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    _run(args)


if __name__ == "__main__":
    main()
