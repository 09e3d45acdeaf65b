from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from refsheet.src.color_probe.config import (
    ConfigValidationError,
    load_refsheet_config,
    validate_config_json,
)
from refsheet.src.color_probe.conversion import format_hsl_string, format_rgb_string
from refsheet.src.color_probe.io import ColorExtractionError, write_json
from refsheet.src.color_probe.models import PanelSize, Rect
from refsheet.src.color_probe.palette import (
    extract_palette_from_source,
    generate_color_segments,
)
from refsheet.src.color_probe.pipeline import ColorInspectionPipeline
from refsheet.src.color_probe.placement import PanelPlacer


def _size(value: str) -> tuple[float, float]:
    try:
        width, height = (float(part) for part in value.lower().split("x"))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got '{value}'") from exc
    return width, height


def _rect(value: str) -> Rect:
    try:
        x, y, width, height = (float(part) for part in value.split(","))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected X,Y,WIDTH,HEIGHT, got '{value}'") from exc
    return Rect(x=x, y=y, width=width, height=height)


def _compact(args: argparse.Namespace) -> bool | None:
    if args.compact:
        return True
    if args.no_compact:
        return False
    return None


def _add_placement_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--container",
        type=_size,
        default=(800.0, 600.0),
        help="Container size as WIDTHxHEIGHT in pixels.",
    )
    parser.add_argument(
        "--side",
        choices=("left", "right", "auto"),
        default="auto",
        help="Preferred panel side.",
    )
    compact = parser.add_mutually_exclusive_group()
    compact.add_argument(
        "--compact",
        action="store_true",
        help="Force the compact (narrow container) layout.",
    )
    compact.add_argument(
        "--no-compact",
        action="store_true",
        help="Force the regular layout even for narrow containers.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="refsheet",
        description="Inspect reference-sheet colors and place their info panels.",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging on stderr."
    )
    parser.add_argument(
        "--out",
        default=None,
        help="Optional JSON output path. If omitted, prints JSON to stdout.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    sample = subparsers.add_parser(
        "sample", help="Read the color of one pixel and place its info panel."
    )
    sample.add_argument("--image", required=True, help="Path or URL to the image.")
    sample.add_argument("--x", type=float, required=True, help="Pixel column.")
    sample.add_argument("--y", type=float, required=True, help="Pixel row.")
    sample.add_argument(
        "--region",
        type=_rect,
        default=None,
        help="Highlighted region as X,Y,WIDTH,HEIGHT (defaults to the pixel).",
    )
    _add_placement_args(sample)

    place = subparsers.add_parser(
        "place", help="Compute the info panel position for a highlighted region."
    )
    place.add_argument(
        "--region", type=_rect, required=True, help="Region as X,Y,WIDTH,HEIGHT."
    )
    place.add_argument(
        "--panel",
        type=_size,
        default=None,
        help="Panel size as WIDTHxHEIGHT (defaults to the layout size).",
    )
    _add_placement_args(place)

    palette = subparsers.add_parser(
        "palette", help="Extract the dominant colors of an image."
    )
    palette.add_argument("--image", required=True, help="Path or URL to the image.")
    palette.add_argument("--max-colors", type=int, default=8)
    palette.add_argument(
        "--quality", type=int, default=5, help="1-10, higher samples more pixels."
    )
    palette.add_argument("--min-difference", type=float, default=30.0)
    palette.add_argument(
        "--metric", choices=("redmean", "ciede2000"), default="redmean"
    )
    palette.add_argument("--keep-white", action="store_true")
    palette.add_argument("--keep-black", action="store_true")
    palette.add_argument(
        "--segments",
        action="store_true",
        help="Also emit auto-generated color segments.",
    )

    validate = subparsers.add_parser(
        "validate", help="Validate a reference-sheet JSON configuration."
    )
    validate.add_argument("--config", required=True, help="Path to the JSON file.")

    return parser


def _run(args: argparse.Namespace) -> tuple[dict[str, Any], int]:
    if args.command == "sample":
        pipeline = ColorInspectionPipeline()
        result = pipeline.run(
            args.image,
            args.x,
            args.y,
            container=Rect.from_size(*args.container),
            region=args.region,
            preferred_side=args.side,
            is_compact=_compact(args),
        )
        payload = result.to_dict()
        color = result.pixel.color
        payload["formatted"] = {
            "hex": color.hex,
            "rgb": format_rgb_string(color.rgb),
            "hsl": format_hsl_string(color.hsl),
        }
        return payload, 0

    if args.command == "place":
        placement = PanelPlacer().place(
            args.region,
            Rect.from_size(*args.container),
            preferred_side=args.side,
            panel_size=PanelSize(*args.panel) if args.panel else None,
            is_compact=_compact(args),
        )
        return placement.to_dict(), 0

    if args.command == "palette":
        colors = extract_palette_from_source(
            args.image,
            max_colors=args.max_colors,
            quality=args.quality,
            ignore_white=not args.keep_white,
            ignore_black=not args.keep_black,
            min_color_difference=args.min_difference,
            metric=args.metric,
        )
        payload = {"colors": [color.to_dict() for color in colors]}
        if args.segments:
            payload["segments"] = [s.to_dict() for s in generate_color_segments(colors)]
        return payload, 0

    if args.command == "validate":
        with open(args.config, encoding="utf-8") as handle:
            result = validate_config_json(handle.read())
        payload = {
            "is_valid": result.is_valid,
            "errors": result.errors,
            "warnings": result.warnings,
        }
        if result.is_valid:
            config = load_refsheet_config(args.config)
            payload["segments"] = [s.to_dict() for s in config.segments]
        return payload, 0 if result.is_valid else 1

    raise ValueError(f"unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")

    try:
        payload, status = _run(args)
    except (ColorExtractionError, ConfigValidationError, OSError) as exc:
        parser.exit(2, f"refsheet: error: {exc}\n")

    if args.out:
        write_json(payload, args.out)
    else:
        print(json.dumps(payload, indent=2))
    return status


if __name__ == "__main__":
    sys.exit(main())
