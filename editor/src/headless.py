"""Headless Profile Picture Renderer: CLI entry point.

Composes one image file with the overlay template through the same
Compositor the editor uses and writes the result as PNG.

Usage:
    python editor/src/headless.py <input_file> [-t TEMPLATE] [-o OUTPUT]
        [--scale S] [--rotation DEG] [--tx X] [--ty Y] [--mirror] [--size N]

Translation (--tx/--ty) is in preview units (a 288-wide viewport), the
same units the editor stores, so values copied from the editor
reproduce its export.

Examples:
    python editor/src/headless.py me.jpg -o me_framed.png
    python editor/src/headless.py me.jpg --scale 1.3 --rotation 15 -o out.png
"""

import sys
import os
import argparse
import logging

# Add editor/src to path so imports work
_src_dir = os.path.dirname(os.path.abspath(__file__))
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)

from constants import OUTPUT_SIZE, PREVIEW_DIAMETER, DEFAULT_SCALE, DEFAULT_ROTATION
from models.transform import Transform, Vec2
from services.compositor import Compositor
from services.errors import ProfileFrameError
from services.image_loader import SourceImage, load_image_file, load_overlay_template
from utils.path_resolver import get_template_path

logger = logging.getLogger("headless")


def build_parser():
    parser = argparse.ArgumentParser(
        description="Compose an image with the profile overlay template.",
    )
    parser.add_argument("input", help="Source image file")
    parser.add_argument("-t", "--template", default=None,
                        help="Overlay template PNG (default: bundled template)")
    parser.add_argument("-o", "--output", default=None,
                        help="Output PNG path (default: <input>_profile.png)")
    parser.add_argument("--scale", type=float, default=DEFAULT_SCALE,
                        help="User scale, clamped to [0.5, 3.0] (default: 1.0)")
    parser.add_argument("--rotation", type=float, default=DEFAULT_ROTATION,
                        help="Rotation in degrees, clockwise (default: 0)")
    parser.add_argument("--tx", type=float, default=0.0, help="Horizontal offset in preview units")
    parser.add_argument("--ty", type=float, default=0.0, help="Vertical offset in preview units")
    parser.add_argument("--mirror", action="store_true", help="Flip the source horizontally")
    parser.add_argument("--size", type=int, default=OUTPUT_SIZE,
                        help=f"Output size in pixels (default: {OUTPUT_SIZE})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def default_output_path(input_path):
    base, _ = os.path.splitext(input_path)
    return f"{base}_profile.png"


def render(input_path, output_path, template_path, transform, mirrored=False, size=OUTPUT_SIZE):
    """Compose input_path with template_path and save a PNG to output_path.

    Raises:
        AcquisitionFailure: input unreadable
        TemplateLoadFailure: template unreadable
    """
    loaded = load_image_file(input_path)
    source = SourceImage(image=loaded.image, mirrored=mirrored, origin=loaded.origin)
    overlay = load_overlay_template(template_path)

    compositor = Compositor(output_size=size, preview_diameter=PREVIEW_DIAMETER)
    result = compositor.compose(source, transform, overlay)

    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    result.image.save(output_path, "PNG")
    return result


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    if args.size <= 0:
        logger.error("--size must be positive, got %d", args.size)
        return 2

    transform = Transform(scale=args.scale, rotation=args.rotation,
                          translation=Vec2(args.tx, args.ty))
    if transform.scale != args.scale:
        logger.warning("Scale %.2f clamped to %.2f", args.scale, transform.scale)

    output_path = args.output or default_output_path(args.input)
    template_path = get_template_path(args.template)

    try:
        render(args.input, output_path, template_path, transform,
               mirrored=args.mirror, size=args.size)
    except ProfileFrameError as e:
        logger.error("%s", e)
        return 1

    logger.info("Wrote %s", output_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
