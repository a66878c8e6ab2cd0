import argparse
import logging
import os

import matplotlib.image as mpimg

from pinray.common import Settings
from pinray.errors import RenderError
from pinray.render import render
from pinray.scenes import create_scene
from pinray.sink import show_image


def parse_args(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument("--cpu", action="store_true")
    parser.add_argument("--numba", action="store_true")

    parser.add_argument("--width", type=int, default=640, help="Image width")
    parser.add_argument("--height", type=int, default=480, help="Image height")
    parser.add_argument("--workers", type=int, default=os.cpu_count() or 1, help="Parallel workers")
    parser.add_argument("--band-rows", type=int, default=16, help="Pixel rows per work unit on the cpu backend")
    parser.add_argument("--shadow-bias", type=float, default=0.0, help="Offset shadow rays away from the surface")
    parser.add_argument("--clamp-intensity", action="store_true", help="Clamp reflect intensity instead of dropping to background")
    parser.add_argument("--output", default="render.png", help="Output PNG path")
    parser.add_argument("--show", action="store_true", help="Display the image once it is saved")
    parser.add_argument("--verbose", action="store_true")

    return parser, parser.parse_args(argv)


def main(argv=None):
    parser, args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        settings = Settings(
            width=args.width,
            height=args.height,
            backend="numba" if args.numba and not args.cpu else "cpu",
            workers=args.workers,
            band_rows=args.band_rows,
            shadow_bias=args.shadow_bias,
            clamp_intensity=args.clamp_intensity,
        )
        scene = create_scene(settings)
        render(
            settings.width,
            settings.height,
            scene.background,
            scene.camera,
            scene.light,
            scene.shapes,
            args.output,
            settings,
        )
    except RenderError as e:
        parser.error(str(e))

    if args.show:
        show_image(mpimg.imread(args.output))


if __name__ == "__main__":
    main()
