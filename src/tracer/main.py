import argparse
import sys
import cv2
from tracer.config import make_config, parse_resolution, parse_flag, ACCELERATOR_NAMES
from tracer.constants import DEFAULT_SEED, MAX_BOUNCES
from tracer.errors import InvalidArgument, RenderError, OutputError
from tracer.partition import PARTITION_MODES
from tracer.renderer import render
from tracer.scene import SCENES
from tracer.utils import get_logger

logger = get_logger('main')

EXIT_OK = 0
EXIT_INVALID_ARGUMENT = 2
EXIT_RENDER_FAILURE = 3
EXIT_OUTPUT_FAILURE = 4


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog='tracer', description="Render a preset scene to an image file.")
    parser.add_argument('output', help="image path, the extension picks the format (e.g. out.png)")
    parser.add_argument('resolution', help="WIDTHxHEIGHT, e.g. 640x480")
    parser.add_argument('spp', type=int, help="samples per pixel")
    parser.add_argument('accelerator', choices=ACCELERATOR_NAMES)
    parser.add_argument('partition', choices=PARTITION_MODES)
    parser.add_argument('parallel', choices=('yes', 'no'))
    parser.add_argument('--scene', choices=sorted(SCENES), default='sample')
    parser.add_argument('--seed', type=int, default=DEFAULT_SEED)
    parser.add_argument('--workers', type=int, default=None)
    parser.add_argument('--max-depth', type=int, default=MAX_BOUNCES)
    return parser.parse_args(argv)


def write_image(path, framebuffer):
    try:
        written = cv2.imwrite(path, framebuffer.to_bgr8())
    except cv2.error as e:
        raise OutputError("could not encode %s: %s" % (path, e)) from e
    if not written:
        raise OutputError("could not write %s" % path)


def main(argv=None):
    args = parse_args(argv)
    try:
        width, height = parse_resolution(args.resolution)
        cfg = make_config(width=width, height=height, spp=args.spp, accelerator=args.accelerator,
                          partition=args.partition, parallel=parse_flag(args.parallel), workers=args.workers,
                          seed=args.seed, max_depth=args.max_depth)
        framebuffer = render(SCENES[args.scene](), cfg)
    except InvalidArgument as e:
        logger.error("invalid argument: %s", e)
        return EXIT_INVALID_ARGUMENT
    except RenderError as e:
        logger.error("render failed: %s", e)
        return EXIT_RENDER_FAILURE

    try:
        write_image(args.output, framebuffer)
    except OutputError as e:
        logger.error("%s", e)
        return EXIT_OUTPUT_FAILURE

    logger.info("wrote %s", args.output)
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
