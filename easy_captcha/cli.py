"""Command-line interface for batch captcha generation.

    easy-captcha --count 20 --output-dir out --workers 4
"""

import argparse
import logging
import multiprocessing
import os
import sys
from functools import partial
from typing import Optional, Tuple

from tqdm import tqdm

from .config import RenderConfig, get_settings
from .constants import (DEFAULT_CURVE_COUNT, DEFAULT_FONT_SIZE,
                        DEFAULT_LINE_WIDTH, DEFAULT_NOISE_COUNT, SYMBOLS)
from .errors import CaptchaError
from .export import safe_stem
from .generate import generate_captcha, new_rng, random_text
from .log import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="easy-captcha",
        description="Distorted-text captcha generator – rotated glyphs + noise + curves",
    )
    parser.add_argument("--width", type=int, default=240)
    parser.add_argument("--height", type=int, default=80)
    parser.add_argument("--count", type=int, default=1)
    parser.add_argument("--output-dir", type=str, default=None,
                        help="Destination directory (default: $EASY_CAPTCHA_OUTPUT_DIR or captcha_images)")
    parser.add_argument("--text", type=str, default=None,
                        help="Fixed captcha text; random text from --symbols when omitted")
    parser.add_argument("--symbols", type=str, default=SYMBOLS)
    parser.add_argument("--min-length", type=int, default=4)
    parser.add_argument("--max-length", type=int, default=6)
    parser.add_argument("--font-path", type=str, default=None,
                        help="TrueType/OpenType font file (default: built-in font)")
    parser.add_argument("--font-size", type=float, default=DEFAULT_FONT_SIZE)
    parser.add_argument("--noise", type=int, default=DEFAULT_NOISE_COUNT,
                        help="Number of noise pixels")
    parser.add_argument("--curves", type=int, default=DEFAULT_CURVE_COUNT,
                        help="Maximum number of overlay curves")
    parser.add_argument("--line-width", type=float, default=DEFAULT_LINE_WIDTH)
    parser.add_argument("--bg-image", type=str, default=None,
                        help="Background image drawn at the origin instead of a white fill")
    parser.add_argument("--format", choices=("png", "jpg"), default="png")
    parser.add_argument("--workers", type=int, default=1,
                        help="Worker processes (0 = all CPU cores)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Base seed; image i uses seed + i for reproducible output")
    parser.add_argument("--log-level", type=str, default=None)
    return parser


def generate_single_image(index: int, args: argparse.Namespace, output_dir: str) -> Tuple[int, str, Optional[str]]:
    """Generate and save one captcha. Run in the worker pool."""
    seed = None if args.seed is None else args.seed + index
    # one stream per image: text draws first, then the image
    rng = new_rng(seed)
    text = args.text
    if text is None:
        text = random_text(args.symbols, args.min_length, args.max_length, rng)

    config = RenderConfig(
        width=args.width,
        height=args.height,
        text=text,
        font=args.font_path,
        font_size=args.font_size,
        background_image=args.bg_image,
        noise_count=args.noise,
        curve_count=args.curves,
        line_width=args.line_width,
    )
    try:
        captcha = generate_captcha(config, rng=rng)
        path = captcha.save(os.path.join(output_dir, f"{index + 1:05d}_{safe_stem(text)}.{args.format}"), args.format)
    except CaptchaError as e:
        logger.error("Failed to generate captcha %d (%s): %s", index + 1, text, e)
        return index, text, None
    return index, text, path


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.min_length > args.max_length:
        parser.error("--min-length must not exceed --max-length")
    settings = get_settings()
    configure_logging(settings.log_dir, args.log_level or settings.log_level)

    output_dir = args.output_dir or settings.output_dir
    os.makedirs(output_dir, exist_ok=True)

    workers = args.workers if args.workers > 0 else multiprocessing.cpu_count()
    job = partial(generate_single_image, args=args, output_dir=output_dir)

    logger.info("Generating %d captchas %dx%d into %s using %d worker(s)",
                args.count, args.width, args.height, output_dir, workers)

    if workers == 1:
        results = [job(i) for i in tqdm(range(args.count), desc="CAPTCHA")]
    else:
        with multiprocessing.Pool(processes=workers) as pool:
            results = list(tqdm(pool.imap_unordered(job, range(args.count)), total=args.count, desc="CAPTCHA"))

    failed = [index for index, _, path in results if path is None]
    for index, text, path in sorted(results):
        if path is not None:
            logger.debug("Generated %s -> %s", text, path)

    logger.info("Done -> %s (%d ok, %d failed)", output_dir, len(results) - len(failed), len(failed))
    return 1 if failed else 0


if __name__ == "__main__":
    multiprocessing.freeze_support()
    sys.exit(main())
