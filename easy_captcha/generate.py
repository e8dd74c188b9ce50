"""Distorted-text captcha generator.

Renders the target text onto a background with per-glyph random rotation,
size jitter and color, then scatters noise pixels and overlays random curves
under a shared length budget. One ``random.Random`` drives every decision in a
fixed order: glyphs, then noise, then curves.
"""

import logging
import random
import time
import uuid
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw

from .config import RenderConfig, resolve_config
from .constants import FONT_SIZE_JITTER, MAX_ROTATION_DEGREES
from .curves import draw_curves, plan_curves, random_color, total_length
from .errors import BackgroundLoadError, GlyphRenderError
from .export import Captcha
from .fonts import FontFace
from .log import get_trace_logger

logger = logging.getLogger(__name__)


def new_rng(seed: Optional[int] = None) -> random.Random:
    """Create the random stream for one generation call, time-seeded by default."""
    return random.Random(time.time_ns() if seed is None else seed)


def glyph_anchors(width: int, height: int, count: int) -> List[Tuple[float, float]]:
    """Centers of ``count`` glyphs spread over ``count + 1`` equal gaps."""
    spacing = width / (count + 1)
    y = height / 2
    return [(spacing * (i + 1), y) for i in range(count)]


def init_canvas(config: RenderConfig) -> Image.Image:
    """Create the RGBA surface from the background image or color.

    A background image is placed at the origin without scaling. Anything
    beyond the canvas is cropped and any canvas area it does not cover stays
    transparent.

    Raises:
        BackgroundLoadError: The background image path could not be loaded.
    """
    size = (config.width, config.height)
    if config.background_image is None:
        return Image.new("RGBA", size, tuple(config.background_color))

    src = config.background_image
    try:
        if isinstance(src, Image.Image):
            bg = src.convert("RGBA")
        else:
            with Image.open(src) as img:
                bg = img.convert("RGBA")
    except (OSError, ValueError) as e:
        raise BackgroundLoadError(f"Cannot load background image {src!r}: {e}") from e

    canvas = Image.new("RGBA", size, (0, 0, 0, 0))
    canvas.paste(bg.crop((0, 0, config.width, config.height)), (0, 0))
    return canvas


def render_glyphs(canvas: Image.Image, config: RenderConfig, font: FontFace, rng: random.Random) -> None:
    """Draw each character centered on its anchor, rotated about that anchor.

    Every glyph goes onto its own transparent layer which is rotated and
    composited, so no rotation carries over to the next glyph.
    """
    text = config.text
    for (x, y), char in zip(glyph_anchors(config.width, config.height, len(text)), text):
        angle = rng.random() * (2 * MAX_ROTATION_DEGREES) - MAX_ROTATION_DEGREES
        size = config.font_size + rng.random() * (2 * FONT_SIZE_JITTER) - FONT_SIZE_JITTER
        color = random_color(rng)
        if not config.random_char_colors:
            color = tuple(config.char_color)

        face = font.at_size(size)

        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        try:
            ImageDraw.Draw(layer).text((x, y), char, font=face, fill=color, anchor="mm")
        except (OSError, ValueError) as e:
            raise GlyphRenderError(f"Cannot render {char!r} at size {size:.2f}: {e}") from e

        # PIL rotates counter-clockwise; positive angles turn glyphs clockwise on screen
        layer = layer.rotate(-angle, resample=Image.Resampling.BICUBIC, center=(x, y))
        canvas.alpha_composite(layer)


def add_noise(canvas: Image.Image, noise_count: int, rng: random.Random) -> None:
    """Set ``noise_count`` random pixels to random opaque colors."""
    width, height = canvas.size
    for _ in range(noise_count):
        x = rng.randrange(width)
        y = rng.randrange(height)
        canvas.putpixel((x, y), random_color(rng))


def generate_captcha(config: RenderConfig, rng: Optional[random.Random] = None) -> Captcha:
    """Generate a captcha image from ``config``.

    Args:
        config: Render parameters; absent fields are defaulted.
        rng: Random stream to draw from. A fresh time-seeded stream is used
            when omitted; pass a seeded one for reproducible output.

    Returns:
        Captcha holding the finished image and its text.

    Raises:
        BackgroundLoadError, FontLoadError, GlyphRenderError: Generation
            failed and no image was produced.
    """
    config = resolve_config(config)
    if rng is None:
        rng = new_rng()

    tlog = get_trace_logger(uuid.uuid4().hex[:12], logger)
    tlog.debug(
        "Generating captcha: size=%dx%d text_len=%d noise=%d curves=%d",
        config.width, config.height, len(config.text), config.noise_count, config.curve_count,
    )

    font = FontFace(config.font)
    canvas = init_canvas(config)

    if config.width <= 0 or config.height <= 0:
        tlog.warning("Empty canvas %dx%d, skipping drawing stages", config.width, config.height)
        return Captcha(canvas, config.text)

    render_glyphs(canvas, config, font, rng)
    add_noise(canvas, config.noise_count, rng)

    paths = plan_curves(rng, config.width, config.height, config.curve_count)
    draw_curves(ImageDraw.Draw(canvas), paths, config.line_width)
    tlog.debug("Drew %d curves, total length %.1f of %d", len(paths), total_length(paths), config.width + config.height)

    return Captcha(canvas, config.text)


def random_text(symbols: str, min_length: int, max_length: int, rng: Optional[random.Random] = None) -> str:
    """Pick a random challenge string from ``symbols``."""
    rng = rng or random
    length = rng.randint(min_length, max_length)
    return "".join(rng.choice(symbols) for _ in range(length))
