"""Font loading and per-size rasterization."""

import logging
from pathlib import Path
from typing import Optional

from PIL import ImageFont

from .config import FontRef
from .errors import FontLoadError, GlyphRenderError

logger = logging.getLogger(__name__)


class FontFace:
    """A font that can be re-rasterized at arbitrary sizes.

    Args:
        font: Path to a TrueType/OpenType file, an already loaded
            ``FreeTypeFont``, or ``None`` for Pillow's built-in font.
        probe_size: Size used to check that the font loads at all.

    Raises:
        FontLoadError: The font file is missing or not a usable font.
    """

    def __init__(self, font: Optional[FontRef] = None, probe_size: float = 36):
        self.source = font
        if isinstance(font, ImageFont.FreeTypeFont):
            return
        if font is None:
            probe = ImageFont.load_default(size=probe_size)
            if not isinstance(probe, ImageFont.FreeTypeFont):
                raise FontLoadError("Built-in font is not scalable; Pillow was built without FreeType")
            return
        try:
            ImageFont.truetype(str(font), probe_size)
        except (OSError, ValueError) as e:
            raise FontLoadError(f"Cannot load font {font!r}: {e}") from e
        logger.debug("Loaded font %s", Path(str(font)).name)

    def at_size(self, size: float) -> ImageFont.FreeTypeFont:
        """Return this font rasterized at ``size`` pixels."""
        if size <= 0:
            raise GlyphRenderError(f"Font size must be positive, got {size:.2f}")
        try:
            if isinstance(self.source, ImageFont.FreeTypeFont):
                return self.source.font_variant(size=size)
            if self.source is None:
                return ImageFont.load_default(size=size)
            return ImageFont.truetype(str(self.source), size)
        except (OSError, ValueError) as e:
            raise GlyphRenderError(f"Cannot rasterize font at size {size:.2f}: {e}") from e
