"""Render configuration and environment settings.

``RenderConfig`` is what callers hand to :func:`easy_captcha.generate.generate_captcha`.
Fields left as ``None`` are filled in by :func:`resolve_config`; nothing else is
validated, so zero-sized canvases and empty text pass straight through.
"""

import os
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image, ImageFont
from pydantic import BaseModel, ConfigDict, Field

from .constants import (DEFAULT_BACKGROUND_COLOR, DEFAULT_CHAR_COLOR,
                        DEFAULT_CURVE_COUNT, DEFAULT_FONT_SIZE,
                        DEFAULT_LINE_WIDTH, DEFAULT_NOISE_COUNT, LOG_DIR,
                        OUTPUT_DIR)

RGBA = Tuple[int, int, int, int]
FontRef = Union[str, Path, ImageFont.FreeTypeFont]
BackgroundRef = Union[str, Path, Image.Image]


class RenderConfig(BaseModel):
    """Parameters for one captcha generation call."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    width: int = Field(..., description="Canvas width in pixels")
    height: int = Field(..., description="Canvas height in pixels")
    text: str = Field(default="", description="Characters to render")
    font: Optional[FontRef] = Field(
        default=None, description="Font file path or loaded FreeType font; None for the built-in font"
    )
    font_size: Optional[float] = None
    char_color: Optional[RGBA] = Field(
        default=None, description="Glyph color used when random_char_colors is off"
    )
    background_color: Optional[RGBA] = None
    background_image: Optional[BackgroundRef] = Field(
        default=None, description="Image drawn at the origin instead of the color fill"
    )
    noise_count: Optional[int] = None
    curve_count: Optional[int] = None
    line_width: Optional[float] = None
    random_char_colors: bool = True


class Settings(BaseModel):
    """Process-wide settings read from the environment."""

    output_dir: str = OUTPUT_DIR
    font_path: Optional[str] = None
    log_dir: str = LOG_DIR
    log_level: str = "INFO"
    rate_limit: str = "10/minute"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            output_dir=os.environ.get("EASY_CAPTCHA_OUTPUT_DIR", OUTPUT_DIR),
            font_path=os.environ.get("EASY_CAPTCHA_FONT_PATH") or None,
            log_dir=os.environ.get("EASY_CAPTCHA_LOG_DIR", LOG_DIR),
            log_level=os.environ.get("EASY_CAPTCHA_LOG_LEVEL", "INFO").upper(),
            rate_limit=os.environ.get("EASY_CAPTCHA_RATE_LIMIT", "10/minute"),
        )


def get_settings() -> Settings:
    """Return settings for the current environment.

    Read on every call so tests can patch the environment.
    """
    return Settings.from_env()


def resolve_config(config: RenderConfig, settings: Optional[Settings] = None) -> RenderConfig:
    """Return a copy of ``config`` with every absent field defaulted.

    ``font_size`` and ``line_width`` treat zero as absent. The counts only
    default when ``None`` so that an explicit zero disables noise or curves.
    """
    if settings is None:
        settings = get_settings()

    updates = {}
    if config.font is None and settings.font_path:
        updates["font"] = settings.font_path
    if not config.font_size:
        updates["font_size"] = float(DEFAULT_FONT_SIZE)
    if config.char_color is None:
        updates["char_color"] = DEFAULT_CHAR_COLOR
    if config.background_color is None:
        updates["background_color"] = DEFAULT_BACKGROUND_COLOR
    if config.noise_count is None:
        updates["noise_count"] = DEFAULT_NOISE_COUNT
    if config.curve_count is None:
        updates["curve_count"] = DEFAULT_CURVE_COUNT
    if not config.line_width:
        updates["line_width"] = DEFAULT_LINE_WIDTH

    return config.model_copy(update=updates)
