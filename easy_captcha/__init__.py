"""Distorted-text captcha image generation."""

from .config import RenderConfig, Settings, get_settings, resolve_config
from .errors import (BackgroundLoadError, CaptchaError, EncodeError,
                     FontLoadError, GlyphRenderError, PersistError)
from .export import Captcha
from .generate import generate_captcha, new_rng, random_text

__version__ = "1.0.0"

__all__ = [
    "BackgroundLoadError",
    "Captcha",
    "CaptchaError",
    "EncodeError",
    "FontLoadError",
    "GlyphRenderError",
    "PersistError",
    "RenderConfig",
    "Settings",
    "generate_captcha",
    "get_settings",
    "new_rng",
    "random_text",
    "resolve_config",
]
