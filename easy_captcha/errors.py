"""Error kinds raised by captcha generation and export.

Every error is terminal for the operation that raised it. Generation errors
mean no image was produced; export errors leave the generated image usable.
"""


class CaptchaError(Exception):
    """Base class for all easy_captcha failures."""


class BackgroundLoadError(CaptchaError):
    """The background image could not be loaded."""


class FontLoadError(CaptchaError):
    """The font resource is missing or unreadable."""


class GlyphRenderError(CaptchaError):
    """A glyph could not be rasterized at its jittered size."""


class EncodeError(CaptchaError):
    """PNG or JPEG serialization failed."""


class PersistError(CaptchaError):
    """Writing encoded bytes to the filesystem failed."""
