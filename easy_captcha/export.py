"""Encoding and persistence of generated captchas."""

import base64
import logging
import os
import time
from io import BytesIO
from typing import Optional

from PIL import Image

from .config import get_settings
from .errors import EncodeError, PersistError

logger = logging.getLogger(__name__)


def safe_stem(text: str) -> str:
    """Turn caption text into a single path component."""
    stem = text
    for sep in (os.sep, os.altsep):
        if sep:
            stem = stem.replace(sep, "_")
    return stem.replace("..", "_")


class Captcha:
    """A finished captcha image and the text it shows.

    The image is never modified after generation, so a failed export can be
    retried in another format or to another path.
    """

    def __init__(self, image: Image.Image, text: str):
        self._image = image
        self._text = text

    @property
    def image(self) -> Image.Image:
        return self._image

    @property
    def text(self) -> str:
        return self._text

    @property
    def size(self):
        return self._image.size

    def _encode(self, fmt: str, image: Image.Image) -> bytes:
        buffered = BytesIO()
        try:
            image.save(buffered, format=fmt)
        except (OSError, ValueError, SystemError, KeyError) as e:
            raise EncodeError(f"Failed to encode captcha as {fmt}: {e}") from e
        return buffered.getvalue()

    def to_png(self) -> bytes:
        return self._encode("PNG", self._image)

    def to_jpg(self) -> bytes:
        # JPEG has no alpha channel; encoder default quality
        return self._encode("JPEG", self._image.convert("RGB"))

    def to_string(self) -> str:
        """Base64 (standard alphabet) of the PNG bytes."""
        return base64.b64encode(self.to_png()).decode("ascii")

    def default_path(self, ext: str, output_dir: Optional[str] = None) -> str:
        """``<output_dir>/<text>_<unixMillis>.<ext>``"""
        if output_dir is None:
            output_dir = get_settings().output_dir
        return os.path.join(output_dir, f"{safe_stem(self._text)}_{time.time_ns() // 1_000_000}.{ext}")

    def _save(self, data: bytes, ext: str, path: Optional[str]) -> str:
        if path is None:
            path = self.default_path(ext)
        try:
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(path, "wb") as fh:
                fh.write(data)
        except OSError as e:
            raise PersistError(f"Failed to write captcha to {path}: {e}") from e
        logger.info("Saved captcha image: %s (%d bytes)", path, len(data))
        return path

    def save_png(self, path: Optional[str] = None) -> str:
        """Write PNG bytes to ``path`` (or a derived name) and return the path."""
        return self._save(self.to_png(), "png", path)

    def save_jpg(self, path: Optional[str] = None) -> str:
        """Write JPEG bytes to ``path`` (or a derived name) and return the path."""
        return self._save(self.to_jpg(), "jpg", path)

    def save(self, path: Optional[str] = None, fmt: str = "png") -> str:
        fmt = fmt.lower()
        if fmt == "png":
            return self.save_png(path)
        if fmt in ("jpg", "jpeg"):
            return self.save_jpg(path)
        raise ValueError(f"Unsupported format: {fmt}")
