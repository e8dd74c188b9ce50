"""Shared fixtures for easy_captcha tests."""

import os
import random
import tempfile

import numpy as np
import pytest
from PIL import Image

# Keep service log files out of the working tree; must run before easy_captcha.main is imported
os.environ.setdefault("EASY_CAPTCHA_LOG_DIR", tempfile.mkdtemp(prefix="easy_captcha_logs_"))

from easy_captcha.config import RenderConfig  # noqa: E402


class RecordingRandom(random.Random):
    """Random stream that records the order of top-level draws."""

    def __init__(self, seed=0):
        self.calls = []
        super().__init__(seed)

    def random(self):
        self.calls.append("random")
        return super().random()

    def randrange(self, *args, **kwargs):
        self.calls.append("randrange")
        return super().randrange(*args, **kwargs)

    # Defining getrandbits keeps randrange from drawing through random()
    def getrandbits(self, k):
        return super().getrandbits(k)


@pytest.fixture
def make_config():
    """Factory for RenderConfig with quiet defaults (no noise, no curves)."""

    def _make(**overrides):
        params = dict(width=240, height=80, text="TEST", noise_count=0, curve_count=0)
        params.update(overrides)
        return RenderConfig(**params)

    return _make


@pytest.fixture
def output_dir(tmp_path, monkeypatch):
    """Point the default output directory at a temp dir."""
    out = tmp_path / "out"
    monkeypatch.setenv("EASY_CAPTCHA_OUTPUT_DIR", str(out))
    monkeypatch.delenv("EASY_CAPTCHA_FONT_PATH", raising=False)
    return out


@pytest.fixture
def background_path(tmp_path):
    """A 100x50 random RGB image saved as PNG."""
    rng = np.random.default_rng(0)
    data = rng.integers(0, 256, (50, 100, 3), dtype=np.uint8)
    path = tmp_path / "bg.png"
    Image.fromarray(data, "RGB").save(path)
    return path


@pytest.fixture
def recording_random():
    """The RecordingRandom class, for tests that inspect draw order."""
    return RecordingRandom
