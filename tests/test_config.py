"""Tests for config resolution and environment settings.

Run: pytest tests/test_config.py -v
"""
from easy_captcha.config import RenderConfig, Settings, get_settings, resolve_config
from easy_captcha.constants import (DEFAULT_BACKGROUND_COLOR,
                                    DEFAULT_CHAR_COLOR, OUTPUT_DIR)


class TestResolveConfig:
    """Defaults are supplied only where fields are absent."""

    def test_absent_fields_get_defaults(self):
        config = resolve_config(RenderConfig(width=240, height=80, text="TEST"), Settings())
        assert config.font is None
        assert config.font_size == 36
        assert config.char_color == DEFAULT_CHAR_COLOR == (255, 0, 0, 255)
        assert config.background_color == DEFAULT_BACKGROUND_COLOR == (255, 255, 255, 255)
        assert config.noise_count == 100
        assert config.curve_count == 2
        assert config.line_width == 1

    def test_zero_font_size_and_line_width_are_defaulted(self):
        config = resolve_config(RenderConfig(width=10, height=10, font_size=0, line_width=0), Settings())
        assert config.font_size == 36
        assert config.line_width == 1

    def test_explicit_zero_counts_are_kept(self):
        config = resolve_config(
            RenderConfig(width=10, height=10, noise_count=0, curve_count=0), Settings()
        )
        assert config.noise_count == 0
        assert config.curve_count == 0

    def test_caller_values_win(self):
        config = resolve_config(
            RenderConfig(
                width=300,
                height=90,
                font_size=20,
                background_color=(1, 2, 3, 255),
                noise_count=5,
                curve_count=7,
                line_width=2.5,
            ),
            Settings(),
        )
        assert config.font_size == 20
        assert config.background_color == (1, 2, 3, 255)
        assert config.noise_count == 5
        assert config.curve_count == 7
        assert config.line_width == 2.5

    def test_degenerate_inputs_pass_through(self):
        config = resolve_config(RenderConfig(width=0, height=0, text=""), Settings())
        assert (config.width, config.height, config.text) == (0, 0, "")

    def test_original_is_not_modified(self):
        original = RenderConfig(width=10, height=10)
        resolve_config(original, Settings())
        assert original.font_size is None
        assert original.noise_count is None

    def test_font_path_setting_used_when_font_absent(self):
        config = resolve_config(RenderConfig(width=10, height=10), Settings(font_path="/fonts/a.ttf"))
        assert config.font == "/fonts/a.ttf"

    def test_explicit_font_beats_setting(self):
        config = resolve_config(
            RenderConfig(width=10, height=10, font="mine.ttf"), Settings(font_path="/fonts/a.ttf")
        )
        assert config.font == "mine.ttf"


class TestSettings:
    """Environment overrides."""

    def test_defaults(self, monkeypatch):
        for name in ("EASY_CAPTCHA_OUTPUT_DIR", "EASY_CAPTCHA_FONT_PATH", "EASY_CAPTCHA_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = get_settings()
        assert settings.output_dir == OUTPUT_DIR
        assert settings.font_path is None
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("EASY_CAPTCHA_OUTPUT_DIR", "/tmp/caps")
        monkeypatch.setenv("EASY_CAPTCHA_FONT_PATH", "/fonts/b.ttf")
        monkeypatch.setenv("EASY_CAPTCHA_LOG_LEVEL", "debug")
        monkeypatch.setenv("EASY_CAPTCHA_RATE_LIMIT", "5/minute")
        settings = get_settings()
        assert settings.output_dir == "/tmp/caps"
        assert settings.font_path == "/fonts/b.ttf"
        assert settings.log_level == "DEBUG"
        assert settings.rate_limit == "5/minute"
