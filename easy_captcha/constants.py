"""Default values shared by the generator, the CLI and the HTTP service."""

DEFAULT_FONT_SIZE = 36
DEFAULT_CHAR_COLOR = (255, 0, 0, 255)
DEFAULT_BACKGROUND_COLOR = (255, 255, 255, 255)
DEFAULT_NOISE_COUNT = 100
DEFAULT_CURVE_COUNT = 2
DEFAULT_LINE_WIDTH = 1.0

# Glyph jitter ranges
MAX_ROTATION_DEGREES = 30.0
FONT_SIZE_JITTER = 5.0

SEGMENTS_PER_CURVE = 3
# Points sampled along each quadratic segment when stroking
CURVE_SAMPLES_PER_SEGMENT = 24

SYMBOLS = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"

OUTPUT_DIR = "captcha_images"
LOG_DIR = "logs"
LOG_FILE_NAME = "easy_captcha.log"

CAPTCHA_EXPIRY_MINUTES = 5
MAX_VERIFY_ATTEMPTS = 3
