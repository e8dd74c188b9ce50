"""FastAPI application serving captcha challenges.

Run with:

    uvicorn easy_captcha.main:app --host 0.0.0.0 --port 8000
"""

import uuid
from datetime import datetime, timedelta
from typing import Dict, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request, Response, status
from pydantic import BaseModel, Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import RenderConfig, get_settings
from .constants import CAPTCHA_EXPIRY_MINUTES, MAX_VERIFY_ATTEMPTS, SYMBOLS
from .errors import CaptchaError
from .generate import generate_captcha, random_text
from .log import configure_logging, get_trace_logger

settings = get_settings()
logger = configure_logging(settings.log_dir, settings.log_level)

# Rate limiter setup
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(title="Easy Captcha API", version="1.0.0")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

captcha_storage: Dict[str, Dict] = {}

MEDIA_TYPES = {"png": "image/png", "jpg": "image/jpeg"}


class ChallengeRequest(BaseModel):
    """Optional rendering overrides for a new challenge."""

    width: int = Field(default=240, gt=0, le=1200)
    height: int = Field(default=80, gt=0, le=600)
    min_length: int = Field(default=4, ge=1, le=12)
    max_length: int = Field(default=6, ge=1, le=12)
    noise_count: Optional[int] = Field(default=None, ge=0, le=10000)
    curve_count: Optional[int] = Field(default=None, ge=0, le=50)


class CaptchaResponse(BaseModel):
    """Response model for a captcha challenge."""

    captcha_id: str
    captcha_image_url: str
    image_base64: str
    expires_at: str


class VerifyRequest(BaseModel):
    captcha_id: str
    answer: str = Field(..., min_length=1)


class VerifyResponse(BaseModel):
    valid: bool
    attempts_left: int


def cleanup_expired_captchas():
    """Drop challenges whose expiry time has passed."""
    now = datetime.now()
    expired = [cid for cid, data in captcha_storage.items() if data["expires_at"] < now]
    for cid in expired:
        del captcha_storage[cid]
    if expired:
        logger.debug("Removed %d expired captchas", len(expired))


def _get_live_captcha(captcha_id: str) -> Dict:
    entry = captcha_storage.get(captcha_id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="CAPTCHA not found")
    if entry["expires_at"] < datetime.now():
        del captcha_storage[captcha_id]
        raise HTTPException(status_code=status.HTTP_410_GONE, detail="CAPTCHA has expired")
    return entry


@app.post("/api/captcha/challenge", response_model=CaptchaResponse)
@limiter.limit(settings.rate_limit)
async def generate_captcha_challenge(request: Request, payload: Optional[ChallengeRequest] = None):
    """Generate a new captcha challenge.

    Rate limited per client IP address.
    """
    cleanup_expired_captchas()
    payload = payload or ChallengeRequest()
    if payload.min_length > payload.max_length:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="min_length must not exceed max_length",
        )

    captcha_id = str(uuid.uuid4())
    tlog = get_trace_logger(captcha_id)
    text = random_text(SYMBOLS, payload.min_length, payload.max_length)

    try:
        captcha = generate_captcha(
            RenderConfig(
                width=payload.width,
                height=payload.height,
                text=text,
                noise_count=payload.noise_count,
                curve_count=payload.curve_count,
            )
        )
        image_base64 = captcha.to_string()
    except CaptchaError as e:
        tlog.exception("CAPTCHA generation failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate CAPTCHA: {str(e)}",
        )

    created_at = datetime.now()
    expires_at = created_at + timedelta(minutes=CAPTCHA_EXPIRY_MINUTES)
    captcha_storage[captcha_id] = {
        "text": text.upper(),
        "captcha": captcha,
        "created_at": created_at,
        "expires_at": expires_at,
        "attempts": 0,
    }
    tlog.info("CAPTCHA generated: id=%s text_len=%d expires_at=%s", captcha_id, len(text), expires_at.isoformat())

    return CaptchaResponse(
        captcha_id=captcha_id,
        captcha_image_url=f"/captcha/{captcha_id}.png",
        image_base64=image_base64,
        expires_at=expires_at.isoformat(),
    )


@app.get("/captcha/{filename}")
async def get_captcha_image(filename: str):
    """Serve a captcha image as PNG or JPEG, chosen by the file extension."""
    captcha_id, _, ext = filename.rpartition(".")
    ext = ext.lower()
    if ext == "jpeg":
        ext = "jpg"
    if not captcha_id or ext not in MEDIA_TYPES:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="CAPTCHA image not found")

    entry = _get_live_captcha(captcha_id)
    captcha = entry["captcha"]
    try:
        data = captcha.to_png() if ext == "png" else captcha.to_jpg()
    except CaptchaError as e:
        get_trace_logger(captcha_id).exception("CAPTCHA encoding failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    get_trace_logger(captcha_id).info("CAPTCHA image served: id=%s format=%s", captcha_id, ext)
    return Response(content=data, media_type=MEDIA_TYPES[ext])


@app.post("/api/captcha/verify", response_model=VerifyResponse)
async def verify_captcha(payload: VerifyRequest):
    """Check an answer. A challenge is consumed on success or after too many failures."""
    entry = _get_live_captcha(payload.captcha_id)
    tlog = get_trace_logger(payload.captcha_id)

    entry["attempts"] += 1
    valid = payload.answer.strip().upper() == entry["text"]
    attempts_left = max(0, MAX_VERIFY_ATTEMPTS - entry["attempts"])

    if valid or attempts_left == 0:
        del captcha_storage[payload.captcha_id]
    tlog.info("CAPTCHA verification: valid=%s attempts=%d", valid, entry["attempts"])

    return VerifyResponse(valid=valid, attempts_left=0 if valid else attempts_left)


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "active_captchas": len(captcha_storage),
    }


def run():
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
