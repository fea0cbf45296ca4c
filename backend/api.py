"""
FastAPI Backend for the NEC IR Audio Encoder Web Application

SPDX-License-Identifier: MIT
Copyright (c) 2025 Josh Cheshire
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from pydantic import BaseModel, Field
from typing import Optional
import uvicorn
import logging
import os
import re
import asyncio
from datetime import datetime, timezone
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from config import GeneratorConfig, ModulationStyle, COMPENSATED_TIMING_FACTOR
from encoder import NECEncoder
from hexcodec import build_word, decode_hex

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Configure rate limiting
RATE_LIMIT = os.getenv("IR_RATE_LIMIT", "30/minute")
limiter = Limiter(key_func=get_remote_address)


app = FastAPI(
    title="NEC IR Audio Encoder API",
    description="Web API that turns NEC infrared remote commands into WAV audio",
    version="1.0.0"
)

# Security headers middleware
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "script-src 'self'; "
            "style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data:; "
            "connect-src 'self'; "
            "media-src 'self' blob:; "  # blob: needed for audio player
            "object-src 'none'; "
            "frame-ancestors 'none';"
        )
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

app.add_middleware(SecurityHeadersMiddleware)

# Add rate limiting to app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Security: Configure allowed origins. For development, using localhost.
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:8000,http://127.0.0.1:8000").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],  # Only allow needed methods
    allow_headers=["Content-Type", "Authorization"],
)

# Shared encoder for requests that use the default settings
encoder = NECEncoder()


# Pydantic models for request validation
class SignalOptions(BaseModel):
    """Generator settings a client may override"""
    carrier_khz: float = Field(38.0, gt=0, le=96, description="Carrier frequency in kHz (most remotes use 36-40)")
    modulation: ModulationStyle = Field(ModulationStyle.DIFFERENTIAL, description="differential (stereo), square or sine (mono)")
    repeat_count: int = Field(1, ge=1, le=10, description="Number of full frames to transmit")
    compensate_timing: bool = Field(False, description=f"Stretch timing by {COMPENSATED_TIMING_FACTOR} to offset slow playback")

    def to_config(self) -> GeneratorConfig:
        config = GeneratorConfig(modulation=self.modulation, repeat_count=self.repeat_count)
        config = config.with_carrier_khz(self.carrier_khz)
        if self.compensate_timing:
            config = config.compensated()
        return config

    def is_default(self) -> bool:
        return all(
            getattr(self, name) == field.default
            for name, field in SignalOptions.model_fields.items()
        )


class EncodeRequest(SignalOptions):
    """Request model for encoding an address/command pair"""
    address: int = Field(..., ge=0, le=255, description="8-bit device address")
    command: int = Field(..., ge=0, le=255, description="8-bit command code")
    name: Optional[str] = Field(None, max_length=32, description="Button name used in the download filename")

    class Config:
        json_schema_extra = {
            "example": {
                "address": 0x20,
                "command": 0x10,
                "name": "power",
                "carrier_khz": 38,
                "modulation": "differential"
            }
        }


class EncodeHexRequest(SignalOptions):
    """Request model for encoding a hex code from a remote code table"""
    hex_code: str = Field(..., min_length=8, max_length=10, description="8 hex digits, optional 0x prefix")
    name: Optional[str] = Field(None, max_length=32, description="Button name used in the download filename")

    class Config:
        json_schema_extra = {
            "example": {
                "hex_code": "0x20DF10EF",
                "name": "power"
            }
        }


def encoder_for(options: SignalOptions) -> NECEncoder:
    """Shared encoder for default settings, a fresh one otherwise"""
    if options.is_default():
        return encoder
    return NECEncoder(options.to_config())


def wav_response(wav_data: bytes, name: str) -> Response:
    # Only keep filename-safe characters
    safe_name = re.sub(r'[^A-Za-z0-9_-]', '_', name) or "custom"
    timestamp_str = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    filename = f"ir_command_{safe_name}_{timestamp_str}.wav"

    return Response(
        content=wav_data,
        media_type="audio/wav",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"'
        }
    )


# API Endpoints

@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "status": "online",
        "service": "NEC IR Audio Encoder API",
        "version": "1.0.0"
    }


@app.get("/api/modulations")
async def get_modulations():
    """List modulation styles with their channel count and default duty cycle"""
    return {
        style.value: {
            "channels": style.channels,
            "duty_cycle": style.default_duty_cycle
        }
        for style in ModulationStyle
    }


@app.post("/api/encode", response_class=Response)
@limiter.limit(RATE_LIMIT)
async def encode_command(request: Request, encode_request: EncodeRequest):
    """
    Encode an NEC address/command pair and return WAV audio file

    Returns the WAV file as audio/wav binary data
    """
    try:
        request_encoder = encoder_for(encode_request)
        word = build_word(encode_request.address, encode_request.command)

        wav_data = await asyncio.to_thread(request_encoder.encode, word)

        return wav_response(wav_data, encode_request.name or f"{word:08X}")

    except ValueError as e:
        # Input validation errors - safe to expose
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        # Unexpected errors - log details but return generic message
        logger.error(f"Encoding failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Encoding failed due to server error")


@app.post("/api/encode/hex", response_class=Response)
@limiter.limit(RATE_LIMIT)
async def encode_hex(request: Request, encode_request: EncodeHexRequest):
    """
    Encode a hex code (e.g. "0x20DF10EF") and return WAV audio file

    Only the address (bits 31-24) and command (bits 15-8) are used; the
    inverted bytes are always regenerated.
    """
    try:
        request_encoder = encoder_for(encode_request)
        word = decode_hex(encode_request.hex_code)

        wav_data = await asyncio.to_thread(request_encoder.encode, word)

        return wav_response(wav_data, encode_request.name or f"{word:08X}")

    except ValueError as e:
        # Input validation errors - safe to expose
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        # Unexpected errors - log details but return generic message
        logger.error(f"Hex encoding failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Encoding failed due to server error")


@app.post("/api/encode/preview")
@limiter.limit(RATE_LIMIT)
async def encode_preview(request: Request, encode_request: EncodeHexRequest):
    """
    Preview what a hex code encodes to (without generating audio)

    Useful for checking address/command bytes and signal length
    """
    try:
        request_encoder = encoder_for(encode_request)
        word = decode_hex(encode_request.hex_code)

        info = request_encoder.describe(word)
        info["command_name"] = encode_request.name or "Custom"
        return info

    except ValueError as e:
        # Input validation errors - safe to expose
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        # Unexpected errors - log details but return generic message
        logger.error(f"Preview failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Preview failed due to server error")


if __name__ == "__main__":
    # Run the API server
    # Security: Bind to 127.0.0.1 when behind nginx reverse proxy
    # Use 0.0.0.0 for direct access (development/testing)
    import sys

    # Check if --public flag is passed for direct access
    if "--public" in sys.argv:
        host = "0.0.0.0"
        print("WARNING: Running with public access (0.0.0.0)")
        print("Use nginx reverse proxy for production deployment")
    else:
        host = "127.0.0.1"
        print("Running on localhost only (127.0.0.1)")

    uvicorn.run(
        "api:app",
        host=host,
        port=8000,
        reload=True
    )
