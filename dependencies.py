"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Everything they return is built once in the
application lifespan and stored on app.state.
"""

from __future__ import annotations

from fastapi import Request

from services.otp.dispatcher import OtpDispatcher


async def get_redis(request: Request):
    """Return the async Redis client from app.state (None if not configured)."""
    return request.app.state.redis


async def get_otp_dispatcher(request: Request) -> OtpDispatcher:
    """Return the OtpDispatcher built at startup."""
    return request.app.state.otp_dispatcher
