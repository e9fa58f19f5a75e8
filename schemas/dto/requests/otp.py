"""
Request DTOs for passcode endpoints.

SendOtpRequest    - POST /otp/send
VerifyOtpRequest  - POST /otp/verify
ClearOtpRequest   - POST /otp/clear

Fields are optional at the schema level so absent values reach the service
and come back as ``missing_input`` errors instead of framework 422s.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SendOtpRequest(BaseModel):
    """Request body for POST /otp/send.

    ``channel`` is ``"email"`` or ``"phone"``.
    """

    model_config = ConfigDict(populate_by_name=True)

    destination: str | None = None
    channel: str | None = None


class VerifyOtpRequest(BaseModel):
    """Request body for POST /otp/verify.

    ``code`` is the 6-digit OTP delivered to ``destination``.
    """

    model_config = ConfigDict(populate_by_name=True)

    destination: str | None = None
    code: str | None = None


class ClearOtpRequest(BaseModel):
    """Request body for POST /otp/clear."""

    model_config = ConfigDict(populate_by_name=True)

    destination: str | None = None
