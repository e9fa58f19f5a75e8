"""
Response DTOs for passcode endpoints.

VerifyOtpResponse - POST /otp/verify  (200)

POST /otp/send and POST /otp/clear answer with MessageResponse.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class VerifyOtpResponse(BaseModel):
    """Response body for POST /otp/verify (200).

    ``verified`` is False for every failure reason.
    """

    model_config = ConfigDict(populate_by_name=True)

    verified: bool
