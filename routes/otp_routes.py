"""
Passcode endpoints - a thin HTTP adapter over OtpDispatcher.

POST /otp/send    - issue a code and deliver it (202)
POST /otp/verify  - check a code ({"verified": bool})
POST /otp/clear   - invalidate the current code

Errors are AppError subclasses and are rendered by the global handlers:
400 missing_input / validation_error, 429 rate_limit_exceeded (with
Retry-After), 502 delivery_failed.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import get_otp_dispatcher
from schemas.dto.requests.otp import ClearOtpRequest, SendOtpRequest, VerifyOtpRequest
from schemas.dto.responses.common import ErrorResponse, MessageResponse
from schemas.dto.responses.otp import VerifyOtpResponse
from services.otp.dispatcher import OtpDispatcher

router = APIRouter(
    prefix="/otp",
    tags=["otp"],
    responses={400: {"model": ErrorResponse}},
)


@router.post(
    "/send",
    status_code=202,
    response_model=MessageResponse,
    responses={429: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def send_otp(
    body: SendOtpRequest,
    dispatcher: OtpDispatcher = Depends(get_otp_dispatcher),
) -> MessageResponse:
    await dispatcher.issue_and_send(body.destination, body.channel)
    return MessageResponse(success=True, message="Sign-in code sent.")


@router.post("/verify", response_model=VerifyOtpResponse)
async def verify_otp(
    body: VerifyOtpRequest,
    dispatcher: OtpDispatcher = Depends(get_otp_dispatcher),
) -> VerifyOtpResponse:
    verified = await dispatcher.verify(body.destination, body.code)
    return VerifyOtpResponse(verified=verified)


@router.post("/clear", response_model=MessageResponse)
async def clear_otp(
    body: ClearOtpRequest,
    dispatcher: OtpDispatcher = Depends(get_otp_dispatcher),
) -> MessageResponse:
    await dispatcher.clear(body.destination)
    return MessageResponse(success=True)
