"""Twilio implementation of SmsProvider.

Posts to the Programmable Messaging REST API through the shared HttpClient,
authenticating with the account SID and auth token.
"""

from config import SmsSettings
from infrastructure.http_client import HttpClient
from shared.logging import get_logger, hash_subject

log = get_logger(__name__)

_TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


class TwilioSmsProvider:
    def __init__(
        self,
        settings: SmsSettings,
        http_client: HttpClient,
        app_name: str = "passcode",
        expires_in_minutes: int = 3,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._app_name = app_name
        self._expires_in_minutes = expires_in_minutes

    async def send_otp_sms(self, phone: str, otp_code: str) -> bool:
        if not (self._settings.twilio_account_sid and self._settings.twilio_auth_token):
            log.error("twilio_sms_send_failed", reason="credentials_not_configured")
            return False

        body = (
            f"{otp_code} is your {self._app_name} sign-in code. "
            f"It expires in {self._expires_in_minutes} minutes."
        )
        url = _TWILIO_MESSAGES_URL.format(sid=self._settings.twilio_account_sid)

        try:
            response = await self._http.post(
                url,
                data={
                    "To": phone,
                    "From": self._settings.twilio_from_number,
                    "Body": body,
                },
                auth=(
                    self._settings.twilio_account_sid,
                    self._settings.twilio_auth_token,
                ),
            )
            if response.status_code in (200, 201):
                log.info("sms_sent_success", to_phone=hash_subject(phone))
                return True
            log.error(
                "sms_sent_failed",
                to_phone=hash_subject(phone),
                status_code=response.status_code,
                response=response.text[:200],
            )
            return False
        except Exception as e:
            log.error(
                "sms_send_error",
                to_phone=hash_subject(phone),
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
