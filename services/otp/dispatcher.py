"""
Passcode façade: issue-and-send, verify, clear.

OtpDispatcher composes the rate limiter, credential store, sweeper, policy
carve-outs and the notifiers. It is the only entry point the HTTP layer (or
any other boundary) calls; CredentialStore.issue() is never exposed on its
own because a code must not exist without having been delivered.
"""

from __future__ import annotations

from typing import Optional, Union

from config import AppSettings
from errors import DeliveryError, MissingInputError, ValidationError
from infrastructure.email.protocol import EmailProvider
from infrastructure.sms.protocol import SmsProvider
from infrastructure.storage.protocol import TableStore
from schemas.models.otp import Channel
from services.otp.credential_store import CredentialStore
from services.otp.policy import OtpPolicy
from services.otp.rate_limiter import RateLimiter
from services.otp.sweeper import Sweeper
from shared.crypto import normalize_subject
from shared.datetime_utils import Clock, utc_now
from shared.logging import get_logger, hash_subject, log_with_context

log = get_logger(__name__)


class OtpDispatcher:
    def __init__(
        self,
        *,
        rate_limiter: RateLimiter,
        credentials: CredentialStore,
        sweeper: Sweeper,
        policy: OtpPolicy,
        email_provider: EmailProvider,
        sms_provider: SmsProvider,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._credentials = credentials
        self._sweeper = sweeper
        self._policy = policy
        self._email = email_provider
        self._sms = sms_provider

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        store: TableStore,
        email_provider: EmailProvider,
        sms_provider: SmsProvider,
        clock: Clock = utc_now,
    ) -> "OtpDispatcher":
        otp = settings.otp
        return cls(
            rate_limiter=RateLimiter(
                store,
                window_seconds=otp.otp_rate_window_seconds,
                max_generations=otp.otp_max_generations,
                clock=clock,
            ),
            credentials=CredentialStore(
                store,
                ttl_seconds=otp.otp_ttl_seconds,
                max_attempts=otp.otp_max_attempts,
                clock=clock,
            ),
            sweeper=Sweeper(
                store, window_seconds=otp.otp_rate_window_seconds, clock=clock
            ),
            policy=OtpPolicy.from_settings(settings),
            email_provider=email_provider,
            sms_provider=sms_provider,
        )

    async def issue_and_send(
        self, destination: Optional[str], channel: Union[Channel, str, None]
    ) -> None:
        """Generate a passcode for *destination* and deliver it over *channel*.

        Raises:
            MissingInputError: no destination or channel.
            ValidationError: unknown channel.
            RateLimitExceededError: too many codes in the rate window.
            DeliveryError: the notifier rejected the message.
        """
        channel = _parse_channel(channel)
        subject_key = normalize_subject(destination)
        bound = log_with_context(log, subject=hash_subject(subject_key), channel=channel.value)

        if self._policy.is_demo_account(subject_key):
            bound.info("otp_send_skipped", reason="demo_account")
            return
        if self._policy.is_test_identity(subject_key):
            bound.info("otp_send_skipped", reason="test_identity")
            return

        await self._rate_limiter.check_and_record(subject_key)
        code = await self._credentials.issue(subject_key)
        self._sweeper.schedule(subject_key)

        # Providers get the address as typed; storage is keyed by subject_key.
        address = destination.strip()
        if channel is Channel.EMAIL:
            delivered = await self._email.send_otp_email(address, code)
        else:
            delivered = await self._sms.send_otp_sms(address, code)

        if not delivered:
            bound.error("otp_delivery_failed")
            raise DeliveryError("Could not deliver the sign-in code. Please try again.")
        bound.info("otp_sent")

    async def verify(
        self, subject_or_destination: Optional[str], candidate: Optional[str]
    ) -> bool:
        """Check *candidate* against the subject's current passcode.

        Every failure (nothing issued, expired, locked out, wrong code,
        concurrent attempt) returns ``False``.

        Raises:
            MissingInputError: subject or candidate not supplied.
        """
        if candidate is None or not candidate.strip():
            raise MissingInputError("A code is required.", field="code")
        subject_key = normalize_subject(subject_or_destination)
        candidate = candidate.strip()

        if self._policy.is_demo_account(subject_key):
            log.info(
                "otp_verify_bypassed", subject=hash_subject(subject_key), reason="demo_account"
            )
            return True
        if self._policy.is_test_identity(subject_key):
            accepted = self._policy.test_identity_accepts(candidate)
            log.info(
                "otp_verify_bypassed",
                subject=hash_subject(subject_key),
                reason="test_identity",
                accepted=accepted,
            )
            return accepted

        return await self._credentials.verify(subject_key, candidate)

    async def clear(self, subject: Optional[str]) -> None:
        """Invalidate the subject's current passcode (e.g. once a session exists)."""
        subject_key = normalize_subject(subject)
        await self._credentials.clear(subject_key)
        log.info("otp_cleared", subject=hash_subject(subject_key))

    async def aclose(self) -> None:
        await self._sweeper.drain()


def _parse_channel(channel: Union[Channel, str, None]) -> Channel:
    if channel is None or channel == "":
        raise MissingInputError("A delivery channel is required.", field="channel")
    try:
        return Channel(channel)
    except ValueError:
        raise ValidationError(
            f"Unsupported channel {channel!r}.", field="channel"
        ) from None
