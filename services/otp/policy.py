"""
Sign-in carve-outs evaluated before the passcode machinery.

- Demo accounts never receive a code and always verify.
- Outside production, addresses at the test-identity domain (end-to-end
  test users) never receive a code; any six-digit code verifies except the
  configured failing code, which lets tests exercise the rejection path.

Both are pure predicates over the normalized subject. Neither touches the
table store.
"""

from __future__ import annotations

from typing import Iterable, Optional

from config import AppSettings
from shared.crypto import normalize_subject


class OtpPolicy:
    def __init__(
        self,
        *,
        demo_accounts: Iterable[str] = (),
        test_identity_domain: Optional[str] = None,
        test_failing_code: str = "000000",
        is_production: bool = True,
    ) -> None:
        self._demo_accounts = frozenset(normalize_subject(a) for a in demo_accounts)
        self._test_suffix = (
            f"@{test_identity_domain.lower()}" if test_identity_domain else None
        )
        self._test_failing_code = test_failing_code
        self._is_production = is_production

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "OtpPolicy":
        return cls(
            demo_accounts=settings.otp.otp_demo_accounts,
            test_identity_domain=settings.otp.otp_test_identity_domain,
            test_failing_code=settings.otp.otp_test_failing_code,
            is_production=settings.is_production,
        )

    def is_demo_account(self, subject_key: str) -> bool:
        return subject_key in self._demo_accounts

    def is_test_identity(self, subject_key: str) -> bool:
        if self._is_production or self._test_suffix is None:
            return False
        return subject_key.endswith(self._test_suffix)

    def test_identity_accepts(self, candidate: str) -> bool:
        return (
            len(candidate) == 6
            and candidate.isascii()
            and candidate.isdigit()
            and candidate != self._test_failing_code
        )
