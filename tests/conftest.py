from datetime import datetime, timedelta, timezone

import pytest

from infrastructure.storage.memory_store import MemoryTableStore


class FakeClock:
    """Controllable replacement for shared.datetime_utils.utc_now."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeNotifier:
    """Records deliveries for both EmailProvider and SmsProvider."""

    def __init__(self, succeed: bool = True) -> None:
        self.succeed = succeed
        self.sent: list[tuple[str, str, str]] = []

    async def send_otp_email(self, email: str, otp_code: str) -> bool:
        self.sent.append(("email", email, otp_code))
        return self.succeed

    async def send_otp_sms(self, phone: str, otp_code: str) -> bool:
        self.sent.append(("phone", phone, otp_code))
        return self.succeed

    def last_code(self) -> str:
        return self.sent[-1][2]


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock):
    return MemoryTableStore(clock=clock)


@pytest.fixture
def notifier():
    return FakeNotifier()
