"""
Unit tests for the shared/ utility modules.

Covers:
- shared.generators      (generate_otp_code, generate_row_suffix, generate_etag)
- shared.crypto          (hash_token, verify_token, normalize_subject)
- shared.datetime_utils  (ensure_utc, to_epoch_millis)
- shared.logging         (hash_subject)
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone

import pytest

from errors import MissingInputError
from shared.crypto import hash_token, normalize_subject, verify_token
from shared.datetime_utils import ensure_utc, to_epoch_millis
from shared.generators import (
    OTP_MAX,
    OTP_MIN,
    generate_etag,
    generate_otp_code,
    generate_row_suffix,
)
from shared.logging import hash_subject


# ---------------------------------------------------------------------------
# shared.generators
# ---------------------------------------------------------------------------


def test_generate_otp_code_is_six_digits():
    for _ in range(200):
        code = generate_otp_code()
        assert len(code) == 6
        assert code.isdigit()
        assert OTP_MIN <= int(code) <= OTP_MAX


def test_generate_otp_code_uses_randbelow_over_full_range(mocker):
    randbelow = mocker.patch("shared.generators.secrets.randbelow", return_value=0)
    assert generate_otp_code() == "100000"
    randbelow.assert_called_once_with(900_000)

    randbelow.return_value = 899_999
    assert generate_otp_code() == "999999"


def test_generate_otp_code_varies():
    assert len({generate_otp_code() for _ in range(50)}) > 1


def test_generate_row_suffix_is_hex():
    suffix = generate_row_suffix()
    assert len(suffix) == 8
    int(suffix, 16)


def test_generate_etag_unique():
    assert generate_etag() != generate_etag()


# ---------------------------------------------------------------------------
# shared.crypto
# ---------------------------------------------------------------------------


def test_hash_token_is_sha256_hex():
    assert hash_token("482913") == hashlib.sha256(b"482913").hexdigest()


def test_hash_token_deterministic():
    assert hash_token("123456") == hash_token("123456")
    assert hash_token("123456") != hash_token("123457")


def test_verify_token_match_and_mismatch():
    digest = hash_token("482913")
    assert verify_token("482913", digest) is True
    assert verify_token("482914", digest) is False


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("A@X.com", "a@x.com"),
        ("  a@x.com  ", "a@x.com"),
        ("a @ x . com", "a@x.com"),
        ("+1 555 010\t0199", "+15550100199"),
        ("already@normal.io", "already@normal.io"),
    ],
    ids=["case", "surrounding_ws", "interior_ws", "phone", "noop"],
)
def test_normalize_subject(raw, expected):
    assert normalize_subject(raw) == expected


@pytest.mark.parametrize("raw", ["Mixed@Case.COM ", " +44 20 7946 0958", "x"])
def test_normalize_subject_idempotent(raw):
    once = normalize_subject(raw)
    assert normalize_subject(once) == once


@pytest.mark.parametrize("raw", [None, "", "   \n\t"])
def test_normalize_subject_missing(raw):
    with pytest.raises(MissingInputError):
        normalize_subject(raw)


# ---------------------------------------------------------------------------
# shared.datetime_utils
# ---------------------------------------------------------------------------


def test_ensure_utc_assumes_naive_is_utc():
    naive = datetime(2026, 1, 1, 10, 0, 0)
    assert ensure_utc(naive) == datetime(2026, 1, 1, 10, 0, 0, tzinfo=timezone.utc)


def test_ensure_utc_converts_offsets():
    plus_two = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert ensure_utc(plus_two).hour == 10


def test_to_epoch_millis():
    assert to_epoch_millis(datetime(1970, 1, 1, tzinfo=timezone.utc)) == 0
    assert (
        to_epoch_millis(datetime(1970, 1, 1, 0, 0, 1, 500_000, tzinfo=timezone.utc))
        == 1500
    )


# ---------------------------------------------------------------------------
# shared.logging
# ---------------------------------------------------------------------------


def test_hash_subject_pseudonymises_in_production(monkeypatch):
    monkeypatch.setattr("utils.logging_config.IS_PRODUCTION", True)
    hashed = hash_subject("a@x.com")
    assert hashed == hashlib.sha256(b"a@x.com").hexdigest()[:16]
    assert hash_subject("a@x.com") == hashed


def test_hash_subject_passthrough_in_development(monkeypatch):
    monkeypatch.setattr("utils.logging_config.IS_PRODUCTION", False)
    assert hash_subject("a@x.com") == "a@x.com"
