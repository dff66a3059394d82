"""Tests for the HS256 token codec."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest
from freezegun import freeze_time

from taskmanager.infra.jwt.pyjwt_token_codec import PyJWTTokenCodec
from taskmanager.services._shared.errors import InvalidTokenError
from taskmanager.services._shared.ports.token_codec import TokenType

SECRET = "unit-test-secret-key-of-32-bytes!!"
OTHER_SECRET = "another-secret-key-of-32-bytes!!!!"


@pytest.fixture()
def codec() -> PyJWTTokenCodec:
    return PyJWTTokenCodec(secret=SECRET)


def test_issue_then_decode_carries_claims(codec):
    with freeze_time("2030-01-01 12:00:00"):
        raw = codec.issue(42, TokenType.ACCESS, timedelta(minutes=15))
        claims = codec.decode(raw)

    assert claims.subject_id == "42"
    assert claims.type is TokenType.ACCESS
    assert claims.issued_at == datetime(2030, 1, 1, 12, 0, tzinfo=UTC)
    assert claims.expires_at == datetime(2030, 1, 1, 12, 15, tzinfo=UTC)
    assert len(claims.jti) == 32


def test_wire_claims_are_exactly_the_documented_set(codec):
    raw = codec.issue(1, TokenType.REFRESH, timedelta(days=14))
    header = jwt.get_unverified_header(raw)
    payload = jwt.decode(raw, options={"verify_signature": False})

    assert header["alg"] == "HS256"
    assert set(payload) == {"sub", "typ", "iat", "exp", "jti"}
    assert payload["typ"] == "refresh"


def test_jti_is_unique_for_identical_inputs(codec):
    with freeze_time("2030-01-01 12:00:00"):
        jtis = {
            codec.decode(codec.issue(7, TokenType.REFRESH, timedelta(days=1))).jti
            for _ in range(50)
        }
    assert len(jtis) == 50


def test_expired_token_is_rejected(codec):
    with freeze_time("2030-01-01 12:00:00") as frozen:
        raw = codec.issue(1, TokenType.ACCESS, timedelta(minutes=15))
        frozen.tick(timedelta(minutes=15))
        # expiry is strict: a token is still valid at exactly ``exp``
        assert codec.decode(raw).subject_id == "1"
        frozen.tick(timedelta(seconds=1))
        with pytest.raises(InvalidTokenError, match="expired"):
            codec.decode(raw)


def test_injected_clock_controls_expiry():
    now = [datetime(2030, 1, 1, tzinfo=UTC)]
    codec = PyJWTTokenCodec(secret=SECRET, clock=lambda: now[0])
    raw = codec.issue(1, TokenType.ACCESS, timedelta(seconds=30))

    now[0] += timedelta(minutes=1)
    with pytest.raises(InvalidTokenError):
        codec.decode(raw)


def test_signature_from_other_key_is_rejected(codec):
    foreign = PyJWTTokenCodec(secret=OTHER_SECRET).issue(1, TokenType.ACCESS, timedelta(minutes=5))
    with pytest.raises(InvalidTokenError):
        codec.decode(foreign)


def test_tampered_payload_is_rejected(codec):
    raw = codec.issue(1, TokenType.ACCESS, timedelta(minutes=5))
    header, _, signature = raw.split(".")
    forged_payload = jwt.encode(
        {"sub": "2", "typ": "access", "iat": 0, "exp": 9999999999, "jti": "x"}, "k"
    ).split(".")[1]
    with pytest.raises(InvalidTokenError):
        codec.decode(".".join([header, forged_payload, signature]))


@pytest.mark.parametrize("raw", ["", "not-a-jwt", "a.b.c"])
def test_malformed_tokens_are_rejected(codec, raw):
    with pytest.raises(InvalidTokenError):
        codec.decode(raw)


def test_missing_claim_is_rejected(codec):
    raw = jwt.encode({"sub": "1", "typ": "access", "exp": 9999999999}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        codec.decode(raw)


def test_unknown_type_is_rejected(codec):
    raw = jwt.encode(
        {"sub": "1", "typ": "id", "iat": 0, "exp": 9999999999, "jti": "j"},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError):
        codec.decode(raw)


def test_secret_is_not_in_repr(codec):
    assert SECRET not in repr(codec)
