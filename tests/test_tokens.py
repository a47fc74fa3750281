from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from contactbook.errors import AuthError
from contactbook.security.tokens import TokenService


def _clock_at(moment: datetime):
    return lambda: moment


def test_issue_then_verify_returns_subject(token_service):
    token = token_service.issue(42, 24)
    assert token_service.verify(token) == "42"


def test_claims_carry_issue_and_expiry_times(token_service):
    claims = token_service.decode(token_service.issue(7, 24))
    assert claims.subject == "7"
    assert claims.not_before == claims.issued_at
    assert claims.expires_at - claims.issued_at == timedelta(hours=24)


def test_token_uses_hs256_header(token_service):
    header = jwt.get_unverified_header(token_service.issue(1, 1))
    assert header["alg"] == "HS256"


def test_expired_token_is_rejected(token_service, signing_secret):
    past = datetime.now(timezone.utc) - timedelta(hours=25)
    stale = TokenService(signing_secret, clock=_clock_at(past)).issue(1, 24)
    with pytest.raises(AuthError, match="expired"):
        token_service.verify(stale)


def test_token_from_the_future_is_not_yet_valid(token_service, signing_secret):
    future = datetime.now(timezone.utc) + timedelta(hours=1)
    early = TokenService(signing_secret, clock=_clock_at(future)).issue(1, 24)
    with pytest.raises(AuthError, match="not yet valid"):
        token_service.verify(early)


def test_token_signed_with_other_secret_is_rejected(token_service):
    foreign = TokenService("another-signing-secret-" + "fedcba9876543210" * 4).issue(1, 24)
    with pytest.raises(AuthError, match="signature"):
        token_service.verify(foreign)


def test_unsigned_token_is_rejected(token_service):
    now = int(datetime.now(timezone.utc).timestamp())
    unsigned = jwt.encode(
        {"sub": "1", "iat": now, "nbf": now, "exp": now + 3600},
        None,
        algorithm="none",
    )
    with pytest.raises(AuthError, match="algorithm"):
        token_service.verify(unsigned)


def test_other_hmac_algorithms_are_accepted(signing_secret):
    issuer = TokenService(signing_secret, algorithm="HS512")
    assert TokenService(signing_secret).verify(issuer.issue(9, 1)) == "9"


def test_non_hmac_signing_algorithm_is_refused(signing_secret):
    with pytest.raises(ValueError):
        TokenService(signing_secret, algorithm="RS256")


def test_token_missing_claims_is_rejected(token_service, signing_secret):
    partial = jwt.encode({"sub": "1"}, signing_secret, algorithm="HS256")
    with pytest.raises(AuthError):
        token_service.verify(partial)


@pytest.mark.parametrize("garbage", ["", "abc", "a.b.c", "Bearer xyz"])
def test_garbage_is_rejected_without_crashing(token_service, garbage):
    with pytest.raises(AuthError):
        token_service.verify(garbage)


def test_missing_secret_surfaces_as_auth_error(token_service):
    unconfigured = TokenService(None)
    with pytest.raises(AuthError, match="not configured"):
        unconfigured.issue(1, 24)
    with pytest.raises(AuthError, match="not configured"):
        unconfigured.verify(token_service.issue(1, 24))


def test_injected_clock_governs_both_issue_and_verify(signing_secret):
    moment = datetime.now(timezone.utc) - timedelta(days=2)
    pinned = TokenService(signing_secret, clock=_clock_at(moment))
    assert pinned.verify(pinned.issue(11, 24)) == "11"


def test_expiry_follows_the_service_clock(signing_secret):
    start = datetime(2030, 1, 1, tzinfo=timezone.utc)
    current = {"now": start}
    service = TokenService(signing_secret, clock=lambda: current["now"])
    token = service.issue(3, 24)

    current["now"] = start + timedelta(hours=23, minutes=59)
    assert service.verify(token) == "3"

    current["now"] = start + timedelta(hours=24, seconds=1)
    with pytest.raises(AuthError, match="expired"):
        service.verify(token)

    current["now"] = start - timedelta(minutes=1)
    with pytest.raises(AuthError, match="not yet valid"):
        service.verify(token)
