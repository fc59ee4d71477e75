"""
Unit tests for auth/tokens.py -- TokenCodec issue/verify.

Covers:
  - Round trip: verify(issue(claims)) returns the same identity and role
  - Expiry window equals the configured TTL
  - Expired, tampered, foreign-key, malformed, and missing tokens
"""

import base64
import json
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.models import ROLE_ADMIN, ROLE_COURIER
from auth.tokens import ALGORITHM, TokenCodec
from core.errors import TokenExpired, TokenInvalid, TokenMissing

SECRET = "unit-test-signing-key-0123456789abcdef"


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(SECRET, ttl_seconds=24 * 3600)


def _b64(data: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()


class TestRoundTrip:
    @pytest.mark.parametrize("user_id,username,role", [(1, "admin", ROLE_ADMIN), (42, "courier1", ROLE_COURIER)])
    def test_claims_survive_round_trip(self, codec, user_id, username, role):
        principal = codec.verify(codec.issue(user_id, username, role))
        assert principal.user_id == user_id
        assert principal.username == username
        assert principal.role == role

    def test_validity_window_is_ttl(self, codec):
        principal = codec.verify(codec.issue(1, "admin", ROLE_ADMIN))
        assert principal.expires_at - principal.issued_at == timedelta(hours=24)
        assert principal.issued_at <= datetime.now(timezone.utc)

    def test_token_still_valid_just_before_expiry(self, codec):
        issued = datetime.now(timezone.utc) - timedelta(hours=23, minutes=59)
        principal = codec.verify(codec.issue(7, "courier1", ROLE_COURIER, issued_at=issued))
        assert principal.user_id == 7

    def test_is_admin_follows_role_claim(self, codec):
        assert codec.verify(codec.issue(1, "a", ROLE_ADMIN)).is_admin
        assert not codec.verify(codec.issue(2, "c", ROLE_COURIER)).is_admin


class TestRejection:
    def test_expired_token(self, codec):
        issued = datetime.now(timezone.utc) - timedelta(hours=25)
        token = codec.issue(1, "admin", ROLE_ADMIN, issued_at=issued)
        with pytest.raises(TokenExpired):
            codec.verify(token)

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token(self, codec, token):
        with pytest.raises(TokenMissing):
            codec.verify(token)

    @pytest.mark.parametrize("token", ["garbage", "a.b.c", "Bearer xyz"])
    def test_malformed_token(self, codec, token):
        with pytest.raises(TokenInvalid):
            codec.verify(token)

    def test_token_signed_with_another_secret(self, codec):
        other = TokenCodec("a-completely-different-signing-key-987654")
        with pytest.raises(TokenInvalid):
            codec.verify(other.issue(1, "admin", ROLE_ADMIN))

    def test_tampered_payload(self, codec):
        header, payload, signature = codec.issue(5, "courier1", ROLE_COURIER).split(".")
        claims = json.loads(base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4)))
        claims["role"] = ROLE_ADMIN
        with pytest.raises(TokenInvalid):
            codec.verify(".".join([header, _b64(claims), signature]))

    def test_unknown_role_claim(self, codec):
        with pytest.raises(TokenInvalid):
            codec.verify(codec.issue(1, "root", "superuser"))

    def test_missing_user_id_claim(self, codec):
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
        token = jwt.encode({"sub": "admin", "role": ROLE_ADMIN, "iat": 0, "exp": exp}, SECRET, algorithm=ALGORITHM)
        with pytest.raises(TokenInvalid):
            codec.verify(token)

    def test_none_algorithm_rejected(self, codec):
        header = _b64({"alg": "none", "typ": "JWT"})
        exp = int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp())
        payload = _b64({"sub": "admin", "user_id": 1, "role": ROLE_ADMIN, "iat": 0, "exp": exp})
        with pytest.raises(TokenInvalid):
            codec.verify(f"{header}.{payload}.")


class TestConstruction:
    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenCodec("")

    def test_non_positive_ttl_rejected(self):
        with pytest.raises(ValueError):
            TokenCodec(SECRET, ttl_seconds=0)

    def test_rotating_secret_invalidates_tokens(self):
        token = TokenCodec(SECRET).issue(1, "admin", ROLE_ADMIN)
        with pytest.raises(TokenInvalid):
            TokenCodec(SECRET + "-rotated").verify(token)
