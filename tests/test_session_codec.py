"""
Unit tests for the session cookie codec
"""
import base64
import json

import pytest
from itsdangerous import URLSafeSerializer

from services.session_codec import SESSION_SALT, SessionClaims, decode, encode


def _body(payload: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(payload).encode()).rstrip(b"=").decode()


class TestEncodeDecode:
    def test_round_trip_preserves_claims(self):
        claims = SessionClaims(uid=42, role="teacher")
        assert decode(encode(claims)) == claims

    def test_token_is_cookie_safe(self):
        token = encode(SessionClaims(uid=7, role="student"))
        assert ";" not in token and " " not in token and "=" not in token


class TestRejectedTokens:
    """잘못된 토큰은 예외 없이 None"""

    def test_empty_or_missing(self):
        assert decode(None) is None
        assert decode("") is None

    def test_garbage(self):
        assert decode("not-a-token") is None
        assert decode("%%%.###") is None
        assert decode("ñ.ñ") is None
        assert decode("abc.ñ") is None

    def test_tampered_payload(self):
        token = encode(SessionClaims(uid=1, role="student"))
        signature = token.rsplit(".", 1)[1]
        forged = f"{_body({'uid': 1, 'role': 'teacher'})}.{signature}"
        assert decode(forged) is None

    def test_signed_with_other_secret(self):
        token = encode(SessionClaims(uid=1, role="student"), secret="another-secret")
        assert decode(token) is None
        assert decode(token, secret="another-secret") == SessionClaims(uid=1, role="student")

    def test_other_salt_is_rejected(self):
        token = URLSafeSerializer("shape-secret", salt="other").dumps({"uid": 1, "role": "student"})
        assert decode(token, secret="shape-secret") is None

    @pytest.mark.parametrize("payload", [
        {"uid": "1", "role": "student"},
        {"uid": True, "role": "student"},
        {"uid": 1, "role": "admin"},
        {"role": "student"},
        [1, "student"],
    ])
    def test_signed_but_invalid_claims(self, payload):
        secret = "shape-secret"
        token = URLSafeSerializer(secret, salt=SESSION_SALT).dumps(payload)
        assert decode(token, secret=secret) is None
