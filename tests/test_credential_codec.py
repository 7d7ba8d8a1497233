"""Tests for the exchange credential wire formats"""

import json
import time
from datetime import timedelta

import jwt
import pytest

from flocka.errors.exchange import ExpiredCredential, InvalidCredential
from flocka.services.credential_codec import (
    QR_PAYLOAD_TYPE,
    CredentialFormat,
    decode_credential,
    encode_qr_payload,
    encode_share_token,
    now_ms,
)

SECRET = "codec-test-secret-0123456789abcdef"
QR_TTL = timedelta(minutes=30)


class TestQRPayload:
    def test_payload_shape(self):
        payload = json.loads(encode_qr_payload("card1", "user1", "tok1", 1700000000000))
        assert payload == {
            "type": QR_PAYLOAD_TYPE,
            "cardId": "card1",
            "userId": "user1",
            "token": "tok1",
            "timestamp": 1700000000000,
        }

    def test_fresh_payload_decodes(self):
        decoded = decode_credential(
            encode_qr_payload("card1", "user1", "tok1"), SECRET, QR_TTL
        )
        assert decoded.format is CredentialFormat.QR
        assert decoded.token == "tok1"
        assert decoded.card_id == "card1"
        assert decoded.user_id == "user1"

    def test_payload_older_than_ttl_is_expired(self):
        old = now_ms() - 35 * 60 * 1000
        with pytest.raises(ExpiredCredential):
            decode_credential(encode_qr_payload("c", "u", "t", old), SECRET, QR_TTL)

    def test_payload_from_the_future_is_invalid(self):
        ahead = now_ms() + 60 * 60 * 1000
        with pytest.raises(InvalidCredential):
            decode_credential(encode_qr_payload("c", "u", "t", ahead), SECRET, QR_TTL)

    def test_small_clock_skew_is_tolerated(self):
        ahead = now_ms() + 60 * 1000
        decoded = decode_credential(
            encode_qr_payload("c", "u", "t", ahead), SECRET, QR_TTL
        )
        assert decoded.token == "t"

    def test_payload_just_inside_ttl_is_accepted(self):
        recent = now_ms() - 29 * 60 * 1000
        decoded = decode_credential(
            encode_qr_payload("c", "u", "t", recent), SECRET, QR_TTL
        )
        assert decoded.token == "t"

    @pytest.mark.parametrize(
        "raw",
        [
            "{not json",
            json.dumps({"type": "something_else", "cardId": "c", "userId": "u", "token": "t", "timestamp": 1}),
            json.dumps({"type": QR_PAYLOAD_TYPE, "cardId": "c", "userId": "u", "timestamp": 1}),
            json.dumps({"type": QR_PAYLOAD_TYPE, "cardId": "c", "userId": "u", "token": "t"}),
            json.dumps({"type": QR_PAYLOAD_TYPE, "cardId": "c", "userId": "u", "token": "t", "timestamp": "now"}),
            '{"type": "card_exchange", "cardId": "c", "userId": "u", "token": "t", "timestamp": NaN}',
            '{"type": "card_exchange", "cardId": "c", "userId": "u", "token": "t", "timestamp": Infinity}',
            '{"type": "card_exchange", "cardId": "c", "userId": "u", "token": "t", "timestamp": -Infinity}',
            '{"type": "card_exchange", "cardId": "c", "userId": "u", "token": "t", "timestamp": 1e20}',
            '{"type": "card_exchange", "cardId": "c", "userId": "u", "token": "t", "timestamp": 99999999999999999}',
        ],
    )
    def test_malformed_payload_is_invalid(self, raw):
        with pytest.raises(InvalidCredential):
            decode_credential(raw, SECRET, QR_TTL)


class TestShareToken:
    def test_share_token_decodes(self):
        token = encode_share_token("card1", "user1", "tok1", SECRET, timedelta(hours=24))
        decoded = decode_credential(token, SECRET, QR_TTL)
        assert decoded.format is CredentialFormat.SHARE
        assert decoded.token == "tok1"
        assert decoded.card_id == "card1"
        assert decoded.user_id == "user1"

    def test_share_token_claims(self):
        token = encode_share_token(
            "card1", "user1", "tok1", SECRET, timedelta(hours=24), issued_at=1000
        )
        claims = jwt.decode(
            token, SECRET, algorithms=["HS256"], options={"verify_exp": False}
        )
        assert claims["sub"] == "user1"
        assert claims["card_id"] == "card1"
        assert claims["jti"] == "tok1"
        assert claims["exp"] - claims["iat"] == 24 * 3600

    def test_expired_share_token(self):
        issued = int(time.time()) - 25 * 3600
        token = encode_share_token(
            "card1", "user1", "tok1", SECRET, timedelta(hours=24), issued_at=issued
        )
        with pytest.raises(ExpiredCredential):
            decode_credential(token, SECRET, QR_TTL)

    def test_wrong_signature_is_invalid(self):
        token = encode_share_token("card1", "user1", "tok1", "another-secret-0123456789abcdef-0123", timedelta(hours=1))
        with pytest.raises(InvalidCredential):
            decode_credential(token, SECRET, QR_TTL)

    def test_session_like_jwt_is_invalid(self):
        # a valid signature alone is not enough, it must be a share token
        token = jwt.encode(
            {"sub": "user1", "jti": "x", "iat": int(time.time()), "exp": int(time.time()) + 60},
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(InvalidCredential):
            decode_credential(token, SECRET, QR_TTL)


class TestOpaqueToken:
    def test_bare_token_passes_through(self):
        decoded = decode_credential("  8c4f2e9a-token  ", SECRET, QR_TTL)
        assert decoded.format is CredentialFormat.OPAQUE
        assert decoded.token == "8c4f2e9a-token"
        assert decoded.card_id is None

    def test_empty_credential_is_invalid(self):
        with pytest.raises(InvalidCredential):
            decode_credential("   ", SECRET, QR_TTL)
