"""Wire formats of exchange credentials.

Three shapes reach the redeem endpoints:

* QR payload, a JSON object produced by `encode_qr_payload`::

    {"type": "card_exchange", "cardId": ..., "userId": ..., "token": ..., "timestamp": <epoch ms>}

* share token, a signed JWT carried in a share URL (`encode_share_token`);
* a bare token string, used by transports that only carry the token (BLE, NFC).

Only the first two are self-describing. A bare token is resolved through the
credential store.
"""

import enum
import json
import math
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from flocka.errors.exchange import ExpiredCredential, InvalidCredential

QR_PAYLOAD_TYPE = "card_exchange"
# view-only QR codes, never redeemable
CARD_VIEW_PAYLOAD_TYPE = "card_view"
SHARE_TOKEN_ALGORITHM = "HS256"
SHARE_TOKEN_PURPOSE = "card_exchange_share"
# how far a QR timestamp may run ahead of the server clock
QR_CLOCK_SKEW_MS = 5 * 60 * 1000


class CredentialFormat(enum.Enum):
    QR = "qr"
    SHARE = "share"
    OPAQUE = "opaque"


@dataclass
class DecodedCredential:
    format: CredentialFormat
    token: str
    card_id: str | None = None
    user_id: str | None = None
    issued_at: datetime | None = None


def now_ms() -> int:
    return int(time.time() * 1000)


def encode_qr_payload(
    card_id: str, user_id: str, token: str, timestamp_ms: int | None = None
) -> str:
    return json.dumps(
        {
            "type": QR_PAYLOAD_TYPE,
            "cardId": card_id,
            "userId": user_id,
            "token": token,
            "timestamp": now_ms() if timestamp_ms is None else timestamp_ms,
        },
        separators=(",", ":"),
    )


def encode_card_view_payload(card_id: str, share_url: str) -> str:
    return json.dumps(
        {"type": CARD_VIEW_PAYLOAD_TYPE, "cardId": card_id, "shareUrl": share_url},
        separators=(",", ":"),
    )


def encode_share_token(
    card_id: str,
    user_id: str,
    token: str,
    secret_key: str,
    ttl: timedelta,
    issued_at: int | None = None,
) -> str:
    iat = int(time.time()) if issued_at is None else issued_at
    claims = {
        "sub": user_id,
        "card_id": card_id,
        "jti": token,
        "purpose": SHARE_TOKEN_PURPOSE,
        "iat": iat,
        "exp": iat + int(ttl.total_seconds()),
    }
    return jwt.encode(claims, secret_key, algorithm=SHARE_TOKEN_ALGORITHM)


def _decode_qr_payload(raw: str, qr_ttl: timedelta) -> DecodedCredential:
    try:
        data = json.loads(raw)
    except ValueError:
        raise InvalidCredential("malformed QR payload")
    if not isinstance(data, dict) or data.get("type") != QR_PAYLOAD_TYPE:
        raise InvalidCredential("not a card exchange QR code")
    card_id, user_id, token = data.get("cardId"), data.get("userId"), data.get("token")
    timestamp = data.get("timestamp")
    if not (card_id and user_id and token) or not isinstance(timestamp, (int, float)):
        raise InvalidCredential("QR payload is missing fields")
    if isinstance(timestamp, bool) or (
        isinstance(timestamp, float) and not math.isfinite(timestamp)
    ):
        raise InvalidCredential("QR payload is missing fields")
    age_ms = now_ms() - timestamp
    if age_ms < -QR_CLOCK_SKEW_MS:
        raise InvalidCredential("QR payload is from the future")
    if age_ms > qr_ttl.total_seconds() * 1000:
        raise ExpiredCredential
    try:
        issued_at = datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        raise InvalidCredential("QR timestamp out of range")
    return DecodedCredential(
        format=CredentialFormat.QR,
        token=str(token),
        card_id=str(card_id),
        user_id=str(user_id),
        issued_at=issued_at,
    )


def _decode_share_token(raw: str, secret_key: str) -> DecodedCredential:
    try:
        claims = jwt.decode(
            raw,
            secret_key,
            algorithms=[SHARE_TOKEN_ALGORITHM],
            options={"require": ["exp", "iat", "jti", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise ExpiredCredential
    except jwt.PyJWTError:
        raise InvalidCredential("bad share token")
    if claims.get("purpose") != SHARE_TOKEN_PURPOSE or not claims.get("card_id"):
        raise InvalidCredential("bad share token")
    return DecodedCredential(
        format=CredentialFormat.SHARE,
        token=str(claims["jti"]),
        card_id=str(claims["card_id"]),
        user_id=str(claims["sub"]),
        issued_at=datetime.fromtimestamp(claims["iat"], tz=timezone.utc),
    )


def decode_credential(
    raw: str, secret_key: str, qr_ttl: timedelta
) -> DecodedCredential:
    """Turn any accepted credential shape into a DecodedCredential.

    Raises InvalidCredential for anything unreadable and ExpiredCredential when
    the embedded timestamp is older than the transport allows. Bare tokens are
    returned as-is, their freshness is checked against the store.
    """
    raw = (raw or "").strip()
    if not raw:
        raise InvalidCredential("empty credential")
    if raw.startswith("{"):
        return _decode_qr_payload(raw, qr_ttl)
    if raw.count(".") == 2:
        return _decode_share_token(raw, secret_key)
    return DecodedCredential(format=CredentialFormat.OPAQUE, token=raw)
