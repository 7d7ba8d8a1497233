"""Token service. Issues and verifies session and email verification tokens."""

import logging
import time
from datetime import timedelta

import jwt
from fastapi import Depends

from flocka.config import Config, get_config
from flocka.errors.common import NotFoundError
from flocka.errors.token import TokenInvalid
from flocka.errors.user import VerificationTokenInvalid
from flocka.models.user import User
from flocka.services.user import UserService

logger = logging.getLogger(__name__)

EMAIL_VERIFICATION_PURPOSE = "email_verification"


class TokenService:
    ALGORITHM = "HS256"

    @staticmethod
    def decode_user_id_from_token(token: str, secret_key: str) -> str:
        """Decode user id from a session token without DB lookup."""
        try:
            payload = jwt.decode(token, secret_key, algorithms=[TokenService.ALGORITHM])
        except jwt.PyJWTError:
            raise TokenInvalid
        # verification tokens must not work as session tokens
        if payload.get("purpose") is not None or not payload.get("sub"):
            raise TokenInvalid
        return str(payload["sub"])

    def __init__(
        self,
        user_service: UserService = Depends(),
        config: Config = Depends(get_config),
    ):
        self.user_service = user_service
        self.config = config

    def _encode(self, data: dict, ttl: timedelta) -> str:
        now = int(time.time())
        data = {**data, "iat": now, "exp": now + int(ttl.total_seconds())}
        return jwt.encode(data, self.config.secret_key or "", algorithm=self.ALGORITHM)

    def generate_session_token(self, user: User) -> str:
        return self._encode(
            {"sub": user.id, "email": user.email},
            timedelta(days=self.config.session_ttl_days),
        )

    def generate_email_verification_token(self, user: User) -> str:
        return self._encode(
            {"sub": user.id, "purpose": EMAIL_VERIFICATION_PURPOSE},
            timedelta(hours=self.config.email_verification_ttl_hours),
        )

    def authenticate(self, token: str) -> User:
        """Verify the session token, then load the user it belongs to."""
        user_id = TokenService.decode_user_id_from_token(
            token, self.config.secret_key or ""
        )
        try:
            return self.user_service.get(user_id)
        except NotFoundError:
            # account deleted while the token was still valid
            raise TokenInvalid

    def verify_email(self, token: str) -> User:
        try:
            payload = jwt.decode(
                token, self.config.secret_key or "", algorithms=[self.ALGORITHM]
            )
        except jwt.PyJWTError:
            raise VerificationTokenInvalid
        if payload.get("purpose") != EMAIL_VERIFICATION_PURPOSE:
            raise VerificationTokenInvalid
        try:
            user = self.user_service.get(str(payload.get("sub")))
        except NotFoundError:
            raise VerificationTokenInvalid
        logger.info("Email verified user_id=%s", user.id)
        return self.user_service.mark_email_verified(user)
