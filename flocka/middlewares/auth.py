"""Authentication dependencies: session bearer tokens and cleanup API keys"""

import secrets

from fastapi import Depends, Header

from flocka.config import Config, get_config
from flocka.errors.token import ApiKeyInvalid, TokenMissing
from flocka.models.user import User
from flocka.services.token import TokenService


def get_user_from_token(
    authorization: str | None = Header(
        default=None, description="Session token as `Bearer <token>`"
    ),
    token_service: TokenService = Depends(),
) -> User:
    if not authorization:
        raise TokenMissing
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise TokenMissing
    return token_service.authenticate(token.strip())


def require_cleanup_api_key(
    x_api_key: str | None = Header(
        default=None, description="Key of a scheduler allowed to run cleanups"
    ),
    config: Config = Depends(get_config),
) -> None:
    if not x_api_key or not any(
        secrets.compare_digest(x_api_key.encode(), key.encode()) for key in config.cleanup_api_keys
    ):
        raise ApiKeyInvalid
