"""Session token authentication usage errors"""

from flocka.errors.base import ApplicationError


class TokenInvalid(ApplicationError):
    http_code = 401
    error_code = "token_invalid"
    error = "Invalid or expired token"


class TokenMissing(ApplicationError):
    http_code = 401
    error_code = "token_missing"
    error = "Authorization header is missing or invalid"


class ApiKeyInvalid(ApplicationError):
    http_code = 403
    error_code = "api_key_invalid"
    error = "API key is invalid"
