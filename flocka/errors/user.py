"""User registration and login errors"""

from flocka.errors.base import ApplicationError


class EmailAlreadyExists(ApplicationError):
    http_code = 409
    error_code = "email_already_exists"
    error = "Email already exists"


class InvalidLogin(ApplicationError):
    http_code = 401
    error_code = "invalid_login"
    error = "Invalid email or password"


class VerificationTokenInvalid(ApplicationError):
    http_code = 400
    error_code = "verification_token_invalid"
    error = "Invalid or expired verification token"
