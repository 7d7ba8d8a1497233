"""API routes for registration, login and the current user"""

from fastapi import APIRouter, Depends

from flocka.middlewares.auth import get_user_from_token
from flocka.models.user import User
from flocka.schemas.base import ResponseSchema, envelope
from flocka.schemas.user import (
    LoginSchema,
    SessionTokenSchema,
    UserRegisterReportSchema,
    UserRegisterSchema,
    UserSchema,
    VerifyEmailSchema,
)
from flocka.services.mail import MailService
from flocka.services.token import TokenService
from flocka.services.user import UserService

auth_router = APIRouter(prefix="/auth", tags=["Auth"])
users_router = APIRouter(prefix="/users", tags=["Users"])


@auth_router.post(
    "/register",
    response_model=ResponseSchema[UserRegisterReportSchema],
    status_code=201,
)
def register(
    schema: UserRegisterSchema,
    user_service: UserService = Depends(),
    token_service: TokenService = Depends(),
    mail_service: MailService = Depends(),
):
    """Create an account and mail an email verification link."""
    user = user_service.register(schema)
    verification_token = token_service.generate_email_verification_token(user)
    email_sent = mail_service.send_verification_email(user.email, verification_token)
    return envelope(
        {"user": user, "email_sent": email_sent},
        message="User registered, please verify your email",
    )


@auth_router.post("/login", response_model=ResponseSchema[SessionTokenSchema])
def login(
    schema: LoginSchema,
    user_service: UserService = Depends(),
    token_service: TokenService = Depends(),
):
    user = user_service.login(schema.email, schema.password)
    return envelope({"token": token_service.generate_session_token(user), "user": user})


@auth_router.post("/verify-email", response_model=ResponseSchema[UserSchema])
def verify_email(
    schema: VerifyEmailSchema,
    token_service: TokenService = Depends(),
):
    return envelope(token_service.verify_email(schema.token), message="Email verified")


@auth_router.get("/verify-email", response_model=ResponseSchema[UserSchema])
def verify_email_link(
    token: str,
    token_service: TokenService = Depends(),
):
    """Target of the link in the verification mail."""
    return envelope(token_service.verify_email(token), message="Email verified")


@auth_router.get("/me", response_model=ResponseSchema[UserSchema])
@users_router.get("/me", response_model=ResponseSchema[UserSchema])
def read_me(actor_user: User = Depends(get_user_from_token)):
    return envelope(actor_user)


@users_router.delete("/me", response_model=ResponseSchema[str])
def delete_me(
    actor_user: User = Depends(get_user_from_token),
    user_service: UserService = Depends(),
):
    """Delete the account with its cards, collection, tokens, logs and requests."""
    return envelope(user_service.delete(actor_user.id), message="Account deleted")
