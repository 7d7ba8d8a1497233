"""DTO for User and authentication"""

from pydantic import EmailStr, Field

from flocka.schemas.base import BaseReadSchema, BaseSchema


class UserSchema(BaseReadSchema):
    email: str
    name: str
    email_verified: bool


class UserRegisterSchema(BaseSchema):
    email: EmailStr
    name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=8)


class UserRegisterReportSchema(BaseSchema):
    user: UserSchema
    email_sent: bool


class LoginSchema(BaseSchema):
    email: EmailStr
    password: str


class SessionTokenSchema(BaseSchema):
    token: str
    user: UserSchema


class VerifyEmailSchema(BaseSchema):
    token: str
