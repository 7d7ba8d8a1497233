"""User model. Owns cards and a collection of other users' cards."""

from typing import TYPE_CHECKING, List

from flocka.models.base import BaseModel
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

if TYPE_CHECKING:
    from flocka.models.card import Card
    from flocka.models.exchange import Exchange
    from flocka.models.exchange_log import ExchangeLog
    from flocka.models.exchange_request import ExchangeRequest
    from flocka.models.exchange_token import ExchangeToken


class User(BaseModel):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(100))
    hashed_password: Mapped[str]
    email_verified: Mapped[bool] = mapped_column(default=False)

    # deleting a user removes everything they own or appear in
    cards: Mapped[List["Card"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    collection: Mapped[List["Exchange"]] = relationship(
        back_populates="owner", cascade="all, delete-orphan"
    )
    exchange_tokens: Mapped[List["ExchangeToken"]] = relationship(
        cascade="all, delete-orphan"
    )
    owned_logs: Mapped[List["ExchangeLog"]] = relationship(
        foreign_keys="ExchangeLog.qr_owner_user_id", cascade="all, delete-orphan"
    )
    scanned_logs: Mapped[List["ExchangeLog"]] = relationship(
        foreign_keys="ExchangeLog.scanner_user_id", cascade="all, delete-orphan"
    )
    sent_requests: Mapped[List["ExchangeRequest"]] = relationship(
        foreign_keys="ExchangeRequest.requester_user_id", cascade="all, delete-orphan"
    )
    received_requests: Mapped[List["ExchangeRequest"]] = relationship(
        foreign_keys="ExchangeRequest.target_user_id", cascade="all, delete-orphan"
    )
