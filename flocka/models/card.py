"""Card model. A profile artifact that users hand out to each other."""

from typing import TYPE_CHECKING, List, Optional

from flocka.models.base import BaseModel
from sqlalchemy import JSON, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

if TYPE_CHECKING:
    from flocka.models.exchange import Exchange
    from flocka.models.exchange_log import ExchangeLog
    from flocka.models.exchange_request import ExchangeRequest
    from flocka.models.exchange_token import ExchangeToken
    from flocka.models.user import User


class Card(BaseModel):
    __tablename__ = "cards"

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    user: Mapped["User"] = relationship(back_populates="cards")

    card_name: Mapped[str] = mapped_column(String(100))
    bio: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    # object storage key, e.g. cards/<user_id>/<ts>-<rand>.png
    image_key: Mapped[Optional[str]] = mapped_column(nullable=True)
    # [{"title": ..., "url": ...}], at most 4
    links: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)

    collected_by: Mapped[List["Exchange"]] = relationship(
        back_populates="collected_card", cascade="all, delete-orphan"
    )
    exchange_tokens: Mapped[List["ExchangeToken"]] = relationship(
        cascade="all, delete-orphan"
    )
    qr_logs: Mapped[List["ExchangeLog"]] = relationship(
        foreign_keys="ExchangeLog.qr_card_id",
        cascade="all, delete-orphan",
    )
    scanner_logs: Mapped[List["ExchangeLog"]] = relationship(
        foreign_keys="ExchangeLog.scanner_card_id",
        cascade="all, delete-orphan",
    )
    outgoing_requests: Mapped[List["ExchangeRequest"]] = relationship(
        foreign_keys="ExchangeRequest.requester_card_id",
        cascade="all, delete-orphan",
    )

    @property
    def image_url(self) -> str | None:
        if not self.image_key:
            return None
        return f"/cards/image/{self.image_key}"

    @property
    def owner_name(self) -> str:
        return self.user.name
