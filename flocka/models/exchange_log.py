"""Audit record of a completed credential exchange, read by the credential owner."""

from typing import TYPE_CHECKING, Optional

from flocka.models.base import BaseModel
from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

if TYPE_CHECKING:
    from flocka.models.card import Card
    from flocka.models.user import User


class ExchangeLog(BaseModel):
    __tablename__ = "exchange_logs"

    qr_owner_user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    scanner_user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    scanner_user: Mapped["User"] = relationship(
        foreign_keys=[scanner_user_id], viewonly=True
    )

    qr_card_id: Mapped[str] = mapped_column(ForeignKey("cards.id", ondelete="CASCADE"))
    qr_card: Mapped["Card"] = relationship(foreign_keys=[qr_card_id], viewonly=True)
    scanner_card_id: Mapped[str] = mapped_column(
        ForeignKey("cards.id", ondelete="CASCADE")
    )
    scanner_card: Mapped["Card"] = relationship(
        foreign_keys=[scanner_card_id], viewonly=True
    )

    memo: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    location_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(nullable=True)

    # flips to True the first time the qr owner fetches the feed
    notified: Mapped[bool] = mapped_column(default=False)
