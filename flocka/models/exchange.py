"""Collection ledger entry. "User X has collected card Y (owned by someone else)"."""

from typing import TYPE_CHECKING, Optional

from flocka.models.base import BaseModel
from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

if TYPE_CHECKING:
    from flocka.models.card import Card
    from flocka.models.user import User


class Exchange(BaseModel):
    __tablename__ = "exchanges"
    # a user can not collect the same card twice, concurrent inserts collide here
    __table_args__ = (
        UniqueConstraint(
            "owner_user_id", "collected_card_id", name="uq_exchanges_owner_card"
        ),
    )

    owner_user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    owner: Mapped["User"] = relationship(back_populates="collection")

    collected_card_id: Mapped[str] = mapped_column(
        ForeignKey("cards.id", ondelete="CASCADE"), index=True
    )
    collected_card: Mapped["Card"] = relationship(back_populates="collected_by")

    memo: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    location_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(nullable=True)
