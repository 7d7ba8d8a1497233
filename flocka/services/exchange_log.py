"""Exchange log service. Tells credential owners who redeemed their cards."""

import logging

from flocka.errors.common import NotOwner
from flocka.models.exchange_log import ExchangeLog
from flocka.services.base import BaseService

logger = logging.getLogger(__name__)


class ExchangeLogService(BaseService[ExchangeLog]):
    model = ExchangeLog

    def append(
        self,
        qr_owner_user_id: str,
        scanner_user_id: str,
        qr_card_id: str,
        scanner_card_id: str,
        metadata: dict | None = None,
    ) -> ExchangeLog:
        metadata = metadata or {}
        log = ExchangeLog(
            qr_owner_user_id=qr_owner_user_id,
            scanner_user_id=scanner_user_id,
            qr_card_id=qr_card_id,
            scanner_card_id=scanner_card_id,
            memo=metadata.get("memo"),
            location_name=metadata.get("location_name"),
            latitude=metadata.get("latitude"),
            longitude=metadata.get("longitude"),
        )
        self.db.add(log)
        self.db.flush()
        return log

    def list_for(self, qr_owner_user_id: str) -> tuple[list[ExchangeLog], int]:
        """Feed of the owner, newest first, and how many entries are new.

        Returned entries keep the `notified` value they had before this call,
        the stored flag is set for all of them.
        """
        logs = (
            self.db.query(self.model)
            .filter(self.model.qr_owner_user_id == qr_owner_user_id)
            .order_by(self.model.created_at.desc())
            .all()
        )
        new_ids = [log.id for log in logs if not log.notified]
        if new_ids:
            self.db.query(self.model).filter(self.model.id.in_(new_ids)).update(
                {self.model.notified: True}, synchronize_session=False
            )
        return logs, len(new_ids)

    def delete(self, log_id: str, caller_user_id: str) -> str:  # type: ignore[override]
        log = self.get(log_id)
        if caller_user_id not in (log.qr_owner_user_id, log.scanner_user_id):
            raise NotOwner(f"ExchangeLog id={log_id}")
        self.db.delete(log)
        self.db.flush()
        return log_id
