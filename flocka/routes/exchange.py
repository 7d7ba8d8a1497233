"""API routes for card exchanges: redeeming credentials, the collection, the feed"""

from fastapi import APIRouter, Depends

from flocka.middlewares.auth import get_user_from_token
from flocka.models.user import User
from flocka.schemas.base import ResponseSchema, envelope
from flocka.schemas.credential import RedeemSchema
from flocka.schemas.exchange import (
    CollectionSchema,
    CollectSchema,
    ExchangeSchema,
    ExchangeUpdateSchema,
)
from flocka.schemas.exchange_log import ExchangeFeedSchema
from flocka.schemas.reconciliation import ReconciliationReceiptSchema
from flocka.services.collection import CollectionService
from flocka.services.credential import CredentialService
from flocka.services.exchange_log import ExchangeLogService
from flocka.services.reconciliation import ReconciliationService

exchange_router = APIRouter(prefix="/exchanges", tags=["Exchanges"])


def _redeem(
    redeem: RedeemSchema,
    reconciliation_service: ReconciliationService,
    actor_user: User,
):
    receipt = reconciliation_service.redeem(
        redeem.credential, actor_user.id, redeem.my_card_id, redeem
    )
    return envelope(receipt, message="Cards exchanged")


@exchange_router.post("/qr", response_model=ResponseSchema[ReconciliationReceiptSchema])
def redeem_qr(
    redeem: RedeemSchema,
    reconciliation_service: ReconciliationService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    """Redeem a scanned QR payload (or a bare token) for a mutual exchange."""
    return _redeem(redeem, reconciliation_service, actor_user)


@exchange_router.post(
    "/url", response_model=ResponseSchema[ReconciliationReceiptSchema]
)
def redeem_url(
    redeem: RedeemSchema,
    reconciliation_service: ReconciliationService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    """Redeem the token of a share URL for a mutual exchange."""
    return _redeem(redeem, reconciliation_service, actor_user)


@exchange_router.delete("/tokens/{token}", response_model=ResponseSchema[str])
def revoke_token(
    token: str,
    credential_service: CredentialService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    return envelope(
        credential_service.revoke(token, actor_user.id), message="Token revoked"
    )


@exchange_router.get("/qr-logs", response_model=ResponseSchema[ExchangeFeedSchema])
def read_exchange_feed(
    exchange_log_service: ExchangeLogService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    """Who redeemed your credentials. Entries are new only on the first fetch."""
    logs, new_count = exchange_log_service.list_for(actor_user.id)
    return envelope({"logs": logs, "total": len(logs), "new_count": new_count})


@exchange_router.delete("/qr-logs/{log_id}", response_model=ResponseSchema[str])
def delete_exchange_log(
    log_id: str,
    exchange_log_service: ExchangeLogService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    return envelope(exchange_log_service.delete(log_id, actor_user.id))


@exchange_router.post("", response_model=ResponseSchema[ExchangeSchema], status_code=201)
def collect_card(
    collect: CollectSchema,
    collection_service: CollectionService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    return envelope(collection_service.collect(collect, actor_user.id))


@exchange_router.get("", response_model=ResponseSchema[CollectionSchema])
def read_collection(
    collection_service: CollectionService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    entries = collection_service.list_for(actor_user.id)
    return envelope({"collections": entries, "total": len(entries)})


@exchange_router.get("/{exchange_id}", response_model=ResponseSchema[ExchangeSchema])
def read_exchange(
    exchange_id: str,
    collection_service: CollectionService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    return envelope(collection_service.get_for(exchange_id, actor_user.id))


@exchange_router.put("/{exchange_id}", response_model=ResponseSchema[ExchangeSchema])
def update_exchange(
    exchange_id: str,
    exchange_update: ExchangeUpdateSchema,
    collection_service: CollectionService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    return envelope(
        collection_service.update(exchange_id, exchange_update, actor_user.id)
    )


@exchange_router.delete("/{exchange_id}", response_model=ResponseSchema[str])
def delete_exchange(
    exchange_id: str,
    collection_service: CollectionService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    return envelope(collection_service.delete(exchange_id, actor_user.id))
