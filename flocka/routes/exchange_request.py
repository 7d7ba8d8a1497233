"""API routes for proximity exchange requests"""

from fastapi import APIRouter, Depends

from flocka.middlewares.auth import get_user_from_token
from flocka.models.user import User
from flocka.schemas.base import ResponseSchema, envelope
from flocka.schemas.exchange_request import (
    ExchangeRequestCreateSchema,
    ExchangeRequestListSchema,
    ExchangeRequestRespondSchema,
    ExchangeRequestResponseSchema,
    ExchangeRequestSchema,
)
from flocka.services.exchange_request import ExchangeRequestService

exchange_request_router = APIRouter(
    prefix="/exchanges/requests", tags=["Exchange requests"]
)


@exchange_request_router.post(
    "", response_model=ResponseSchema[ExchangeRequestSchema], status_code=201
)
def send_exchange_request(
    exchange_request: ExchangeRequestCreateSchema,
    exchange_request_service: ExchangeRequestService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    """Offer one of your cards to a nearby user."""
    return envelope(exchange_request_service.send(exchange_request, actor_user.id))


@exchange_request_router.get("", response_model=ResponseSchema[ExchangeRequestListSchema])
def read_exchange_requests(
    exchange_request_service: ExchangeRequestService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    return envelope(
        {
            "incoming": exchange_request_service.list_incoming(actor_user.id),
            "outgoing": exchange_request_service.list_outgoing(actor_user.id),
        }
    )


@exchange_request_router.post(
    "/{request_id}/respond",
    response_model=ResponseSchema[ExchangeRequestResponseSchema],
)
def respond_to_exchange_request(
    request_id: str,
    answer: ExchangeRequestRespondSchema,
    exchange_request_service: ExchangeRequestService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    request, receipt = exchange_request_service.respond(
        request_id, answer, actor_user.id
    )
    return envelope({"request": request, "receipt": receipt})
