"""API routes for cards, card images and exchange credentials"""

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from flocka.middlewares.auth import get_user_from_token
from flocka.models.user import User
from flocka.schemas.base import ResponseSchema, envelope
from flocka.schemas.card import (
    CardCreateSchema,
    CardSchema,
    CardUpdateSchema,
    ImageUploadSchema,
    PublicCardSchema,
    UploadUrlRequestSchema,
    UploadUrlSchema,
)
from flocka.schemas.credential import (
    CardShareSchema,
    QRCredentialSchema,
    ShareCredentialSchema,
)
from flocka.services.card import CardService
from flocka.services.credential import CredentialService
from flocka.services.reconciliation import ReconciliationService

card_router = APIRouter(prefix="/cards", tags=["Cards"])


@card_router.post("", response_model=ResponseSchema[CardSchema], status_code=201)
def create_card(
    card: CardCreateSchema,
    card_service: CardService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    return envelope(card_service.create(card, actor_user.id))


@card_router.get("", response_model=ResponseSchema[list[CardSchema]])
def read_my_cards(
    card_service: CardService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    return envelope(card_service.list_for(actor_user.id))


@card_router.post("/upload", response_model=ResponseSchema[ImageUploadSchema])
def upload_image(
    file: UploadFile = File(...),
    card_service: CardService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    data = file.file.read()
    content_type = file.content_type or ""
    key = card_service.upload_image(
        actor_user.id, file.filename or "", content_type, data
    )
    return envelope(
        {
            "file_key": key,
            "original_name": file.filename or "",
            "size": len(data),
            "content_type": content_type,
        }
    )


@card_router.post("/upload-url", response_model=ResponseSchema[UploadUrlSchema])
def create_upload_url(
    schema: UploadUrlRequestSchema,
    card_service: CardService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    """Presigned URL to PUT an image straight into object storage."""
    return envelope(
        card_service.create_upload_url(
            actor_user.id, schema.file_name, schema.content_type, schema.size
        )
    )


@card_router.get("/image/{key:path}")
def read_image(key: str, card_service: CardService = Depends()):
    """Image read-through from object storage, public."""
    data, content_type = card_service.read_image(key)
    return Response(
        content=data,
        media_type=content_type,
        headers={"Cache-Control": "public, max-age=31536000"},
    )


@card_router.get("/public/{card_id}", response_model=ResponseSchema[PublicCardSchema])
def read_public_card(card_id: str, card_service: CardService = Depends()):
    return envelope(card_service.get(card_id))


@card_router.get("/exchange", response_model=ResponseSchema[PublicCardSchema])
def preview_shared_card(
    token: str,
    card_service: CardService = Depends(),
    reconciliation_service: ReconciliationService = Depends(),
):
    """Landing of a share URL. Shows the shared card without exchanging it."""
    stored = reconciliation_service.resolve_credential(token)
    return envelope(card_service.get(stored.card_id))


@card_router.get("/{card_id}", response_model=ResponseSchema[CardSchema])
def read_card(
    card_id: str,
    card_service: CardService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    return envelope(card_service.get_owned(card_id, actor_user.id))


@card_router.put("/{card_id}", response_model=ResponseSchema[CardSchema])
def update_card(
    card_id: str,
    card_update: CardUpdateSchema,
    card_service: CardService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    return envelope(card_service.update(card_id, card_update, actor_user.id))


@card_router.delete("/{card_id}", response_model=ResponseSchema[str])
def delete_card(
    card_id: str,
    card_service: CardService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    return envelope(card_service.delete(card_id, actor_user.id), message="Card deleted")


@card_router.post(
    "/{card_id}/generate-qr", response_model=ResponseSchema[QRCredentialSchema]
)
def generate_qr(
    card_id: str,
    credential_service: CredentialService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    """Issue a 30 minute QR credential for one of your cards."""
    return envelope(credential_service.issue_qr(actor_user.id, card_id))


@card_router.post(
    "/{card_id}/generate-exchange-url",
    response_model=ResponseSchema[ShareCredentialSchema],
)
def generate_exchange_url(
    card_id: str,
    credential_service: CredentialService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    """Issue a 24 hour share URL for one of your cards."""
    return envelope(credential_service.issue_share(actor_user.id, card_id))


@card_router.post("/{card_id}/share", response_model=ResponseSchema[CardShareSchema])
def share_card(
    card_id: str,
    credential_service: CredentialService = Depends(),
    actor_user: User = Depends(get_user_from_token),
):
    """View-only link and QR code for one of your cards."""
    return envelope(credential_service.issue_view_link(actor_user.id, card_id))
