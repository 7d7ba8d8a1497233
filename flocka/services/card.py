"""Card service. Cards are created, changed and deleted only by their owner."""

import logging

from fastapi import Depends

from flocka.errors.card import CardNotFound, ImageInvalid
from flocka.models.base import utcnow
from flocka.models.card import Card
from flocka.schemas.card import CardCreateSchema, CardUpdateSchema
from flocka.services.base import BaseService, OwnedServiceMixin
from flocka.services.storage import (
    IMAGE_KEY_PREFIX,
    MAX_IMAGE_SIZE,
    UPLOAD_URL_TTL,
    ObjectStorageService,
    generate_image_key,
    get_object_storage,
    validate_image,
)
from flocka.uow import UnitOfWork, get_uow

logger = logging.getLogger(__name__)

# columns that can not be cleared with an explicit null
REQUIRED_FIELDS = {"card_name", "links"}


class CardService(OwnedServiceMixin[Card], BaseService[Card]):
    model = Card
    not_found_error = CardNotFound

    def __init__(
        self,
        db: UnitOfWork = Depends(get_uow),
        storage: ObjectStorageService = Depends(get_object_storage),
    ):
        self.db = db
        self.storage = storage

    @staticmethod
    def _check_image_key(image_key: str | None, owner_user_id: str) -> None:
        # only images uploaded by the card owner
        if image_key and not image_key.startswith(f"{IMAGE_KEY_PREFIX}{owner_user_id}/"):
            raise ImageInvalid(f"{image_key=}")

    def create(
        self, schema: CardCreateSchema, owner_user_id: str
    ) -> Card:
        self._check_image_key(schema.image_key, owner_user_id)
        data = schema.model_dump()
        card = Card(**data, user_id=owner_user_id)
        self.db.add(card)
        self.db.flush()
        self.db.refresh(card)
        logger.info("Card created card_id=%s user_id=%s", card.id, owner_user_id)
        return card

    def list_for(self, user_id: str) -> list[Card]:
        return (
            self.db.query(self.model)
            .filter(self.model.user_id == user_id)
            .order_by(self.model.created_at.desc())
            .all()
        )

    def update(
        self, card_id: str, schema: CardUpdateSchema, caller_user_id: str
    ) -> Card:
        card = self.get_owned(card_id, caller_user_id)
        data = schema.model_dump(exclude_unset=True)
        self._check_image_key(data.get("image_key"), caller_user_id)
        for key, value in data.items():
            if value is None and key in REQUIRED_FIELDS:
                continue
            setattr(card, key, value)
        card.modified_at = utcnow()
        self.db.flush()
        self.db.refresh(card)
        return card

    def delete(self, card_id: str, caller_user_id: str) -> str:  # type: ignore[override]
        """Delete the card and every row that references it.

        The stored image is removed once the transaction commits.
        """
        card = self.get_owned(card_id, caller_user_id)
        image_key = card.image_key
        self.db.delete(card)
        self.db.flush()
        if image_key:
            self.db.after_commit(lambda: self.storage.delete_quietly(image_key))
        logger.info("Card deleted card_id=%s", card_id)
        return card_id

    def upload_image(
        self, owner_user_id: str, file_name: str, content_type: str, data: bytes
    ) -> str:
        extension = validate_image(file_name, content_type, len(data))
        key = generate_image_key(owner_user_id, extension)
        self.storage.put(key, data, content_type)
        return key

    def create_upload_url(
        self, owner_user_id: str, file_name: str, content_type: str, size: int
    ) -> dict:
        """Reserve an image key and presign a direct upload to it."""
        extension = validate_image(file_name, content_type, size)
        key = generate_image_key(owner_user_id, extension)
        upload_url = self.storage.presigned_put_url(key, content_type)
        logger.info("Upload url issued key=%s user_id=%s", key, owner_user_id)
        return {
            "upload_url": upload_url,
            "file_key": key,
            "content_type": content_type,
            "max_file_size": MAX_IMAGE_SIZE,
            "expires_in": UPLOAD_URL_TTL,
        }

    def read_image(self, key: str) -> tuple[bytes, str]:
        if not key.startswith(IMAGE_KEY_PREFIX):
            raise ImageInvalid(f"{key=}")
        return self.storage.get(key)
