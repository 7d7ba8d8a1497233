"""User service. Registration, password login, account deletion."""

import logging

import bcrypt
from fastapi import Depends
from sqlalchemy import func

from flocka.config import Config, get_config
from flocka.errors.user import EmailAlreadyExists, InvalidLogin
from flocka.models.user import User
from flocka.schemas.user import UserRegisterSchema
from flocka.services.base import BaseService
from flocka.services.storage import ObjectStorageService, get_object_storage
from flocka.uow import UnitOfWork, get_uow

logger = logging.getLogger(__name__)


class UserService(BaseService[User]):
    model = User

    def __init__(
        self,
        db: UnitOfWork = Depends(get_uow),
        config: Config = Depends(get_config),
        storage: ObjectStorageService = Depends(get_object_storage),
    ):
        self.db = db
        self.config = config
        self.storage = storage

    def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.config.bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def verify_password(password: str, hashed: str) -> bool:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))

    def find_by_email(self, email: str) -> User | None:
        return (
            self.db.query(self.model)
            .filter(func.lower(self.model.email) == email.lower())
            .first()
        )

    def register(self, schema: UserRegisterSchema) -> User:
        if self.find_by_email(schema.email) is not None:
            raise EmailAlreadyExists
        user = User(
            email=schema.email.lower(),
            name=schema.name,
            hashed_password=self.hash_password(schema.password),
        )
        self.db.add(user)
        self.db.flush()
        self.db.refresh(user)
        logger.info("User registered user_id=%s", user.id)
        return user

    def login(self, email: str, password: str) -> User:
        user = self.find_by_email(email)
        if user is None or not self.verify_password(password, user.hashed_password):
            raise InvalidLogin
        return user

    def mark_email_verified(self, user: User) -> User:
        user.email_verified = True
        self.db.flush()
        return user

    def delete(self, obj_id: str) -> str:
        user = self.get(obj_id)
        image_keys = [card.image_key for card in user.cards if card.image_key]
        self.db.delete(user)
        self.db.flush()
        for key in image_keys:
            self.db.after_commit(lambda key=key: self.storage.delete_quietly(key))
        logger.info("User deleted user_id=%s", obj_id)
        return obj_id
