"""Base service that incorporates business logic and CRUD operations."""

from typing import Generic, Type, TypeVar

from fastapi import Depends
from sqlalchemy.orm import Session

from flocka.errors.common import NotFoundError, NotOwner
from flocka.models.base import BaseModel
from flocka.uow import get_uow

M = TypeVar("M", bound=BaseModel)  # model


class BaseService(Generic[M]):
    model: Type[M]
    db: Session
    # error raised by get() when nothing matches
    not_found_error: type[Exception] = NotFoundError

    def __init__(self, db: Session = Depends(get_uow)):
        self.db = db

    def find(self, obj_id: str) -> M | None:
        return self.db.query(self.model).filter(self.model.id == obj_id).first()

    def get(self, obj_id: str) -> M:
        db_obj = self.find(obj_id)
        if not db_obj:
            raise self.not_found_error(f"{self.model.__name__} id={obj_id}")
        return db_obj

    def delete(self, obj_id: str) -> str:
        obj = self.get(obj_id)
        self.db.delete(obj)
        self.db.flush()
        return obj_id


class OwnedServiceMixin(Generic[M]):
    """Ownership checks for rows that only their owner may touch."""

    owner_field: str = "user_id"

    def get_owned(self, obj_id: str, caller_user_id: str) -> M:
        obj = self.get(obj_id)  # type: ignore[attr-defined]
        if getattr(obj, self.owner_field) != caller_user_id:
            raise NotOwner(f"{obj.__class__.__name__} id={obj_id}")
        return obj
