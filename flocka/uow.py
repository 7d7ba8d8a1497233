from typing import Callable, Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from flocka.db import get_db as get_original_db


class UnitOfWork:
    def __init__(self, db: Session):
        self.db = db
        self._after_commit: list[Callable[[], None]] = []

    def __getattr__(self, attr):
        """
        Delegate attribute access to the underlying session.
        This allows the UoW to be used as if it were a Session.
        """
        return getattr(self.db, attr)

    def after_commit(self, callback: Callable[[], None]) -> None:
        """Run callback once the transaction commits. Dropped on rollback."""
        self._after_commit.append(callback)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        callbacks, self._after_commit = self._after_commit, []
        try:
            if exc_type:
                self.db.rollback()
            else:
                self.db.commit()
                for callback in callbacks:
                    callback()
        finally:
            self.db.close()


def get_uow(
    db: Session = Depends(get_original_db),
) -> Generator[UnitOfWork, None, None]:
    """
    Dependency that yields a UnitOfWork instance.

    When used in a route, FastAPI will call this dependency once per request,
    so every service of the request shares one session. A redeem that writes
    two ledger entries and a log entry commits them together.
    """
    with UnitOfWork(db) as uow:
        yield uow
