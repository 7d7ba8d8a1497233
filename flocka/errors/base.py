from typing import Any


class ApplicationError(Exception):
    """General application error.

    Subclasses are expected outcomes of a request (wrong input, missing object,
    forbidden action). They carry a stable `error_code` that clients may match on.
    """

    http_code: int | None = None
    error_code: str
    error: str
    where: str | None = None

    def __init__(self, details: Any | None = None, where: str | None = None):
        self.error = self.error
        if details:
            self.error += f": {details}"
        if where:
            self.where = where
        super().__init__(self.error)
