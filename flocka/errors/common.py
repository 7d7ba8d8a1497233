"""Common application errors, may be raised from several services"""

from flocka.errors.base import ApplicationError


class NotFoundError(ApplicationError):
    http_code = 404
    error_code = "not_found"
    error = "Not found"


class NotOwner(ApplicationError):
    http_code = 403
    error_code = "not_owner"
    error = "Not owned by you"
