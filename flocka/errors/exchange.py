"""Card exchange errors. Expected outcomes of a redeem, never faults."""

from flocka.errors.base import ApplicationError


class InvalidCredential(ApplicationError):
    http_code = 400
    error_code = "invalid_credential"
    error = "Invalid exchange code"


class ExpiredCredential(ApplicationError):
    http_code = 400
    error_code = "expired_credential"
    error = "Exchange code has expired"


class SelfExchange(ApplicationError):
    http_code = 400
    error_code = "self_exchange"
    error = "Cannot exchange cards with yourself"


class AlreadyCollected(ApplicationError):
    http_code = 409
    error_code = "already_collected"
    error = "Card already in your collection"


class ExchangeRequestNotPending(ApplicationError):
    http_code = 409
    error_code = "exchange_request_not_pending"
    error = "Exchange request was already answered"


class ExchangeRequestExpired(ApplicationError):
    http_code = 410
    error_code = "exchange_request_expired"
    error = "Exchange request has expired"


class ExchangeRequestAlreadyPending(ApplicationError):
    http_code = 409
    error_code = "exchange_request_already_pending"
    error = "An exchange request to this user is already pending"


class ResponderCardRequired(ApplicationError):
    http_code = 400
    error_code = "responder_card_required"
    error = "Your card id is required to accept an exchange request"
