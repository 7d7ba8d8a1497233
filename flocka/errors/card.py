"""Card and card image errors"""

from flocka.errors.base import ApplicationError


class CardNotFound(ApplicationError):
    http_code = 404
    error_code = "card_not_found"
    error = "Card not found"


class ImageNotFound(ApplicationError):
    http_code = 404
    error_code = "image_not_found"
    error = "Image not found"


class ImageInvalid(ApplicationError):
    http_code = 400
    error_code = "image_invalid"
    error = "Invalid image. Only JPEG, PNG, GIF and WebP up to 10MB are allowed"
