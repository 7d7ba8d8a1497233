"""DTO for Card"""

from pydantic import Field, HttpUrl, TypeAdapter, ValidationError, field_validator

from flocka.schemas.base import BaseReadSchema, BaseSchema, BaseUpdateSchema

MAX_LINKS = 4

_http_url = TypeAdapter(HttpUrl)


class CardLinkSchema(BaseSchema):
    title: str = Field(min_length=1, max_length=50)
    url: str

    @field_validator("url")
    @classmethod
    def url_must_be_http(cls, value: str) -> str:
        # validate only, keep the url exactly as the user typed it
        try:
            _http_url.validate_python(value)
        except ValidationError:
            raise ValueError("url must be an http or https URL")
        return value


class CardSummarySchema(BaseSchema):
    """Denormalized card data returned next to exchanges."""

    id: str
    card_name: str
    bio: str | None = None
    image_url: str | None = None


class CardSchema(BaseReadSchema):
    user_id: str
    card_name: str
    bio: str | None = None
    image_key: str | None = None
    image_url: str | None = None
    links: list[CardLinkSchema] = []


class PublicCardSchema(CardSummarySchema):
    links: list[CardLinkSchema] = []
    owner_name: str


class CardCreateSchema(BaseSchema):
    card_name: str = Field(min_length=1, max_length=100)
    bio: str | None = Field(default=None, max_length=200)
    image_key: str | None = None
    links: list[CardLinkSchema] = Field(default=[], max_length=MAX_LINKS)

    @field_validator("card_name")
    @classmethod
    def card_name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("card_name must not be blank")
        return value


class CardUpdateSchema(BaseUpdateSchema):
    card_name: str | None = Field(default=None, min_length=1, max_length=100)
    bio: str | None = Field(default=None, max_length=200)
    image_key: str | None = None
    links: list[CardLinkSchema] | None = Field(default=None, max_length=MAX_LINKS)

    @field_validator("card_name")
    @classmethod
    def card_name_not_blank(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("card_name must not be blank")
        return value


class ImageUploadSchema(BaseSchema):
    file_key: str
    original_name: str
    size: int
    content_type: str


class UploadUrlRequestSchema(BaseSchema):
    file_name: str = Field(min_length=1, max_length=255)
    content_type: str
    size: int


class UploadUrlSchema(BaseSchema):
    upload_url: str
    file_key: str
    content_type: str
    max_file_size: int
    expires_in: int
