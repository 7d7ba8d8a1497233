"""DTO for maintenance endpoints"""

from flocka.schemas.base import BaseSchema


class CleanupReportSchema(BaseSchema):
    tokens_deleted: int
    requests_expired: int


class CleanupCountsSchema(BaseSchema):
    tokens: int
    requests: int


class CleanupStatsSchema(BaseSchema):
    expired: CleanupCountsSchema
    active: CleanupCountsSchema
