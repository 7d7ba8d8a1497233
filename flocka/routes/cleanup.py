"""Maintenance routes for external schedulers, protected by an API key"""

from fastapi import APIRouter, Depends

from flocka.middlewares.auth import require_cleanup_api_key
from flocka.schemas.base import ResponseSchema, envelope
from flocka.schemas.cleanup import CleanupReportSchema, CleanupStatsSchema
from flocka.services.cleanup import CleanupService

cleanup_router = APIRouter(
    prefix="/cleanup",
    tags=["Cleanup"],
    dependencies=[Depends(require_cleanup_api_key)],
)


@cleanup_router.post("/expired-tokens", response_model=ResponseSchema[CleanupReportSchema])
def sweep_expired(cleanup_service: CleanupService = Depends()):
    return envelope(cleanup_service.sweep(), message="Cleanup completed")


@cleanup_router.get("/stats", response_model=ResponseSchema[CleanupStatsSchema])
def read_cleanup_stats(cleanup_service: CleanupService = Depends()):
    return envelope(cleanup_service.stats())
