"""FastAPI app initialization, exception handling"""

import asyncio
import contextlib
import logging
import traceback
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from flocka.config import Config, get_config
from flocka.errors.base import ApplicationError
from flocka.routes.auth import auth_router, users_router
from flocka.routes.card import card_router
from flocka.routes.cleanup import cleanup_router
from flocka.routes.exchange import exchange_router
from flocka.routes.exchange_request import exchange_request_router
from flocka.schemas.base import ErrorSchema
from flocka.tasks.cleanup import schedule_cleanup

logger = logging.getLogger(__name__)

config: Config = get_config()
if not config.secret_key:
    raise ValueError(
        "FLOCKA_SECRET_KEY is missing in the configuration. Please set a valid secret key."
    )


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    task = None
    if config.cleanup_interval_minutes > 0:
        task = asyncio.create_task(schedule_cleanup(config))
    yield
    if task is not None:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


app = FastAPI(title=config.app_name, version=config.app_version, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Api-Key"],
)


@app.exception_handler(ApplicationError)
def application_exception_handler(request: Request, exc: ApplicationError):
    c = ErrorSchema(error_code=exc.error_code, error=exc.error, where=exc.where)
    logger.info(c.dump())
    # Only print full traceback when in debug logging
    if logger.isEnabledFor(logging.DEBUG):
        traceback.print_exception(exc)
    return JSONResponse(status_code=exc.http_code or 418, content=c.dump())


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError):
    c = ErrorSchema(
        error_code="validation_error",
        error="Invalid request",
        details=[
            {"loc": e.get("loc"), "msg": e.get("msg"), "type": e.get("type")}
            for e in exc.errors()
        ],
    )
    return JSONResponse(status_code=422, content=jsonable_encoder(c.dump()))


def _internal_error(exc: Exception) -> JSONResponse:
    correlation_id = uuid.uuid4().hex
    logger.exception("Unhandled error correlation_id=%s", correlation_id, exc_info=exc)
    c = ErrorSchema(
        error_code="internal_error",
        error="Internal server error",
        correlation_id=correlation_id,
    )
    return JSONResponse(status_code=500, content=c.dump())


@app.exception_handler(SQLAlchemyError)
def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    return _internal_error(exc)


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception):
    return _internal_error(exc)


@app.get("/", tags=["Health"])
def health():
    return {
        "success": True,
        "message": f"{config.app_name} API is running",
        "version": config.app_version,
    }


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(card_router)
# before exchange_router, whose /exchanges/{exchange_id} would shadow it
app.include_router(exchange_request_router)
app.include_router(exchange_router)
app.include_router(cleanup_router)
