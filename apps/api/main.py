"""FastAPI application for the fulfillment service."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from apps.api.v1.endpoints import admin, gifts, orders
from fulfillment import __version__
from fulfillment.domain.errors import (
    AlreadyClaimedError,
    ClaimConflictError,
    FulfillmentError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    TransactionFailedError,
)
from fulfillment.infrastructure.database import close_database, init_database
from fulfillment.infrastructure.logging import configure_logging
from fulfillment.settings import get_api_settings

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    InvalidStateError: status.HTTP_409_CONFLICT,
    ClaimConflictError: status.HTTP_409_CONFLICT,
    AlreadyClaimedError: status.HTTP_409_CONFLICT,
    TransactionFailedError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    await init_database()
    logger.info(f"✅ Fulfillment API {__version__} ready")
    yield
    await close_database()


api_settings = get_api_settings()

app = FastAPI(
    title="Fulfillment API",
    description="Order lifecycle, gift claims and delivery planning",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=api_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in (orders.router, gifts.router, admin.router):
    app.include_router(router, prefix="/api/v1")


@app.exception_handler(FulfillmentError)
async def fulfillment_error_handler(request: Request, exc: FulfillmentError) -> JSONResponse:
    """Map domain errors to HTTP status codes.

    The body carries the message as ``detail`` and the error's stable
    ``code`` so clients can branch without parsing text.
    """
    status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc} {exc.details}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {status_code} {exc.code}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    # Incomplete addresses, bad schedules, forecast windows below one day
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "code": "bad_request"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "code": "internal"},
    )


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy", "version": __version__}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=api_settings.host, port=api_settings.port)
