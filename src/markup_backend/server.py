import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.encoders import jsonable_encoder

from markup_backend.api.exceptions import ValidationException
from markup_backend.api.info import info_router
from markup_backend.api.markup_documents import markup_document_router
from markup_backend.api.user import user_router
from markup_backend.interface.base import ErrorEnvelope
from markup_backend.settings import settings, configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info(f"Starting markup backend ({settings.DEBUG_MODE})")
    yield


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


def error_response(status_code: int, error: str, details=None, headers=None) -> JSONResponse:
    envelope = ErrorEnvelope(error=error, details=details)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope.model_dump(exclude_none=True)),
        headers=headers,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    details = exc.errors if isinstance(exc, ValidationException) else None
    return error_response(exc.status_code, str(exc.detail), details, getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in error.get("loc", ())), "message": error.get("msg", "")}
        for error in exc.errors()
    ]
    return error_response(400, "Validation failed", details)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return error_response(500, "Internal server error")


markup_document_router.register_routes(app)

app.include_router(
    user_router,
    prefix="/profiles",
    tags=["profiles", "me"]
)

app.include_router(
    info_router,
    prefix="/info",
    tags=["info"]
)

@app.head("/", status_code=204)
def get_status_head():
    return
