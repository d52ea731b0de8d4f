# office_booking/main.py

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .core.errors import MSG_INTERNAL_ERROR, MSG_VALIDATION_ERROR, DomainError, error_body
from .database import get_db
from .middleware.audit import audit_middleware
from .middleware.rate_limit import rate_limit_middleware
from .redis_client import redis_client
from .routers import auth, availability, bookings, offices, users

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Office Booking API")

# ===== Middleware order (last added runs first) =====
app.middleware("http")(rate_limit_middleware)
app.middleware("http")(audit_middleware)

if settings.cors_origin_list:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ===== Error handlers =====

@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=error_body(MSG_VALIDATION_ERROR, errors=jsonable_encoder(exc.errors())),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    # a unique constraint lost a race with a concurrent insert
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(status_code=409, content=error_body("Conflicts with an existing record"))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Database error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=error_body(MSG_INTERNAL_ERROR))


# ===== Routers =====

for module in (auth, users, offices, availability, bookings):
    app.include_router(module.router, prefix=settings.api_prefix)


@app.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        redis_ok = bool(redis_client.ping())
    except Exception as e:
        logger.warning(f"Redis ping failed: {e}")
        redis_ok = False

    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError as e:
        logger.error(f"Database ping failed: {e}")
        db_ok = False

    return {"success": db_ok, "data": {"database": db_ok, "redis": redis_ok}}
