"""
FastAPI application entry point.
Main application setup and configuration.
"""

from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import ValidationError as PydanticValidationError
import logging

from rentals.config import settings
from rentals.database import get_db, check_database_connection, close_db_connection
from rentals.routers import (
    admin_router,
    auth_router,
    favorites_router,
    listings_router,
    notifications_router,
    reports_router,
    upload_router,
    users_router
)
from rentals.utils.exceptions import APIException
from rentals.services.error_handler import ErrorHandlerService
from rentals.middleware import RequestContextMiddleware

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    if not settings.cloudinary_configured:
        logger.warning("Cloudinary credentials are not set; image uploads will fail")
    if not settings.google_client_id:
        logger.warning("GOOGLE_CLIENT_ID is not set; Google sign-in is disabled")

    db_connected = await check_database_connection()
    if not db_connected:
        logger.error("Failed to connect to database on startup")

    yield

    logger.info("Shutting down application")
    await close_db_connection()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Backend API for the Square One Rentals marketplace.

    ## Features

    * **Listings**: Create, search and manage rental listings
    * **Favorites**: Save listings to a personal shortlist
    * **Reports & Moderation**: Flag listings or users; admins review reports and moderate listings
    * **Notifications**: Owners and reporters hear about moderation decisions
    * **Uploads**: Listing images hosted on Cloudinary
    * **Authentication**: Email/password and Google sign-in with JWT bearer tokens

    ## Authentication

    Use `/api/v1/auth/login` or `/api/v1/auth/oauth/google` to obtain a JWT,
    then send it in the Authorization header as `Bearer <token>`.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Authentication", "description": "Sign-up, login, tokens and password reset"},
        {"name": "Users", "description": "Profile management"},
        {"name": "Listings", "description": "Rental listings, search and filtering"},
        {"name": "Favorites", "description": "Saved listings"},
        {"name": "Reports", "description": "Filing moderation reports"},
        {"name": "Notifications", "description": "Moderation notifications"},
        {"name": "Upload", "description": "Image upload"},
        {"name": "Admin", "description": "Moderation and dashboard"},
        {"name": "Health", "description": "Service health"}
    ],
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

app.add_middleware(
    RequestContextMiddleware,
    max_request_size=settings.max_request_size,
    enable_request_logging=not settings.is_testing
)

app.include_router(auth_router, prefix=settings.api_v1_prefix)
app.include_router(users_router, prefix=settings.api_v1_prefix)
app.include_router(listings_router, prefix=settings.api_v1_prefix)
app.include_router(favorites_router, prefix=settings.api_v1_prefix)
app.include_router(reports_router, prefix=settings.api_v1_prefix)
app.include_router(notifications_router, prefix=settings.api_v1_prefix)
app.include_router(upload_router, prefix=settings.api_v1_prefix)
app.include_router(admin_router, prefix=settings.api_v1_prefix)


# Global exception handlers using ErrorHandlerService
@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Handle custom API exceptions with structured error responses."""
    return ErrorHandlerService.handle_api_exception(exc, request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors with detailed field information."""
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(PydanticValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: PydanticValidationError):
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handle database errors with appropriate error responses."""
    return ErrorHandlerService.handle_database_error(exc, request)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return ErrorHandlerService.handle_http_exception(exc, request)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with secure error responses."""
    return ErrorHandlerService.handle_unexpected_error(exc, request)


@app.get("/", tags=["Health"])
async def root():
    """Basic API information."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.environment,
        "status": "healthy",
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "api_prefix": settings.api_v1_prefix
    }


@app.get("/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint with database connectivity test.
    Used by container health checks and load balancers.
    """
    db_healthy = await check_database_connection(db)

    if not db_healthy:
        logger.error("Health check failed: database unreachable")
        raise StarletteHTTPException(status_code=503, detail="Database connection failed")

    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "database": "connected"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "rentals.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
