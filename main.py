import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager

from app.core.config import settings
from app.core.database import init_db
from app.core.errors import APIError, envelope
from app.core.logging_config import setup_logging
from app.core.storage import LocalStorage, storage
from app.api.endpoints import auth, health, upload, user

setup_logging(
    settings.LOG_LEVEL,
    json_logs=settings.JSON_LOGS,
    redact_otp_codes=settings.ENVIRONMENT != "development",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info("Starting up CovidVis Auth API...")
    init_db()
    logger.info("Database initialized successfully")

    yield

    logger.info("Shutting down CovidVis Auth API...")


# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Email/OTP and password authentication with cookie sessions",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    return JSONResponse(status_code=exc.status_code, content=envelope(False, exc.message))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content=envelope(False, str(exc.detail)))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Malformed bodies are client-correctable input errors: 400, not 422
    return JSONResponse(status_code=400, content=envelope(False, "Invalid request body"))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=envelope(False, "Internal server error"))


# Include routers
app.include_router(auth.router, prefix=settings.API_V1_STR)
app.include_router(user.router, prefix=settings.API_V1_STR)
app.include_router(upload.router, prefix=settings.API_V1_STR)
app.include_router(health.router)

# Serve locally stored avatars
if isinstance(storage, LocalStorage):
    app.mount(settings.AVATAR_URL_PREFIX, StaticFiles(directory=storage.base_dir), name="avatars")


@app.get("/")
async def root():
    """Root endpoint - API health check"""
    return {
        "message": "CovidVis Auth API",
        "version": "1.0.0",
        "status": "healthy"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,  # Enable auto-reload during development
        log_level="info"
    )
