from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from app.core.config import Settings, get_settings
from app.core.logging import setup_logging
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.error_handling import ErrorHandlingMiddleware
from app.api.deps import get_app_settings
from app.api.endpoints import prompts, llm
from app.models.domain import Provider

settings = get_settings()

# Initialize logging system
setup_logging(
    log_level=settings.log_level,
    log_dir=settings.log_dir,
    console=settings.log_to_console,
)

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version=settings.app_version, debug=settings.debug)

# Add middleware (order matters - last added runs first)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(ErrorHandlingMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(prompts.router, prefix="/api", tags=["prompts"])
app.include_router(llm.router, prefix="/api", tags=["llm"])


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies as 400 instead of FastAPI's default 422."""
    logger.warning(
        f"Invalid request data: {request.method} {request.url.path}",
        extra={"error_count": len(exc.errors())}
    )
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request data",
            "details": jsonable_encoder(exc.errors()),
            "status_code": 400
        }
    )


# Root and health endpoints
@app.get("/")
async def root(app_settings: Settings = Depends(get_app_settings)):
    """Root endpoint."""
    return {"message": app_settings.app_name, "version": app_settings.app_version}


@app.get("/health")
async def health(app_settings: Settings = Depends(get_app_settings)):
    """Health check endpoint. Reports key presence only, never key material."""
    return {
        "status": "healthy",
        "providers": {
            provider: app_settings.has_provider_key(provider)
            for provider in Provider.values()
        },
        "default_provider": app_settings.default_provider,
    }
