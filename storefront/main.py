# storefront/main.py

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from .api.main import api_router
from .core.config import Settings, get_settings
from .core.error_handlers import setup_error_handlers, add_request_id_middleware
from .core.infrastructure.email_service import build_mail_transport
from .services.stripe_service import PaymentGateway

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    settings: Settings = app.state.settings
    logger.info(f"Server running on port {settings.PORT} ({settings.ENVIRONMENT})")
    logger.info(f"Email configured: {'Yes' if app.state.mail_transport is not None else 'No'}")
    logger.info(f"Allowed origins: {', '.join(settings.cors_origins)}")
    yield
    logger.info("Server shutting down")


def _within(root: str, path: str) -> bool:
    return os.path.commonpath([root, path]) == root


def mount_frontend(app: FastAPI, static_dir: str):
    """
    Serve the built storefront. Unknown paths fall back to index.html so the
    client-side router can handle them.
    """
    index_file = os.path.join(static_dir, "index.html")

    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_frontend(full_path: str):
        if full_path:
            root = os.path.realpath(static_dir)
            target = os.path.realpath(os.path.join(root, full_path))
            # Traversal attempts are refused rather than rewritten to index.html
            if not _within(root, target):
                raise HTTPException(status_code=404, detail="Not Found")
            if os.path.isfile(target):
                return FileResponse(target)
        if not os.path.isfile(index_file):
            raise HTTPException(status_code=404, detail="Not Found")
        return FileResponse(index_file)

    logger.info(f"Serving frontend from {static_dir}")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.API_TITLE,
        description=settings.API_DESCRIPTION,
        version=settings.API_VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.mail_transport = build_mail_transport(settings)
    app.state.payment_gateway = PaymentGateway(
        settings.STRIPE_SECRET_KEY,
        timeout=settings.PAYMENT_TIMEOUT_SECONDS,
        shipping_rates=settings.SHIPPING_RATES,
    )

    # Set up error handlers
    setup_error_handlers(app)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Add request ID middleware for better error tracking
    app.middleware("http")(add_request_id_middleware)

    app.include_router(api_router)

    # Must be registered last so API routes win over the catch-all
    if settings.is_production:
        if os.path.isdir(settings.STATIC_DIR):
            mount_frontend(app, settings.STATIC_DIR)
        else:
            logger.warning(f"Static directory {settings.STATIC_DIR!r} not found; frontend will not be served")

    return app
