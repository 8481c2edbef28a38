"""
FastAPI application exposing MFA validation to the gateway.
"""
import logging
import os

from fastapi import FastAPI

from . import __version__
from .config import load_config_document, load_user_bindings
from .mfa import router as mfa_router
from .mfa.registry import initialize_providers
from .mfa.service import MFAService
from .observability.logging import setup_logging
from .observability.metrics import metrics_router

logger = logging.getLogger(__name__)


def configure_app(app: FastAPI, document, providers=None):
    """Build the provider chain and user bindings from the config document."""
    active = initialize_providers(document, providers)
    app.state.mfa_service = MFAService(active)
    app.state.user_bindings = load_user_bindings(document)
    logger.info(f"MFA gateway ready with providers: {app.state.mfa_service.provider_ids()}")


def create_app(document=None, providers=None) -> FastAPI:
    app = FastAPI(
        title="mfagate",
        description="Multi-factor validation for the authentication gateway",
        version=__version__,
        docs_url="/docs" if os.getenv("ENABLE_DOCS", "true").lower() == "true" else None,
        redoc_url=None,
    )
    app.include_router(mfa_router.router)
    app.include_router(metrics_router, tags=["Metrics"])

    if document is not None:
        configure_app(app, document, providers)
    else:
        @app.on_event("startup")
        async def startup_event():
            """Load configuration and providers on startup."""
            setup_logging()
            configure_app(app, load_config_document(), providers)

    return app


app = create_app()
