"""
FastAPI application - Main entry point
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from src.api.endpoints.quotes import quotes_api
from src.database.csv_sink import CsvLeadSink
from src.error_handler import SinkError
from src.integrations.contracts.interfaces import CheckoutProvider, LeadSink
from src.leads.service import LeadService
from src.utils.config_loader import Settings, load_settings

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ROOT_MESSAGE = "Delivery Quote Backend Server is Running!"


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

def build_sink(settings: Settings) -> LeadSink:
    kind = settings.sink_kind
    if kind == "postgres":
        from src.database.postgres_real import PostgresLeadSink

        return PostgresLeadSink(settings.database_url, require_ssl=settings.is_production)
    if kind == "memory":
        from src.database.postgres import InMemoryLeadSink

        logger.warning("Using in-memory lead sink; leads are lost on restart")
        return InMemoryLeadSink()
    return CsvLeadSink(settings.leads_csv_path)


def build_checkout_client(settings: Settings) -> CheckoutProvider:
    if settings.checkout_kind == "stripe":
        from src.integrations.clients.real_http.stripe_checkout import StripeCheckoutClient

        return StripeCheckoutClient(api_key=settings.stripe_secret_key or "")

    from src.integrations.clients.mocks.checkout import MockCheckoutClient

    logger.warning("STRIPE_SECRET_KEY not set or CHECKOUT_MODE=mock; using mock checkout client")
    return MockCheckoutClient(base_url=settings.site_url or "https://checkout.mock.local")


@asynccontextmanager
async def lifespan(app: FastAPI):
    service: LeadService = app.state.lead_service
    logger.info(
        "Starting Delivery Quote Backend (sink=%s, checkout=%s, origin=%s)",
        service.sink.kind,
        service.checkout.kind,
        service.settings.cors_origin,
    )
    try:
        service.sink.ensure_ready()
    except SinkError as e:
        logger.error("Lead sink not ready at startup (will retry on first write): %s", e.message)
    yield
    logger.info("Shutting down Delivery Quote Backend...")


def create_app(
    settings: Optional[Settings] = None,
    sink: Optional[LeadSink] = None,
    checkout: Optional[CheckoutProvider] = None,
) -> FastAPI:
    settings = settings or load_settings()
    app = FastAPI(
        title="Delivery Quote Backend",
        description="Lead logging and hosted checkout for the delivery quote form",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.lead_service = LeadService(
        settings=settings,
        sink=sink or build_sink(settings),
        checkout=checkout or build_checkout_client(settings),
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )
    logger.info("Applied CORS middleware. Allowed origin: %s", settings.cors_origin)

    app.include_router(quotes_api)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return ROOT_MESSAGE

    @app.get("/health")
    async def health():
        service: LeadService = app.state.lead_service
        return {"status": "ok", "sink": service.sink.kind, "checkout": service.checkout.kind}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.api.main:app", host="0.0.0.0", port=app.state.settings.port)
