"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import SQLModel

import src.domain  # noqa: F401  registers every table on SQLModel.metadata
from src.api.error import register_error_handlers
from src.api.routes import amcu, customers, entries, ledger, rates
from src.depends import AsyncSessionLocal, engine, event_bus, rate_cache
from src.worker import AmcuListenerWorker, NotificationDispatcher

logger = logging.getLogger(__name__)


def create_app(config) -> FastAPI:
    """
    Build the API application

    Args:
        config: ApplicationConfig (or a subclass overriding settings)

    Returns:
        Configured FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if config.CREATE_TABLES_ON_STARTUP:
            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
            logger.info("Database tables ensured")

        dispatcher = None
        if config.NOTIFICATION_ENABLED:
            dispatcher = NotificationDispatcher(event_bus)
            dispatcher.start()

        listener = None
        if config.AMCU_ENABLED:
            listener = AmcuListenerWorker(
                host=config.AMCU_HOST,
                port=config.AMCU_PORT,
                session_factory=AsyncSessionLocal,
                rate_cache=rate_cache,
                event_publisher=event_bus,
            )
            listener.start()
        app.state.amcu_listener = listener

        try:
            yield
        finally:
            if listener:
                await listener.shutdown()
            if dispatcher:
                await dispatcher.stop()
            await engine.dispose()

    app = FastAPI(
        title="Dairy Ledger Service",
        description="Milk collection, rate cards and farmer ledger",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS or ["*"],
        allow_credentials=config.CORS_ALLOW_CREDENTIALS and bool(config.CORS_ORIGINS),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    for module in (customers, entries, ledger, rates, amcu):
        app.include_router(module.router, prefix=config.API_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app
