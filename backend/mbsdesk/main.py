from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mbsdesk.api import billing, routes
from mbsdesk.config.settings import Settings, settings
from mbsdesk.errors import install_error_handlers
from mbsdesk.store.base import DocumentStore
from mbsdesk.store.factory import build_store

logger = logging.getLogger(__name__)


def create_app(config: Settings | None = None, store: DocumentStore | None = None) -> FastAPI:
    """Build the API.

    ``config`` is what every route sees through ``get_settings``. The document
    store is created and prepared once when the app starts; passing ``store``
    skips that step (tests hand in a fake).
    """
    config = config or settings
    logging.basicConfig(level=config.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = store is None
        if owned:
            app.state.store = build_store(config)
            await app.state.store.prepare()
        logger.info("Document store ready: %s", app.state.store.name)
        try:
            yield
        finally:
            if owned:
                await app.state.store.close()

    app = FastAPI(title="mbsdesk", lifespan=lifespan)
    app.state.settings = config
    if store is not None:
        app.state.store = store
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    install_error_handlers(app)
    app.include_router(routes.router)
    app.include_router(billing.router)
    return app
