from fastapi import Request

from mbsdesk.config.settings import Settings
from mbsdesk.store.base import DocumentStore


def get_store(request: Request) -> DocumentStore:
    """FastAPI dependency returning the store built at startup."""
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
