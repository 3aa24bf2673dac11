"""Application factory.

`create_app()` loads configuration, validates and registers every form
definition (an invalid definition stops startup), builds the application
store and file storage, and mounts the routers behind problem+json handlers
and the request-id middleware.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from grantforms.config import AppConfig, load_config
from grantforms.db.base import get_engine
from grantforms.errors import ApplicationNotFoundError, UnknownPositionError
from grantforms.forms.under_10k import build_under_10k
from grantforms.http.problem import (
    handle_http_exception,
    handle_not_found,
    handle_request_validation_error,
    handle_unexpected_error,
)
from grantforms.http.request_id import RequestIdMiddleware
from grantforms.logging_setup import configure_logging
from grantforms.logic.bank_check import BankCheckClient
from grantforms.logic.registry import FormRegistry, build_registry
from grantforms.logic.repository_applications import ApplicationStore, SqlApplicationStore
from grantforms.logic.uploads import FileStorage, InMemoryFileStorage, LocalFileStorage
from grantforms.models.form_definition import FormDefinition
from grantforms.routes import api_router

logger = logging.getLogger(__name__)


def bank_client_factory(config: AppConfig):
    """Return a zero-argument factory yielding a client, or None when checks are off."""

    def _factory() -> Optional[BankCheckClient]:
        settings = config.bank_check
        if not settings.enabled or not settings.url:
            return None
        return BankCheckClient(settings.url, api_key=settings.api_key, timeout_seconds=settings.timeout_seconds)

    return _factory


def default_definitions(config: AppConfig) -> list[FormDefinition]:
    return [build_under_10k(bank_client_factory=bank_client_factory(config))]


def build_storage(config: AppConfig) -> FileStorage:
    if config.uploads.root:
        return LocalFileStorage(config.uploads.root)
    return InMemoryFileStorage()


def create_app(
    config: Optional[AppConfig] = None,
    *,
    definitions: Optional[Iterable[FormDefinition]] = None,
    store: Optional[ApplicationStore] = None,
    storage: Optional[FileStorage] = None,
) -> FastAPI:
    config = config or load_config()
    configure_logging(config.environment)

    # Raises FormDefinitionError; a malformed definition must never be served
    registry: FormRegistry = build_registry(
        definitions if definitions is not None else default_definitions(config),
        enabled=config.forms.enabled or None,
    )

    app = FastAPI(title="Grant application forms")
    app.state.config = config
    app.state.registry = registry
    app.state.store = store if store is not None else SqlApplicationStore(get_engine(config.database.url))
    app.state.storage = storage if storage is not None else build_storage(config)

    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(ApplicationNotFoundError, handle_not_found)
    app.add_exception_handler(UnknownPositionError, handle_not_found)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router)

    @app.get("/health", include_in_schema=False)
    def health() -> dict:
        return {"status": "ok", "forms": registry.ids(), "environment": config.environment}

    logger.info("app_created environment=%s forms=%s", config.environment, registry.ids())
    return app


__all__ = ["create_app", "bank_client_factory", "default_definitions", "build_storage"]
