"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

import logging
from pathlib import Path

from orderdesk.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from orderdesk.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from orderdesk.infrastructure.persistence.json_store import JsonStore
from orderdesk.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork
from orderdesk.infrastructure.persistence.json_user_directory import JsonUserDirectory
from orderdesk.infrastructure.settings import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def load_settings(data_dir: Path | None = None) -> Settings:
    if data_dir is not None:
        return Settings(data_dir=data_dir)
    return Settings()


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def json_store(settings: Settings) -> JsonStore:
    return JsonStore(settings.store_path)


def unit_of_work(store: JsonStore) -> JsonUnitOfWork:
    return JsonUnitOfWork(store)


def user_directory(store: JsonStore) -> JsonUserDirectory:
    return JsonUserDirectory(store)


def product_repository(store: JsonStore) -> JsonProductRepository:
    return JsonProductRepository(store)


def order_repository(store: JsonStore) -> JsonOrderRepository:
    return JsonOrderRepository(store)
