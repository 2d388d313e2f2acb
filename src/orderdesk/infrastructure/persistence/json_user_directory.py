"""JSON-backed implementation of the UserDirectory identity collaborator."""

from __future__ import annotations

from orderdesk.domain.model.user import User
from orderdesk.domain.repository.user_directory import UserDirectory
from orderdesk.infrastructure.persistence.json_store import JsonStore

TABLE = "users"


class JsonUserDirectory(UserDirectory):

    def __init__(self, store: JsonStore) -> None:
        self._store = store

    def exists(self, user_id: int) -> bool:
        return any(raw["id"] == user_id for raw in self._store.load(TABLE))

    def register(self, user: User) -> None:
        records = [raw for raw in self._store.load(TABLE) if raw["id"] != user.id]
        if user.id is None:
            user.id = max((raw["id"] for raw in records), default=0) + 1
        records.append({"id": user.id, "name": user.name})
        self._store.persist(TABLE, records)
