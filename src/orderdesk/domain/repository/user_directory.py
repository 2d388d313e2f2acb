"""Identity collaborator.

The order workflow needs exactly one thing from the user side: whether a
user id refers to a real user.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from orderdesk.domain.model.user import User


class UserDirectory(ABC):

    @abstractmethod
    def exists(self, user_id: int) -> bool:
        """Return True if *user_id* refers to a registered user."""

    @abstractmethod
    def register(self, user: User) -> None:
        """Store a user, assigning an ID if needed."""
