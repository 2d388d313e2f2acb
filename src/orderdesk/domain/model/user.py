"""User identity as seen by the order workflow: an id and a display name."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    id: int | None
    name: str
