"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Storage failures are not domain errors: they propagate as StorageError
after the enclosing transaction has been rolled back.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ProductNotFoundError(EntityNotFoundError):

    def __init__(self, product_id: int) -> None:
        self.product_id = product_id
        super().__init__(f"Product #{product_id} not found")


class InsufficientStockError(DomainException):
    """Raised by the stock ledger; aborts the enclosing transaction."""

    def __init__(self, product_id: int, requested: int, available: int) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product #{product_id} "
            f"(requested {requested}, available {available})"
        )


class InvalidTransitionError(DomainException):
    """A requested status change is not allowed from the current status."""

    def __init__(self, message: str, current=None, requested=None) -> None:
        self.current = current
        self.requested = requested
        super().__init__(message)


class OrderNotModifiableError(InvalidTransitionError):
    """Items and fields may only be edited while the order is pending."""


class DuplicateOrderNumberError(DomainException):

    def __init__(self, order_number: str) -> None:
        self.order_number = order_number
        super().__init__(f"Order number {order_number} is already taken")


class StorageError(Exception):
    """The storage collaborator failed to read, write or commit."""
