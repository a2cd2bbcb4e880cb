"""Exception hierarchy shared by the conscience and memory cores."""

from __future__ import annotations


class CoreError(Exception):
    """Base class for errors raised by the core components."""


class ValidationError(CoreError, ValueError):
    """Input rejected at the boundary before reaching a component."""


class UnknownLayerError(ValidationError):
    """Raised when a memory layer name is not one of the five layers."""

    def __init__(self, layer: object) -> None:
        super().__init__(f"Unknown memory layer: {layer!r}")
        self.layer = layer


class RuleConflictError(CoreError):
    """Raised when adding a rule whose name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Moral rule already exists: {name}")
        self.name = name


class RuleNotFoundError(CoreError, KeyError):
    """Raised when a rule name is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Moral rule not found: {self.name}"


class StorageError(CoreError):
    """Index or database failure surfaced from store/search calls."""
