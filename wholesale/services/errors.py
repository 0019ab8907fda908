"""Order engine exceptions.

Synopsis:
Every failure is raised synchronously inside the operation that triggered it.
Callers receive either a ValidationFailed (field-error set, nothing persisted)
or an InventoryConsistencyError (fatal, never expected under the locking rules).

Glossary:
- Field-error set: mapping of field name to a list of human-readable messages.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence


class OrderEngineError(RuntimeError):
    """Base class for order engine failures."""


class ValidationFailed(OrderEngineError):
    """Input rejected before persistence."""

    default_message = "Validation failed"

    def __init__(self, errors: Mapping[str, Sequence[str]] | None = None, message: str | None = None):
        self.errors: Dict[str, List[str]] = {key: list(values) for key, values in (errors or {}).items()}
        super().__init__(message or self._summarize())

    def _summarize(self) -> str:
        if not self.errors:
            return self.default_message
        parts = [f"{field} {'; '.join(messages)}" for field, messages in self.errors.items()]
        return f"{self.default_message}: {', '.join(parts)}"


class OrderValidationError(ValidationFailed):
    default_message = "Order is invalid"


class InventoryValidationError(ValidationFailed):
    """Bucket invariants: identity immutability, key uniqueness, non-negative stock."""

    default_message = "Inventory bucket is invalid"


class ProductionRequestValidationError(ValidationFailed):
    default_message = "Production request is invalid"


class TemplateInvariantError(ValidationFailed):
    default_message = "Order template is invalid"


class InventoryConsistencyError(OrderEngineError):
    """A bucket vanished or was found in a state the locking rules should prevent."""


class ErrorCollector:
    """Accumulates field errors and raises them together."""

    def __init__(self):
        self.errors: Dict[str, List[str]] = {}

    def add(self, field: str, message: str) -> None:
        self.errors.setdefault(field, []).append(message)

    def __bool__(self) -> bool:
        return bool(self.errors)

    def raise_if_any(self, error_cls=ValidationFailed) -> None:
        if self.errors:
            raise error_cls(self.errors)
