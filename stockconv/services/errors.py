from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any


class IssueCode(str, Enum):
    UNKNOWN_VARIANT = "UNKNOWN_VARIANT"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    EMPTY_TARGET_SET = "EMPTY_TARGET_SET"
    INVALID_TARGET = "INVALID_TARGET"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    DUPLICATE_TARGET = "DUPLICATE_TARGET"


@dataclass(frozen=True)
class ConversionIssue:
    """A validation finding, attributable to a request field and optionally a target row."""

    code: IssueCode
    message: str
    field: str
    row: int | None = None
    details: dict[str, Any] = field(default_factory=dict)


class ConversionError(Exception):
    pass


class UnknownVariantError(ConversionError):
    def __init__(self, depot_id: int, variant_id: int) -> None:
        super().__init__(f"Variant {variant_id} not found in depot {depot_id}")
        self.depot_id = depot_id
        self.variant_id = variant_id


class StaleVersionError(ConversionError):
    def __init__(self, variant_id: int, expected_version: int, actual_version: int | None) -> None:
        super().__init__(
            f"Variant {variant_id} changed concurrently (expected version {expected_version}, found {actual_version})"
        )
        self.variant_id = variant_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class InsufficientStockError(ConversionError):
    def __init__(self, variant_id: int, requested: Decimal, available: Decimal) -> None:
        super().__init__(f"Variant {variant_id} has {available} available, {requested} requested")
        self.variant_id = variant_id
        self.requested = requested
        self.available = available


class ValidationFailedError(ConversionError):
    def __init__(self, errors: list[ConversionIssue]) -> None:
        super().__init__("; ".join(issue.message for issue in errors) or "Conversion request is invalid")
        self.errors = errors


class ConflictError(ConversionError):
    def __init__(self, message: str = "Stock changed, please retry") -> None:
        super().__init__(message)
