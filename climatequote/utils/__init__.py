"""Utility modules."""

from .logging_config import (
    get_logger,
    setup_logging,
    ensure_logging,
    QuoteFormatter,
    FileFormatter,
    ContextAdapter,
    record_context,
)
from .validation import (
    to_float,
    non_negative,
    to_bool,
    validate_refrigerant_type,
    validate_vat_rate,
    validate_pricing_table,
    ValidationError,
)

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    "ensure_logging",
    "QuoteFormatter",
    "FileFormatter",
    "ContextAdapter",
    "record_context",
    # Validation
    "to_float",
    "non_negative",
    "to_bool",
    "validate_refrigerant_type",
    "validate_vat_rate",
    "validate_pricing_table",
    "ValidationError",
]
