"""
Input validation utilities for climatequote.

Two flavours live here:

- Lenient coercion (``non_negative``, ``to_float``) used inside the engine.
  Calculators back live, half-filled forms, so bad numbers are clamped to a
  safe value instead of raising.
- Strict validators (``validate_*``) used by hosts before data enters a
  snapshot or an audit record. These raise ``ValidationError``.

Usage:
    from climatequote.utils.validation import (
        non_negative,
        validate_refrigerant_type,
        ValidationError,
    )

    area = non_negative("35")           # 35.0
    code = validate_refrigerant_type("r32")   # "R32"
"""

import math
from typing import Any, Iterable, List, Optional, Sequence
import logging

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str = "", suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field = field
        self.suggestions = suggestions or []


def to_float(value: Any, default: float = 0.0) -> float:
    """
    Coerce a value to a finite float.

    None, empty strings, unparseable text, NaN and infinities all yield
    ``default``. Strings with a decimal comma ("2,5") are accepted.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not value:
            return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def non_negative(value: Any, default: float = 0.0) -> float:
    """Coerce to a finite float and clamp negatives to zero."""
    return max(0.0, to_float(value, default))


TRUE_STRINGS = ("true", "1", "yes", "ja", "on", "y", "j")
FALSE_STRINGS = ("false", "0", "no", "nee", "off", "n")


def to_bool(value: Any, default: bool = False) -> bool:
    """
    Coerce a form value to a bool.

    Strings are matched case-insensitively against TRUE_STRINGS and
    FALSE_STRINGS, so "false" and "nee" are False. Blank or unrecognised
    strings and None yield ``default``.
    """
    if value is None:
        return default
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
        return default
    return bool(value)


def validate_refrigerant_type(code: str, known: Optional[Iterable[str]] = None) -> str:
    """
    Validate and normalize a refrigerant type code.

    Args:
        code: Refrigerant code such as "R32" or "r410a"
        known: Accepted codes (default: the GWP reference table)

    Returns:
        Canonical code as spelled in the reference table

    Raises:
        ValidationError: If code is empty or not in the reference table
    """
    if known is None:
        from ..compliance.refrigerant import REFRIGERANT_GWP
        known = REFRIGERANT_GWP.keys()

    if not code or not str(code).strip():
        raise ValidationError(
            "Refrigerant type cannot be empty",
            field="refrigerant_type",
            suggestions=["Use a code such as 'R32' or 'R410A'"],
        )

    normalized = str(code).strip().upper().replace("-", "")
    for candidate in known:
        if candidate.upper() == normalized:
            return candidate

    raise ValidationError(
        f"Unknown refrigerant type '{code}'",
        field="refrigerant_type",
        suggestions=[f"Known types are: {', '.join(sorted(known))}"],
    )


def validate_vat_rate(vat_rate: Any) -> float:
    """
    Validate a VAT percentage.

    Raises:
        ValidationError: If the rate is not a number in [0, 100]
    """
    rate = to_float(vat_rate, default=float("nan"))
    if math.isnan(rate):
        raise ValidationError(
            f"VAT rate must be a number: got '{vat_rate}'",
            field="vat_rate",
        )
    if rate < 0 or rate > 100:
        raise ValidationError(
            f"VAT rate {rate}% is out of range",
            field="vat_rate",
            suggestions=["Dutch rates are 21 (standard) or 9 (reduced)"],
        )
    return rate


def validate_pricing_table(rows: Sequence[Any], name: str = "pricing") -> Sequence[Any]:
    """
    Check that tier rows are well-formed, ordered and non-overlapping.

    Gaps between rows are allowed. Rows are checked in the given order;
    the table is never re-sorted.

    Raises:
        ValidationError: On an inverted band, out-of-order or overlapping rows
    """
    previous = None
    for index, row in enumerate(rows):
        low = to_float(row.min_capacity, default=float("nan"))
        high = to_float(row.max_capacity, default=float("nan"))
        if math.isnan(low) or math.isnan(high) or low > high:
            raise ValidationError(
                f"{name} row {index} has an invalid band [{row.min_capacity}, {row.max_capacity}]",
                field=f"{name}[{index}]",
                suggestions=["min_capacity must be a number not above max_capacity"],
            )
        if previous is not None:
            prev_low, prev_high = previous
            if low < prev_low:
                raise ValidationError(
                    f"{name} row {index} is out of order",
                    field=f"{name}[{index}]",
                    suggestions=["Sort rows by min_capacity before saving"],
                )
            if low <= prev_high:
                raise ValidationError(
                    f"{name} row {index} overlaps the previous row",
                    field=f"{name}[{index}]",
                    suggestions=[f"Start the band above {prev_high}"],
                )
        previous = (low, high)

    logger.debug(f"Validated {len(rows)} {name} rows")
    return rows
