from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Sequence

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required", details={"field": field_name})
    return str(value).strip()


def require_positive_id(value: Any, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid", details={"field": field_name})
    if number <= 0:
        raise ValidationError(f"{field_name} is invalid", details={"field": field_name})
    return number


def require_fields(payload: Mapping[str, Any], fields: Sequence[str]) -> None:
    """Fail with every missing field at once, not just the first."""
    missing = [f for f in fields if payload.get(f) is None or str(payload.get(f)).strip() == ""]
    if missing:
        raise ValidationError("Missing required fields", details={"missing": missing})


def require_amount(value: Any, field_name: str, *, allow_negative: bool = False) -> Decimal:
    try:
        amount = Decimal(str(value if value is not None else "0"))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} is not a number", details={"field": field_name})
    if not amount.is_finite():
        raise ValidationError(f"{field_name} is not a number", details={"field": field_name})
    if amount < 0 and not allow_negative:
        raise ValidationError(f"{field_name} cannot be negative", details={"field": field_name})
    return amount


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "y"}


def optional_text(value: Any) -> Optional[str]:
    """Free-text label; spreadsheet cells may arrive as numbers."""
    if value is None:
        return None
    return str(value).strip() or None


def optional_non_negative_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or str(value).strip() == "":
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be a whole number", details={"field": field_name, "value": str(value)})
    if number < 0:
        raise ValidationError(f"{field_name} cannot be negative", details={"field": field_name})
    return number
