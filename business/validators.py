"""Form validation rules for staff, services and customers.

Each validator raises ``ValidationError`` with a user-facing message on the
first rule that fails. ``partial=True`` only checks the fields present, for
PATCH-style updates.
"""
import re
from typing import Any, Mapping

from business.errors import ValidationError
from business.constants import Role, ServiceCategory

PIN_PATTERN = re.compile(r"^\d{4}$")

_ROLES = {r.value for r in Role}
_CATEGORIES = {c.value for c in ServiceCategory}


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _number(value: Any, message: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(message)


def validate_staff_form(data: Mapping[str, Any], partial: bool = False) -> None:
    """Name >= 2 characters, a known role, PIN exactly 4 digits."""
    if not partial or "name" in data:
        name = data.get("name")
        if not name or len(name.strip()) < 2:
            raise ValidationError("Name must be at least 2 characters long.")

    if not partial or "role" in data:
        role = _enum_value(data.get("role"))
        if not role:
            raise ValidationError("Role is required.")
        if role not in _ROLES:
            raise ValidationError(f"Unknown role: {role}")

    if not partial or "pin" in data:
        pin = data.get("pin")
        if not pin or not PIN_PATTERN.match(str(pin)):
            raise ValidationError("PIN must be exactly 4 digits.")


def validate_service_form(data: Mapping[str, Any], partial: bool = False) -> None:
    """Name >= 2 characters, a known category, non-negative price/COGS/duration."""
    if not partial or "name" in data:
        name = data.get("name")
        if not name or len(name.strip()) < 2:
            raise ValidationError("Service name must be at least 2 characters")

    if not partial or "category" in data:
        category = _enum_value(data.get("category"))
        if not category:
            raise ValidationError("Category is required")
        if category not in _CATEGORIES:
            raise ValidationError(f"Unknown category: {category}")

    if not partial or "price" in data:
        price = data.get("price")
        if price is None or _number(price, "Price must be a number") < 0:
            raise ValidationError("Price must be a positive number")

    if data.get("cogs") is not None:
        if _number(data["cogs"], "Cost (COGS) must be a number") < 0:
            raise ValidationError("Cost (COGS) cannot be negative")

    if data.get("duration_min") is not None:
        if _number(data["duration_min"], "Duration must be a number") < 0:
            raise ValidationError("Duration cannot be negative")


def validate_customer_form(data: Mapping[str, Any], partial: bool = False) -> None:
    """Full name >= 2 characters."""
    if not partial or "full_name" in data:
        full_name = data.get("full_name")
        if not full_name or len(full_name.strip()) < 2:
            raise ValidationError("Full name must be at least 2 characters long.")
