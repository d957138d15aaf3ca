"""Salon enumerations shared by the ORM models and the business rules.

Values are stored in the database as their plain string form.
"""
from enum import Enum


class Role(str, Enum):
    """Staff roles."""
    STYLIST = "STYLIST"
    TECHNICIAN = "TECHNICIAN"
    ASSISTANT = "ASSISTANT"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


class ServiceCategory(str, Enum):
    """Service catalog categories."""
    HAIR = "HAIR"
    NAIL = "NAIL"
    LASH = "LASH"
    PRODUCT = "PRODUCT"


class PaymentMethod(str, Enum):
    """Accepted payment methods."""
    CASH = "CASH"
    CREDIT_CARD = "CREDIT_CARD"
    TRANSFER = "TRANSFER"
    GOWABI = "GOWABI"


class TransactionStatus(str, Enum):
    COMPLETED = "COMPLETED"
    VOID = "VOID"


class AppointmentStatus(str, Enum):
    BOOKED = "BOOKED"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


class CommissionReason(str, Enum):
    MAIN_SERVICE = "MAIN_SERVICE"
    ASSIST_SERVICE = "ASSIST_SERVICE"


# Roles allowed to authorize a void with their PIN
VOID_AUTHORIZED_ROLES = (Role.MANAGER.value, Role.ADMIN.value)
