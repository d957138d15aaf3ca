"""ORM object -> JSON-ready dict conversion.

Money columns come back from the database as ``Decimal`` and are rendered
as floats; dates and datetimes are rendered as ISO strings. Serializers
that follow relationships must be called while the object's session is
still open.
"""
from datetime import date, datetime
from typing import Any, Dict, Optional

from .models import (
    Staff, Customer, Service, Appointment, Transaction, TransactionItem
)


def money(value: Any) -> float:
    """Render a DECIMAL column value as float (None -> 0.0)."""
    if value is None:
        return 0.0
    return float(value)


def iso(value: Optional[Any]) -> Optional[str]:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return None


def staff_to_dict(staff: Staff) -> Dict[str, Any]:
    """Serialize a staff member. The PIN itself is never exposed."""
    return {
        "id": staff.id,
        "name": staff.name,
        "role": staff.role,
        "avatar": staff.avatar,
        "has_pin": bool(staff.pin),
        "is_active": staff.is_active,
        "created_at": iso(staff.created_at),
    }


def staff_brief(staff: Optional[Staff]) -> Optional[Dict[str, Any]]:
    if staff is None:
        return None
    return {"id": staff.id, "name": staff.name, "role": staff.role}


def customer_to_dict(customer: Customer) -> Dict[str, Any]:
    return {
        "id": customer.id,
        "full_name": customer.full_name,
        "phone": customer.phone,
        "email": customer.email,
        "line_id": customer.line_id,
        "instagram": customer.instagram,
        "birthday": iso(customer.birthday),
        "gender": customer.gender,
        "preferred_language": customer.preferred_language,
        "notes": customer.notes,
        "tags": customer.tags or [],
        "consent_allow_promo": customer.consent_allow_promo,
        "consent_allow_contact": customer.consent_allow_contact,
        "points": customer.points or 0,
        "total_visits": customer.total_visits or 0,
        "lifetime_spend": money(customer.lifetime_spend),
        "avg_ticket": money(customer.avg_ticket),
        "last_visit_at": iso(customer.last_visit_at),
        "created_at": iso(customer.created_at),
    }


def service_to_dict(service: Service) -> Dict[str, Any]:
    return {
        "id": service.id,
        "name": service.name,
        "category": service.category,
        "price": money(service.price),
        "cogs": money(service.cogs),
        "duration_min": service.duration_min or 0,
        "created_at": iso(service.created_at),
    }


def appointment_to_dict(appointment: Appointment) -> Dict[str, Any]:
    return {
        "id": appointment.id,
        "customer_name": appointment.customer_name,
        "customer_phone": appointment.customer_phone,
        "scheduled_at": iso(appointment.scheduled_at),
        "service_id": appointment.service_id,
        "staff_id": appointment.staff_id,
        "deposit": money(appointment.deposit),
        "notes": appointment.notes,
        "status": appointment.status,
        "created_at": iso(appointment.created_at),
        "service": (
            service_to_dict(appointment.service) if appointment.service else None
        ),
        "staff": staff_brief(appointment.staff),
    }


def item_to_dict(item: TransactionItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "service_id": item.service_id,
        "service_name": item.service_name,
        "category": item.category,
        "price": money(item.price),
        "cost": money(item.cost),
        "primary_staff_id": item.primary_staff_id,
        "assistant_staff_id": item.assistant_staff_id,
        "primary_staff": staff_brief(item.primary_staff),
        "assistant_staff": staff_brief(item.assistant_staff),
        "commission_amount": money(item.commission_amount),
    }


def transaction_to_dict(tx: Transaction) -> Dict[str, Any]:
    return {
        "id": tx.id,
        "total_amount": money(tx.total_amount),
        "payment_method": tx.payment_method,
        "status": tx.status,
        "customer_id": tx.customer_id,
        "customer_name_snapshot": tx.customer_name_snapshot,
        "note": tx.note,
        "voided_at": iso(tx.voided_at),
        "voided_by_staff_id": tx.voided_by_staff_id,
        "void_reason": tx.void_reason,
        "void_note": tx.void_note,
        "created_at": iso(tx.created_at),
        "items": [item_to_dict(i) for i in tx.items],
        "customer": (
            {"id": tx.customer.id, "full_name": tx.customer.full_name}
            if tx.customer else None
        ),
    }
