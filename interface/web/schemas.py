"""Request bodies of the web API.

Only the shape and the types are checked here; business rules (name
length, PIN format, known enum values...) live in ``business.validators``
and the repositories so that every caller gets the same checks.
Update bodies are sent through ``model_dump(exclude_unset=True)`` so only
the fields the client actually sent are changed.
"""
from typing import List, Optional

from pydantic import BaseModel, Field


class StaffCreate(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    pin: Optional[str] = None
    avatar: Optional[str] = None


class StaffUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    pin: Optional[str] = None
    avatar: Optional[str] = None
    is_active: Optional[bool] = None


class ServiceCreate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = None
    cogs: Optional[float] = None
    duration_min: Optional[int] = None


class ServiceUpdate(ServiceCreate):
    pass


class CustomerCreate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    line_id: Optional[str] = None
    instagram: Optional[str] = None
    birthday: Optional[str] = None
    gender: Optional[str] = None
    preferred_language: Optional[str] = None
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    consent_allow_promo: bool = False
    consent_allow_contact: bool = True


class CustomerUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    line_id: Optional[str] = None
    instagram: Optional[str] = None
    birthday: Optional[str] = None
    gender: Optional[str] = None
    preferred_language: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
    consent_allow_promo: Optional[bool] = None
    consent_allow_contact: Optional[bool] = None


class AppointmentCreate(BaseModel):
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    scheduled_at: Optional[str] = None
    service_id: Optional[int] = None
    staff_id: Optional[int] = None
    deposit: Optional[float] = None
    notes: Optional[str] = None


class AppointmentUpdate(AppointmentCreate):
    status: Optional[str] = None


class CartItem(BaseModel):
    """One cart line; ``price`` overrides the catalog price."""
    service_id: Optional[int] = None
    price: Optional[float] = None
    main_staff_id: Optional[int] = None
    assistant_id: Optional[int] = None


class CheckoutRequest(BaseModel):
    items: List[CartItem] = Field(default_factory=list)
    payment_method: Optional[str] = None
    customer_id: Optional[int] = None
    customer_name_snapshot: Optional[str] = None
    note: Optional[str] = None


class VoidRequest(BaseModel):
    pin: Optional[str] = None
    reason: Optional[str] = None
    note: Optional[str] = None
