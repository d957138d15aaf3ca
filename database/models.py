"""SQLAlchemy ORM model definitions.

This module defines every table of the salon back-office:
- Staff, customers and the service catalog
- Appointments
- Transactions, their line items and the commission ledger

Enumerations are stored as plain strings so the schema stays portable
between SQLite and PostgreSQL.
"""
from typing import List, Optional
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, Date, DateTime,
    DECIMAL, ForeignKey, JSON
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import relationship
from datetime import datetime, date

from business.constants import (
    Role, AppointmentStatus, TransactionStatus
)

# SQLAlchemy declarative base, every model inherits from it
Base = declarative_base()

# Allow the legacy annotated Column style under SQLAlchemy 2.0
Base.__allow_unmapped__ = True


class Staff(Base):
    """Staff table model.

    Attributes:
        id: Primary key.
        name: Display name, required, up to 50 characters.
        role: One of ``Role``; drives commission eligibility and void rights.
        pin: 4-digit PIN used at the register, optional.
        avatar: Photo URL, data URI or preset avatar id, optional.
        is_active: Whether the staff member is still employed.
        created_at: Creation time.

    Relationships:
        primary_items: Line items this staff member performed.
        assisted_items: Line items this staff member assisted on.
        commission_logs: Commission ledger entries credited to them.
        appointments: Appointments booked with them.
    """
    __tablename__ = "staff"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    name: str = Column(String(50), nullable=False)
    role: str = Column(String(20), nullable=False, default=Role.STYLIST.value)
    pin: Optional[str] = Column(String(4))
    avatar: Optional[str] = Column(Text)
    is_active: bool = Column(Boolean, default=True)
    created_at: datetime = Column(DateTime, default=datetime.now)

    # Relationships
    primary_items: List["TransactionItem"] = relationship(
        "TransactionItem",
        foreign_keys="TransactionItem.primary_staff_id",
        back_populates="primary_staff"
    )
    assisted_items: List["TransactionItem"] = relationship(
        "TransactionItem",
        foreign_keys="TransactionItem.assistant_staff_id",
        back_populates="assistant_staff"
    )
    commission_logs: List["CommissionLog"] = relationship("CommissionLog", back_populates="staff")
    appointments: List["Appointment"] = relationship("Appointment", back_populates="staff")
    voided_transactions: List["Transaction"] = relationship(
        "Transaction",
        foreign_keys="Transaction.voided_by_staff_id",
        back_populates="voided_by"
    )


class Customer(Base):
    """Customer table model.

    Stores contact details plus lifetime aggregates that the checkout and
    void flows keep up to date.

    Attributes:
        id: Primary key.
        full_name: Customer name, required.
        phone / email / line_id / instagram: Contact fields, optional.
        birthday: Date of birth, optional.
        gender: Free text, optional.
        preferred_language: Language code, optional.
        notes: Free text notes.
        tags: JSON list of labels.
        consent_allow_promo: Marketing consent.
        consent_allow_contact: Contact consent.
        points: Loyalty points.
        total_visits: Number of completed (non-voided) visits.
        lifetime_spend: Sum of completed transaction totals.
        avg_ticket: lifetime_spend / total_visits, 0 when no visits.
        last_visit_at: Time of the most recent checkout.
        created_at: Creation time.
    """
    __tablename__ = "customers"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    full_name: str = Column(String(100), nullable=False)
    phone: Optional[str] = Column(String(20))
    email: Optional[str] = Column(String(120))
    line_id: Optional[str] = Column(String(100))
    instagram: Optional[str] = Column(String(100))
    birthday: Optional[date] = Column(Date)
    gender: Optional[str] = Column(String(20))
    preferred_language: Optional[str] = Column(String(10))
    notes: Optional[str] = Column(Text)
    tags: List[str] = Column(JSON, default=list)
    consent_allow_promo: bool = Column(Boolean, default=False)
    consent_allow_contact: bool = Column(Boolean, default=True)
    points: int = Column(Integer, default=0)
    total_visits: int = Column(Integer, default=0)
    lifetime_spend: float = Column(DECIMAL(10, 2), default=0)
    avg_ticket: float = Column(DECIMAL(10, 2), default=0)
    last_visit_at: Optional[datetime] = Column(DateTime)
    created_at: datetime = Column(DateTime, default=datetime.now)

    # Relationships
    transactions: List["Transaction"] = relationship("Transaction", back_populates="customer")


class Service(Base):
    """Service catalog table model.

    Attributes:
        id: Primary key.
        name: Service name, required.
        category: One of ``ServiceCategory``.
        price: List price.
        cogs: Cost of goods sold per service, default 0.
        duration_min: Duration in minutes, 0 for retail products.
        created_at: Creation time.
    """
    __tablename__ = "services"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    name: str = Column(String(100), nullable=False)
    category: str = Column(String(20), nullable=False)
    price: float = Column(DECIMAL(10, 2), nullable=False, default=0)
    cogs: float = Column(DECIMAL(10, 2), default=0)
    duration_min: int = Column(Integer, default=0)
    created_at: datetime = Column(DateTime, default=datetime.now)

    # Relationships
    appointments: List["Appointment"] = relationship("Appointment", back_populates="service")
    transaction_items: List["TransactionItem"] = relationship("TransactionItem", back_populates="service")


class Appointment(Base):
    """Appointment table model.

    Customer details are stored as free text so walk-in bookings do not
    need a customer record.
    """
    __tablename__ = "appointments"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    customer_name: str = Column(String(100), nullable=False)
    customer_phone: Optional[str] = Column(String(20))
    scheduled_at: datetime = Column(DateTime, nullable=False)
    service_id: Optional[int] = Column(Integer, ForeignKey("services.id"))
    staff_id: Optional[int] = Column(Integer, ForeignKey("staff.id"))
    deposit: float = Column(DECIMAL(10, 2), default=0)
    notes: Optional[str] = Column(Text)
    status: str = Column(String(20), default=AppointmentStatus.BOOKED.value)
    created_at: datetime = Column(DateTime, default=datetime.now)

    # Relationships
    service: Optional["Service"] = relationship("Service", back_populates="appointments")
    staff: Optional["Staff"] = relationship("Staff", back_populates="appointments")


class Transaction(Base):
    """Transaction (checkout) table model.

    Attributes:
        id: Primary key.
        total_amount: Sum of the line item prices.
        payment_method: One of ``PaymentMethod``.
        status: COMPLETED or VOID.
        customer_id: Linked customer, optional.
        customer_name_snapshot: Customer name at checkout time.
        note: Cashier note.
        voided_at / voided_by_staff_id / void_reason / void_note: Void audit trail.
        created_at: Checkout time.

    Relationships:
        items: Line items, deleted with the transaction.
        customer: Linked customer.
        voided_by: Manager who authorized the void.
        commission_logs: Commission ledger entries created at checkout.
    """
    __tablename__ = "transactions"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    total_amount: float = Column(DECIMAL(10, 2), nullable=False)
    payment_method: str = Column(String(20), nullable=False)
    status: str = Column(String(20), nullable=False, default=TransactionStatus.COMPLETED.value)
    customer_id: Optional[int] = Column(Integer, ForeignKey("customers.id"))
    customer_name_snapshot: Optional[str] = Column(String(100))
    note: Optional[str] = Column(Text)
    voided_at: Optional[datetime] = Column(DateTime)
    voided_by_staff_id: Optional[int] = Column(Integer, ForeignKey("staff.id"))
    void_reason: Optional[str] = Column(String(100))
    void_note: Optional[str] = Column(Text)
    created_at: datetime = Column(DateTime, default=datetime.now, index=True)

    # Relationships
    items: List["TransactionItem"] = relationship(
        "TransactionItem", back_populates="transaction",
        cascade="all, delete-orphan", order_by="TransactionItem.id"
    )
    customer: Optional["Customer"] = relationship("Customer", back_populates="transactions")
    voided_by: Optional["Staff"] = relationship(
        "Staff", foreign_keys=[voided_by_staff_id], back_populates="voided_transactions"
    )
    commission_logs: List["CommissionLog"] = relationship(
        "CommissionLog", back_populates="transaction", cascade="all, delete-orphan"
    )


class TransactionItem(Base):
    """Transaction line item table model.

    ``service_name`` and ``category`` are snapshots so reports stay
    correct after the catalog entry is edited or deleted.
    ``commission_amount`` is the sum of the commission logs of this item.
    """
    __tablename__ = "transaction_items"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    transaction_id: int = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    service_id: Optional[int] = Column(Integer, ForeignKey("services.id"))
    service_name: str = Column(String(100), nullable=False)
    category: Optional[str] = Column(String(20))
    price: float = Column(DECIMAL(10, 2), nullable=False)
    cost: float = Column(DECIMAL(10, 2), default=0)
    primary_staff_id: Optional[int] = Column(Integer, ForeignKey("staff.id"))
    assistant_staff_id: Optional[int] = Column(Integer, ForeignKey("staff.id"))
    commission_amount: float = Column(DECIMAL(10, 2), default=0)

    # Relationships
    transaction: "Transaction" = relationship("Transaction", back_populates="items")
    service: Optional["Service"] = relationship("Service", back_populates="transaction_items")
    primary_staff: Optional["Staff"] = relationship(
        "Staff", foreign_keys=[primary_staff_id], back_populates="primary_items"
    )
    assistant_staff: Optional["Staff"] = relationship(
        "Staff", foreign_keys=[assistant_staff_id], back_populates="assisted_items"
    )
    commission_logs: List["CommissionLog"] = relationship("CommissionLog", back_populates="transaction_item")


class CommissionLog(Base):
    """Commission ledger table model.

    One row per eligible staff member per line item, written once at
    checkout and never recomputed.
    """
    __tablename__ = "commission_logs"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    staff_id: Optional[int] = Column(Integer, ForeignKey("staff.id"))
    transaction_id: int = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    transaction_item_id: Optional[int] = Column(Integer, ForeignKey("transaction_items.id"))
    amount: float = Column(DECIMAL(10, 2), nullable=False)
    reason: str = Column(String(20), nullable=False)  # MAIN_SERVICE / ASSIST_SERVICE
    created_at: datetime = Column(DateTime, default=datetime.now)

    # Relationships
    staff: Optional["Staff"] = relationship("Staff", back_populates="commission_logs")
    transaction: "Transaction" = relationship("Transaction", back_populates="commission_logs")
    transaction_item: Optional["TransactionItem"] = relationship("TransactionItem", back_populates="commission_logs")
