"""Shared fixtures.

Every test gets a fresh DatabaseManager bound to a temp-file SQLite
database, optionally pre-loaded with a small salon (staff, services and a
customer).
"""
import os
import shutil
import tempfile
from datetime import datetime

import pytest

from database import DatabaseManager
from database.models import Transaction


@pytest.fixture
def temp_db():
    """Yield a fresh DatabaseManager bound to a temp SQLite database."""
    temp_dir = tempfile.mkdtemp(prefix="salon-tests-")
    db_path = os.path.join(temp_dir, "test.db")
    manager = DatabaseManager(database_url=f"sqlite:///{db_path}")
    manager.create_tables()

    try:
        yield manager
    finally:
        manager.close()
        shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def salon(temp_db):
    """A small salon: one staff member per role, the seed catalog and a customer.

    Returns a dict of ids keyed by short names:
    ``stylist``, ``assistant``, ``technician``, ``manager``, ``admin``,
    ``haircut`` (HAIR 50), ``manicure`` (NAIL 40), ``lash`` (LASH 80),
    ``shampoo`` (PRODUCT 25) and ``customer``.
    """
    db = temp_db
    ids = {
        "stylist": db.staff.create_staff(
            {"name": "Alice", "role": "STYLIST", "pin": "1111"}).id,
        "assistant": db.staff.create_staff(
            {"name": "Bob", "role": "ASSISTANT", "pin": "2222"}).id,
        "technician": db.staff.create_staff(
            {"name": "Nina", "role": "TECHNICIAN", "pin": "4444"}).id,
        "manager": db.staff.create_staff(
            {"name": "Maria", "role": "MANAGER", "pin": "5555"}).id,
        "admin": db.staff.create_staff(
            {"name": "Charlie", "role": "ADMIN", "pin": "3333"}).id,
        "haircut": db.services.create_service(
            {"name": "Women's Haircut", "category": "HAIR", "price": 50, "duration_min": 60}).id,
        "manicure": db.services.create_service(
            {"name": "Gel Manicure", "category": "NAIL", "price": 40, "duration_min": 60}).id,
        "lash": db.services.create_service(
            {"name": "Lash Lift", "category": "LASH", "price": 80, "duration_min": 60}).id,
        "shampoo": db.services.create_service(
            {"name": "Shampoo Bottle", "category": "PRODUCT", "price": 25}).id,
        "customer": db.customers.create_customer(
            {"full_name": "Jane Doe", "phone": "0812345678"}).id,
    }
    return ids


def set_created_at(db: DatabaseManager, transaction_id: int,
                   created_at: datetime) -> None:
    """Helper: move a transaction to another point in time."""
    with db.get_session() as session:
        tx = session.get(Transaction, transaction_id)
        tx.created_at = created_at
        session.commit()
