"""Entity repositories - data access for the salon's master data.

Manages staff, customers and the service catalog. Each repository
inherits BaseCRUD for the generic operations and adds validation plus
domain-specific queries. Write methods validate their input and raise
``business.errors`` exceptions.
"""
from typing import Optional, List, Dict, Any, Sequence
from sqlalchemy import or_, func
from sqlalchemy.orm import Session
from loguru import logger

from business.errors import NotFoundError
from business.validators import (
    validate_staff_form, validate_service_form, validate_customer_form
)
from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .models import Staff, Customer, Service, Transaction
from .serializers import customer_to_dict


def _plain(data: Dict[str, Any]) -> Dict[str, Any]:
    """Replace enum members by their stored string values."""
    return {k: getattr(v, "value", v) for k, v in data.items()}


class StaffRepository(BaseCRUD):
    """Staff repository.

    Stylists, technicians, assistants and managers. The PIN doubles as the
    register login and as the authorization for voids.
    """

    FIELDS = ("name", "role", "pin", "avatar", "is_active")

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def list_all(self, active_only: bool = False,
                 session: Optional[Session] = None) -> List[Staff]:
        """Return staff ordered by name.

        Args:
            active_only: Only return active staff.
        """
        filters = {"is_active": True} if active_only else None
        return self.get_all(
            Staff, filters=filters, order_by=Staff.name, session=session
        )

    def get(self, staff_id: int,
            session: Optional[Session] = None) -> Staff:
        """Fetch a staff member or raise NotFoundError."""
        staff = self.get_by_id(Staff, staff_id, session=session)
        if staff is None:
            raise NotFoundError.for_record("Staff", staff_id)
        return staff

    def create_staff(self, data: Dict[str, Any],
                     session: Optional[Session] = None) -> Staff:
        """Create a staff member.

        Args:
            data: ``name``, ``role``, ``pin`` (required), ``avatar`` (optional).

        Returns:
            The new Staff object.

        Raises:
            ValidationError: A form rule failed.
        """
        data = _plain(data)
        validate_staff_form(data)
        values = {k: v for k, v in data.items() if k in self.FIELDS}
        values["name"] = values["name"].strip()
        staff = self.create(Staff, session=session, **values)
        logger.info(f"Created staff {staff.id}: {staff.name} ({staff.role})")
        return staff

    def update_staff(self, staff_id: int, data: Dict[str, Any],
                     session: Optional[Session] = None) -> Staff:
        """Update the given fields of a staff member.

        Raises:
            ValidationError: A form rule failed.
            NotFoundError: No staff member with this id.
        """
        data = _plain(data)
        validate_staff_form(data, partial=True)
        values = {k: v for k, v in data.items() if k in self.FIELDS}
        if "name" in values:
            values["name"] = values["name"].strip()
        staff = self.update_by_id(Staff, staff_id, session=session, **values)
        if staff is None:
            raise NotFoundError.for_record("Staff", staff_id)
        return staff

    def delete_staff(self, staff_id: int,
                     session: Optional[Session] = None) -> None:
        """Delete a staff member; historical items keep their snapshot rows.

        Raises:
            NotFoundError: No staff member with this id.
        """
        if not self.delete_by_id(Staff, staff_id, session=session):
            raise NotFoundError.for_record("Staff", staff_id)
        logger.info(f"Deleted staff {staff_id}")

    def find_by_pin(self, pin: Optional[str],
                    roles: Optional[Sequence[str]] = None,
                    session: Optional[Session] = None) -> Optional[Staff]:
        """Find the staff member owning a PIN.

        Args:
            pin: 4-digit PIN.
            roles: Restrict the match to these roles (optional).

        Returns:
            The matching Staff object, or None.
        """
        if not pin:
            return None

        def _query(sess):
            query = sess.query(Staff).filter(Staff.pin == str(pin))
            if roles:
                query = query.filter(Staff.role.in_(list(roles)))
            return query.first()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)


class CustomerRepository(BaseCRUD):
    """Customer repository.

    Contact data is edited here; the visit/spend aggregates are only
    changed by the checkout and void flows in TransactionRepository.
    """

    FIELDS = (
        "full_name", "phone", "email", "line_id", "instagram", "birthday",
        "gender", "preferred_language", "notes", "tags",
        "consent_allow_promo", "consent_allow_contact",
    )

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def _values(self, data: Dict[str, Any]) -> Dict[str, Any]:
        values = {k: v for k, v in _plain(data).items() if k in self.FIELDS}
        if "full_name" in values:
            values["full_name"] = values["full_name"].strip()
        if values.get("birthday"):
            values["birthday"] = self._parse_date(values["birthday"], "Birthday")
        elif "birthday" in values:
            values["birthday"] = None
        return values

    def list_with_counts(self, keyword: Optional[str] = None
                         ) -> List[Dict[str, Any]]:
        """Return customers ordered by name, each with its transaction count.

        Args:
            keyword: Optional name/phone search keyword.

        Returns:
            Customer dicts with an extra ``transaction_count`` key.
        """
        with self._get_session() as sess:
            counts = (
                sess.query(
                    Transaction.customer_id,
                    func.count(Transaction.id).label("n")
                )
                .group_by(Transaction.customer_id)
                .subquery()
            )
            query = (
                sess.query(Customer, func.coalesce(counts.c.n, 0))
                .outerjoin(counts, counts.c.customer_id == Customer.id)
            )
            if keyword:
                query = query.filter(
                    or_(
                        Customer.full_name.contains(keyword),
                        Customer.phone.contains(keyword)
                    )
                )
            rows = query.order_by(Customer.full_name).all()
            result = []
            for customer, tx_count in rows:
                data = customer_to_dict(customer)
                data["transaction_count"] = tx_count
                result.append(data)
            return result

    def get(self, customer_id: int,
            session: Optional[Session] = None) -> Customer:
        """Fetch a customer or raise NotFoundError."""
        customer = self.get_by_id(Customer, customer_id, session=session)
        if customer is None:
            raise NotFoundError.for_record("Customer", customer_id)
        return customer

    def create_customer(self, data: Dict[str, Any],
                        session: Optional[Session] = None) -> Customer:
        """Create a customer with zeroed aggregates.

        Raises:
            ValidationError: A form rule failed.
        """
        validate_customer_form(_plain(data))
        customer = self.create(
            Customer, session=session, points=0, total_visits=0,
            lifetime_spend=0, avg_ticket=0, **self._values(data)
        )
        logger.info(f"Created customer {customer.id}: {customer.full_name}")
        return customer

    def update_customer(self, customer_id: int, data: Dict[str, Any],
                        session: Optional[Session] = None) -> Customer:
        """Update the given contact fields of a customer.

        Raises:
            ValidationError: A form rule failed.
            NotFoundError: No customer with this id.
        """
        validate_customer_form(_plain(data), partial=True)
        customer = self.update_by_id(
            Customer, customer_id, session=session, **self._values(data)
        )
        if customer is None:
            raise NotFoundError.for_record("Customer", customer_id)
        return customer

    def delete_customer(self, customer_id: int,
                        session: Optional[Session] = None) -> None:
        """Delete a customer; their transactions keep the name snapshot.

        Raises:
            NotFoundError: No customer with this id.
        """
        if not self.delete_by_id(Customer, customer_id, session=session):
            raise NotFoundError.for_record("Customer", customer_id)
        logger.info(f"Deleted customer {customer_id}")


class ServiceRepository(BaseCRUD):
    """Service catalog repository (hair, nail, lash services and retail products)."""

    FIELDS = ("name", "category", "price", "cogs", "duration_min")

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def _values(self, data: Dict[str, Any]) -> Dict[str, Any]:
        values = {k: v for k, v in _plain(data).items() if k in self.FIELDS}
        if "name" in values:
            values["name"] = values["name"].strip()
        for key in ("price", "cogs"):
            if key in values:
                values[key] = float(values[key] or 0)
        if "duration_min" in values:
            values["duration_min"] = int(values["duration_min"] or 0)
        return values

    def list_all(self, session: Optional[Session] = None) -> List[Service]:
        """Return the catalog ordered by category, then name."""
        return self.get_all(
            Service, order_by=[Service.category, Service.name],
            session=session
        )

    def get_by_category(self, category: str,
                        session: Optional[Session] = None) -> List[Service]:
        """Return the services of one category ordered by name."""
        return self.get_all(
            Service, filters={"category": getattr(category, "value", category)},
            order_by=Service.name, session=session
        )

    def get(self, service_id: int,
            session: Optional[Session] = None) -> Service:
        """Fetch a service or raise NotFoundError."""
        service = self.get_by_id(Service, service_id, session=session)
        if service is None:
            raise NotFoundError.for_record("Service", service_id)
        return service

    def create_service(self, data: Dict[str, Any],
                       session: Optional[Session] = None) -> Service:
        """Add a service to the catalog.

        Raises:
            ValidationError: A form rule failed.
        """
        validate_service_form(_plain(data))
        values = self._values(data)
        values.setdefault("cogs", 0.0)
        values.setdefault("duration_min", 0)
        service = self.create(Service, session=session, **values)
        logger.info(f"Created service {service.id}: {service.name}")
        return service

    def update_service(self, service_id: int, data: Dict[str, Any],
                       session: Optional[Session] = None) -> Service:
        """Update the given fields of a service.

        Raises:
            ValidationError: A form rule failed.
            NotFoundError: No service with this id.
        """
        validate_service_form(_plain(data), partial=True)
        service = self.update_by_id(
            Service, service_id, session=session, **self._values(data)
        )
        if service is None:
            raise NotFoundError.for_record("Service", service_id)
        return service

    def delete_service(self, service_id: int,
                       session: Optional[Session] = None) -> None:
        """Remove a service; past line items keep their name/category snapshot.

        Raises:
            NotFoundError: No service with this id.
        """
        if not self.delete_by_id(Service, service_id, session=session):
            raise NotFoundError.for_record("Service", service_id)
        logger.info(f"Deleted service {service_id}")
