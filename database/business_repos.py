"""Business record repositories - appointments and the checkout ledger.

Manages the records produced by day-to-day operations: appointments,
transactions with their line items, and the commission ledger.

The transaction repository owns the two multi-row writes of the system:
checkout (transaction + items + commission logs + customer aggregates) and
void (status change + customer aggregate rollback). Each commits exactly
once, so a failure leaves the database untouched.
"""
from typing import Optional, List, Dict, Any
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from sqlalchemy.orm import Session, selectinload
from loguru import logger

from business.commission import calculate_commission
from business.constants import (
    AppointmentStatus, CommissionReason, PaymentMethod, TransactionStatus,
    VOID_AUTHORIZED_ROLES
)
from business.customer_stats import record_visit, revert_visit
from business.errors import (
    InvalidOperationError, NotFoundError, PermissionDeniedError,
    ValidationError
)
from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .entity_repos import StaffRepository, CustomerRepository, ServiceRepository
from .models import (
    Appointment, Transaction, TransactionItem, CommissionLog
)
from .serializers import appointment_to_dict, transaction_to_dict, money

_APPOINTMENT_STATUSES = {s.value for s in AppointmentStatus}
_PAYMENT_METHODS = {m.value for m in PaymentMethod}
_CENT = Decimal("0.01")


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def day_bounds(start: Optional[date], end: Optional[date]):
    """Convert an inclusive date range into ``[start, end)`` datetimes."""
    lower = datetime.combine(start, time.min) if start else None
    upper = datetime.combine(end + timedelta(days=1), time.min) if end else None
    return lower, upper


class AppointmentRepository(BaseCRUD):
    """Appointment repository.

    Bookings reference a catalog service and, optionally, a staff member.
    The customer is stored as free text (name + phone).
    """

    def __init__(self, conn: DatabaseConnection,
                 staff_repo: StaffRepository,
                 service_repo: ServiceRepository) -> None:
        super().__init__(conn)
        self._staff = staff_repo
        self._services = service_repo

    @staticmethod
    def _month_bounds(month: str):
        try:
            start = datetime.strptime(month, "%Y-%m")
        except ValueError:
            raise ValidationError(f"Invalid month format: {month}, expected YYYY-MM")
        if start.month == 12:
            end = start.replace(year=start.year + 1, month=1)
        else:
            end = start.replace(month=start.month + 1)
        return start, end

    def list_appointments(self, month: Optional[str] = None,
                          day: Optional[Any] = None) -> List[Dict[str, Any]]:
        """List appointments ordered by scheduled time.

        Args:
            month: Restrict to a ``YYYY-MM`` month (optional).
            day: Restrict to one day, ``date`` or ``YYYY-MM-DD`` (optional).

        Returns:
            Appointment dicts with nested service and staff.
        """
        with self._get_session() as sess:
            query = sess.query(Appointment).options(
                selectinload(Appointment.service),
                selectinload(Appointment.staff),
            )
            if month:
                start, end = self._month_bounds(month)
                query = query.filter(
                    Appointment.scheduled_at >= start,
                    Appointment.scheduled_at < end
                )
            if day:
                target = self._parse_date(day, "Day")
                start, end = day_bounds(target, target)
                query = query.filter(
                    Appointment.scheduled_at >= start,
                    Appointment.scheduled_at < end
                )
            appointments = query.order_by(Appointment.scheduled_at).all()
            return [appointment_to_dict(a) for a in appointments]

    def get_appointment(self, appointment_id: int) -> Dict[str, Any]:
        """Fetch one appointment.

        Raises:
            NotFoundError: No appointment with this id.
        """
        with self._get_session() as sess:
            appointment = sess.get(Appointment, appointment_id)
            if appointment is None:
                raise NotFoundError.for_record("Appointment", appointment_id)
            return appointment_to_dict(appointment)

    def _apply(self, sess: Session, appointment: Appointment,
               data: Dict[str, Any]) -> None:
        if "customer_name" in data:
            name = (data["customer_name"] or "").strip()
            if not name:
                raise ValidationError("Customer name is required.")
            appointment.customer_name = name
        if "customer_phone" in data:
            appointment.customer_phone = data["customer_phone"]
        if "scheduled_at" in data:
            appointment.scheduled_at = self._parse_datetime(
                data["scheduled_at"], "Scheduled time"
            )
        if "service_id" in data:
            if data["service_id"] is None:
                raise ValidationError("Service is required.")
            appointment.service_id = self._services.get(
                data["service_id"], session=sess
            ).id
        if "staff_id" in data:
            staff_id = data["staff_id"]
            appointment.staff_id = (
                self._staff.get(staff_id, session=sess).id if staff_id else None
            )
        if "deposit" in data:
            deposit = float(data["deposit"] or 0)
            if deposit < 0:
                raise ValidationError("Deposit cannot be negative.")
            appointment.deposit = deposit
        if "notes" in data:
            appointment.notes = data["notes"] or None
        if "status" in data:
            status = _enum_value(data["status"])
            if status not in _APPOINTMENT_STATUSES:
                raise ValidationError(f"Unknown appointment status: {status}")
            appointment.status = status

    def create_appointment(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Book an appointment.

        Args:
            data: ``customer_name``, ``scheduled_at`` and ``service_id``
                (required); ``customer_phone``, ``staff_id``, ``deposit``,
                ``notes``, ``status`` (optional).

        Returns:
            The new appointment dict.

        Raises:
            ValidationError: Missing or malformed field.
            NotFoundError: Unknown service or staff id.
        """
        for required in ("customer_name", "scheduled_at", "service_id"):
            if data.get(required) in (None, ""):
                raise ValidationError(f"{required} is required.")

        with self._get_session() as sess:
            appointment = Appointment(
                deposit=0, status=AppointmentStatus.BOOKED.value
            )
            self._apply(sess, appointment, data)
            sess.add(appointment)
            sess.commit()
            logger.info(
                f"Booked appointment {appointment.id} for "
                f"{appointment.customer_name} at {appointment.scheduled_at}"
            )
            return appointment_to_dict(appointment)

    def update_appointment(self, appointment_id: int,
                           data: Dict[str, Any]) -> Dict[str, Any]:
        """Update the given fields of an appointment (including its status).

        Raises:
            ValidationError: Malformed field.
            NotFoundError: Unknown appointment, service or staff id.
        """
        with self._get_session() as sess:
            appointment = sess.get(Appointment, appointment_id)
            if appointment is None:
                raise NotFoundError.for_record("Appointment", appointment_id)
            self._apply(sess, appointment, data)
            sess.commit()
            return appointment_to_dict(appointment)

    def delete_appointment(self, appointment_id: int) -> None:
        """Delete an appointment.

        Raises:
            NotFoundError: No appointment with this id.
        """
        if not self.delete_by_id(Appointment, appointment_id):
            raise NotFoundError.for_record("Appointment", appointment_id)
        logger.info(f"Deleted appointment {appointment_id}")


class TransactionRepository(BaseCRUD):
    """Transaction repository - checkout, void and history queries.

    Commission is credited once per line item per eligible staff member at
    checkout and stored in the commission ledger; it is never recomputed.
    """

    def __init__(self, conn: DatabaseConnection,
                 staff_repo: StaffRepository,
                 customer_repo: CustomerRepository,
                 service_repo: ServiceRepository) -> None:
        super().__init__(conn)
        self._staff = staff_repo
        self._customers = customer_repo
        self._services = service_repo

    def _build_item(self, sess: Session, tx: Transaction,
                    line: Dict[str, Any]) -> TransactionItem:
        """Create one line item and its commission logs."""
        if line.get("service_id") is None:
            raise ValidationError("Every cart item needs a service_id.")
        service = self._services.get(line["service_id"], session=sess)

        price = line.get("price")
        if price is None:
            price = service.price
        try:
            # Stored as DECIMAL(10,2); the total is summed from the stored value
            price = Decimal(str(price)).quantize(_CENT, rounding=ROUND_HALF_UP)
        except (InvalidOperation, ValueError):
            raise ValidationError(f"Invalid item price: {price}")
        if price < 0:
            raise ValidationError("Item price cannot be negative.")

        main_id = line.get("main_staff_id")
        assistant_id = line.get("assistant_id")
        if assistant_id == main_id:
            assistant_id = None
        main = self._staff.get(main_id, session=sess) if main_id else None
        assistant = (
            self._staff.get(assistant_id, session=sess) if assistant_id else None
        )
        # An assistant without a main performer works the service solo
        if main is None and assistant is not None:
            main, assistant = assistant, None

        item = TransactionItem(
            service_id=service.id,
            service_name=service.name,
            category=service.category,
            price=price,
            cost=float(service.cogs or 0),
            primary_staff=main,
            assistant_staff=assistant,
        )
        tx.items.append(item)

        commission_total = 0.0
        for staff, is_assistant, reason in (
            (main, False, CommissionReason.MAIN_SERVICE),
            (assistant, True, CommissionReason.ASSIST_SERVICE),
        ):
            if staff is None:
                continue
            amount = round(
                calculate_commission(float(price), service.category, staff.role, is_assistant), 2
            )
            if amount <= 0:
                continue
            tx.commission_logs.append(CommissionLog(
                staff=staff,
                transaction_item=item,
                amount=amount,
                reason=reason.value,
            ))
            commission_total += amount
        item.commission_amount = round(commission_total, 2)
        return item

    def create_transaction(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Check out a cart.

        Args:
            data: Transaction data with the following keys:
                - items: list of ``{service_id, price?, main_staff_id?, assistant_id?}`` (required)
                - payment_method: one of PaymentMethod (required)
                - customer_id: linked customer (optional)
                - customer_name_snapshot: name shown on the receipt (optional,
                  defaults to the customer's name)
                - note: cashier note (optional)

        Returns:
            The created transaction dict with its items.

        Raises:
            ValidationError: Empty cart, unknown payment method or negative price.
            NotFoundError: Unknown service, staff or customer id.
        """
        lines = data.get("items") or []
        if not lines:
            raise ValidationError("Cart is empty.")

        payment_method = _enum_value(data.get("payment_method"))
        if payment_method not in _PAYMENT_METHODS:
            raise ValidationError(f"Unknown payment method: {payment_method}")

        with self._get_session() as sess:
            customer = None
            if data.get("customer_id") is not None:
                customer = self._customers.get(data["customer_id"], session=sess)

            tx = Transaction(
                total_amount=0,
                payment_method=payment_method,
                status=TransactionStatus.COMPLETED.value,
                customer=customer,
                customer_name_snapshot=(
                    data.get("customer_name_snapshot")
                    or (customer.full_name if customer else None)
                ),
                note=data.get("note"),
            )
            sess.add(tx)

            total = Decimal("0.00")
            for line in lines:
                total += self._build_item(sess, tx, line).price
            tx.total_amount = total

            if customer is not None:
                stats = record_visit(
                    customer.total_visits, money(customer.lifetime_spend), tx.total_amount
                )
                customer.total_visits = stats.total_visits
                customer.lifetime_spend = stats.lifetime_spend
                customer.avg_ticket = stats.avg_ticket
                customer.last_visit_at = datetime.now()

            sess.commit()
            logger.info(
                f"Transaction {tx.id} completed: {tx.total_amount:.2f} "
                f"via {payment_method}, {len(lines)} item(s)"
            )
            return transaction_to_dict(tx)

    def void_transaction(self, transaction_id: int, pin: Optional[str],
                         reason: Optional[str],
                         note: Optional[str] = None) -> Dict[str, Any]:
        """Void a completed transaction and roll back the customer's aggregates.

        The status change and the customer rollback commit together.

        Args:
            transaction_id: Transaction to void.
            pin: PIN of a MANAGER or ADMIN staff member.
            reason: Void reason (required).
            note: Free text note (optional).

        Returns:
            The voided transaction dict.

        Raises:
            ValidationError: Missing reason.
            PermissionDeniedError: PIN does not belong to a manager/admin.
            NotFoundError: Unknown transaction.
            InvalidOperationError: Transaction already voided.
        """
        if not reason or not reason.strip():
            raise ValidationError("Void reason is required.")

        with self._get_session() as sess:
            manager = self._staff.find_by_pin(
                pin, roles=VOID_AUTHORIZED_ROLES, session=sess
            )
            if manager is None:
                raise PermissionDeniedError("Invalid PIN or insufficient permission.")

            tx = sess.get(Transaction, transaction_id)
            if tx is None:
                raise NotFoundError.for_record("Transaction", transaction_id)
            if tx.status == TransactionStatus.VOID.value:
                raise InvalidOperationError("Transaction is already voided.")

            tx.status = TransactionStatus.VOID.value
            tx.voided_at = datetime.now()
            tx.voided_by_staff_id = manager.id
            tx.void_reason = reason.strip()
            tx.void_note = note

            customer = tx.customer
            if customer is not None:
                stats = revert_visit(
                    customer.total_visits, money(customer.lifetime_spend),
                    money(tx.total_amount)
                )
                customer.total_visits = stats.total_visits
                customer.lifetime_spend = stats.lifetime_spend
                customer.avg_ticket = stats.avg_ticket

            sess.commit()
            logger.info(
                f"Transaction {transaction_id} voided by staff {manager.id}: {tx.void_reason}"
            )
            return transaction_to_dict(tx)

    def get_transaction(self, transaction_id: int) -> Dict[str, Any]:
        """Fetch one transaction with its items.

        Raises:
            NotFoundError: No transaction with this id.
        """
        with self._get_session() as sess:
            tx = sess.get(Transaction, transaction_id)
            if tx is None:
                raise NotFoundError.for_record("Transaction", transaction_id)
            return transaction_to_dict(tx)

    def list_transactions(self, start_date: Optional[Any] = None,
                          end_date: Optional[Any] = None,
                          payment_method: Optional[str] = None,
                          status: Optional[str] = None,
                          limit: Optional[int] = None,
                          session: Optional[Session] = None
                          ) -> List[Dict[str, Any]]:
        """List transactions, newest first, with nested items.

        Args:
            start_date: First day included (``date`` or ``YYYY-MM-DD``).
            end_date: Last day included.
            payment_method: Payment method filter; ``ALL`` or None for every method.
            status: Status filter (optional).
            limit: Maximum number of transactions.

        Returns:
            Transaction dicts.
        """
        start = self._parse_date(start_date, "Start date") if start_date else None
        end = self._parse_date(end_date, "End date") if end_date else None
        lower, upper = day_bounds(start, end)
        method = _enum_value(payment_method)
        status = _enum_value(status)

        def _query(sess):
            query = sess.query(Transaction).options(
                selectinload(Transaction.items).selectinload(TransactionItem.primary_staff),
                selectinload(Transaction.items).selectinload(TransactionItem.assistant_staff),
                selectinload(Transaction.customer),
            )
            if lower is not None:
                query = query.filter(Transaction.created_at >= lower)
            if upper is not None:
                query = query.filter(Transaction.created_at < upper)
            if method and method != "ALL":
                query = query.filter(Transaction.payment_method == method)
            if status:
                query = query.filter(Transaction.status == status)
            query = query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
            if limit:
                query = query.limit(limit)
            return [transaction_to_dict(tx) for tx in query.all()]

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)
