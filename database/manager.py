"""Database manager - the single facade of the database package.

DatabaseManager composes every repository and offers two levels of API:

1. **Repository access** (fine grained):
   ``db.staff``, ``db.customers``, ``db.transactions``... return ORM
   objects or dicts, for callers that need full control.

2. **Convenience methods** (coarse grained):
   flat methods such as ``checkout()``, ``void_transaction()`` and
   ``daily_report()`` returning dicts, used by the web layer.
"""
from typing import Optional, List, Dict, Any
from sqlalchemy.orm import Session
from loguru import logger

from config.business_config import business_config
from .connection import DatabaseConnection
from .entity_repos import StaffRepository, CustomerRepository, ServiceRepository
from .business_repos import AppointmentRepository, TransactionRepository
from .report_repos import ReportRepository
from .models import Staff, Service


class DatabaseManager:
    """Database manager facade.

    Attributes:
        conn: Database connection manager.
        staff: Staff repository.
        customers: Customer repository.
        services: Service catalog repository.
        appointments: Appointment repository.
        transactions: Checkout ledger repository.
        reports: Report repository.

    Example::

        db = DatabaseManager("sqlite:///data/salon.db")
        db.create_tables()
        db.seed()

        # Repository access
        stylists = db.staff.list_all(active_only=True)

        # Convenience methods
        report = db.daily_report("2024-01-28")
    """

    def __init__(self, database_url: Optional[str] = None) -> None:
        """Initialize the manager.

        Args:
            database_url: Connection URL; falls back to ``settings.database_url``.
        """
        self.conn = DatabaseConnection(database_url)

        # Master data
        self.staff = StaffRepository(self.conn)
        self.customers = CustomerRepository(self.conn)
        self.services = ServiceRepository(self.conn)

        # Operational records
        self.appointments = AppointmentRepository(
            self.conn, self.staff, self.services
        )
        self.transactions = TransactionRepository(
            self.conn, self.staff, self.customers, self.services
        )

        # Reports
        self.reports = ReportRepository(self.conn, self.transactions)

    # ================================================================
    # Infrastructure
    # ================================================================

    def create_tables(self) -> None:
        """Create every table (idempotent)."""
        self.conn.create_tables()

    def get_session(self) -> Session:
        return self.conn.get_session()

    @property
    def database_url(self) -> str:
        return self.conn.database_url

    @property
    def engine(self):
        return self.conn.engine

    def ping(self) -> bool:
        """Return True when the database is reachable."""
        return self.conn.ping()

    def close(self) -> None:
        """Dispose the engine and release pooled connections."""
        self.conn.close()

    def seed(self) -> Dict[str, int]:
        """Insert the default staff and service catalog.

        Staff are only seeded into an empty staff table and services only
        into an empty catalog, so running it twice changes nothing.

        Returns:
            ``{"staff": n, "services": m}`` - number of rows inserted.
        """
        created = {"staff": 0, "services": 0}
        with self.get_session() as sess:
            if self.staff.count(Staff, session=sess) == 0:
                for data in business_config.get_seed_staff():
                    self.staff.create_staff(data, session=sess)
                    created["staff"] += 1

            if self.services.count(Service, session=sess) == 0:
                for data in business_config.get_service_types():
                    self.services.create_service(data, session=sess)
                    created["services"] += 1

            sess.commit()

        logger.info(
            f"Seed finished: {created['staff']} staff, "
            f"{created['services']} services created"
        )
        return created

    # ================================================================
    # Convenience methods
    # ================================================================

    def checkout(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a transaction from a cart, see TransactionRepository.create_transaction."""
        return self.transactions.create_transaction(data)

    def void_transaction(self, transaction_id: int, pin: Optional[str],
                         reason: Optional[str],
                         note: Optional[str] = None) -> Dict[str, Any]:
        """Void a transaction, see TransactionRepository.void_transaction."""
        return self.transactions.void_transaction(
            transaction_id, pin, reason, note
        )

    def get_void_reasons(self) -> List[str]:
        """Reasons offered when voiding a transaction."""
        return business_config.get_void_reasons()

    def daily_report(self, target_date: Optional[Any] = None,
                     start_date: Optional[Any] = None,
                     end_date: Optional[Any] = None) -> Dict[str, Any]:
        return self.reports.daily_report(target_date, start_date, end_date)

    def transaction_history(self, start_date: Optional[Any] = None,
                            end_date: Optional[Any] = None,
                            payment_method: Optional[str] = None
                            ) -> Dict[str, Any]:
        return self.reports.transaction_history(
            start_date, end_date, payment_method
        )

    def staff_commissions(self, start_date: Optional[Any] = None,
                          end_date: Optional[Any] = None
                          ) -> List[Dict[str, Any]]:
        return self.reports.staff_commission_summary(start_date, end_date)

    def dashboard(self) -> Dict[str, Any]:
        return self.reports.dashboard()
