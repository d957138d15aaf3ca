"""Salon back-office JSON API.

``create_app(db_manager)`` builds the FastAPI application. Every route is
a thin handler: it parses the request, calls the DatabaseManager and
returns plain dicts.

Routes:
- GET  /health                          → liveness + database check
- GET|POST /api/appointments            → list (``?month=`` / ``?date=``) / book
- GET|PUT|DELETE /api/appointments/{id} → fetch / update / delete
- GET|POST /api/customers               → list (``?q=``) / create
- GET|PATCH|DELETE /api/customers/{id}  → fetch / update / delete
- GET|POST /api/services                → catalog / create
- PUT|DELETE /api/services/{id}         → update / delete
- GET|POST /api/staff                   → list / create
- GET  /api/staff/commissions           → commission summary
- PUT|DELETE /api/staff/{id}            → update / delete
- POST /api/transactions                → checkout
- GET  /api/transactions/list           → history + revenue summary
- GET  /api/transactions/void-reasons   → configured void reasons
- GET  /api/transactions/{id}           → fetch one transaction with items
- POST /api/transactions/{id}/void      → void
- GET  /api/reports/daily               → daily / period sales report
- GET  /api/dashboard                   → dashboard metrics
- POST /api/seed                        → seed default staff and services

Errors are returned as ``{"error": message}``: 400 for validation and
invalid operations, 403 for a rejected PIN, 404 for unknown records and
500 for anything unexpected.
"""
from typing import Any, Callable, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from business.errors import SalonError
from database import DatabaseManager
from database.serializers import (
    customer_to_dict, service_to_dict, staff_to_dict
)
from interface.web.schemas import (
    AppointmentCreate, AppointmentUpdate, CheckoutRequest, CustomerCreate,
    CustomerUpdate, ServiceCreate, ServiceUpdate, StaffCreate, StaffUpdate,
    VoidRequest,
)


def get_db(request: Request) -> DatabaseManager:
    """Dependency returning the DatabaseManager attached to the app."""
    return request.app.state.db


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _call(action: str, func: Callable[..., Any], *args, **kwargs) -> Any:
    """Run a database call and turn failures into error responses.

    Args:
        action: What the handler does, used in the 500 message
            (e.g. ``"create customer"``).
        func: Callable to run.

    Returns:
        The callable's result, or a JSONResponse describing the failure.
    """
    try:
        return func(*args, **kwargs)
    except SalonError as e:
        logger.warning(f"Failed to {action}: {e.message}")
        return _error(e.status_code, e.message)
    except Exception as e:
        logger.error(f"Failed to {action}: {e}")
        return _error(500, f"Failed to {action}")


def _first_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
    return f"{location}: {err.get('msg')}" if location else str(err.get("msg"))


def create_app(db_manager: DatabaseManager) -> FastAPI:
    """Build the FastAPI application around a DatabaseManager.

    Args:
        db_manager: Database facade used by every route.

    Returns:
        The configured FastAPI application.
    """
    app = FastAPI(
        title="Salon POS",
        description="Salon point-of-sale and back-office API",
        version="1.0.0",
    )
    app.state.db = db_manager

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request,
                                       exc: RequestValidationError):
        return _error(400, _first_error(exc))

    # ==================== Health ====================

    @app.get("/health")
    def health_check(db: DatabaseManager = Depends(get_db)):
        """Liveness and database connectivity."""
        try:
            db_connected = db.ping()
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            db_connected = False
        return {"status": "ok", "db_connected": db_connected}

    # ==================== Appointments ====================

    @app.get("/api/appointments")
    def list_appointments(
        month: Optional[str] = Query(default=None),
        day: Optional[str] = Query(default=None, alias="date"),
        db: DatabaseManager = Depends(get_db),
    ):
        return _call(
            "fetch appointments", db.appointments.list_appointments,
            month=month, day=day,
        )

    @app.post("/api/appointments")
    def create_appointment(payload: AppointmentCreate,
                           db: DatabaseManager = Depends(get_db)):
        return _call(
            "create appointment", db.appointments.create_appointment,
            payload.model_dump(),
        )

    @app.get("/api/appointments/{appointment_id}")
    def get_appointment(appointment_id: int,
                        db: DatabaseManager = Depends(get_db)):
        return _call(
            "fetch appointment", db.appointments.get_appointment, appointment_id
        )

    @app.put("/api/appointments/{appointment_id}")
    def update_appointment(appointment_id: int, payload: AppointmentUpdate,
                           db: DatabaseManager = Depends(get_db)):
        return _call(
            "update appointment", db.appointments.update_appointment,
            appointment_id, payload.model_dump(exclude_unset=True),
        )

    @app.delete("/api/appointments/{appointment_id}")
    def delete_appointment(appointment_id: int,
                           db: DatabaseManager = Depends(get_db)):
        def _delete():
            db.appointments.delete_appointment(appointment_id)
            return {"success": True}
        return _call("delete appointment", _delete)

    # ==================== Customers ====================

    @app.get("/api/customers")
    def list_customers(q: Optional[str] = Query(default=None),
                       db: DatabaseManager = Depends(get_db)):
        return _call(
            "fetch customers", db.customers.list_with_counts, q or None
        )

    @app.post("/api/customers")
    def create_customer(payload: CustomerCreate,
                        db: DatabaseManager = Depends(get_db)):
        return _call(
            "create customer",
            lambda: customer_to_dict(
                db.customers.create_customer(payload.model_dump())
            ),
        )

    @app.get("/api/customers/{customer_id}")
    def get_customer(customer_id: int, db: DatabaseManager = Depends(get_db)):
        return _call(
            "fetch customer",
            lambda: customer_to_dict(db.customers.get(customer_id)),
        )

    @app.patch("/api/customers/{customer_id}")
    def update_customer(customer_id: int, payload: CustomerUpdate,
                        db: DatabaseManager = Depends(get_db)):
        return _call(
            "update customer",
            lambda: customer_to_dict(db.customers.update_customer(
                customer_id, payload.model_dump(exclude_unset=True)
            )),
        )

    @app.delete("/api/customers/{customer_id}")
    def delete_customer(customer_id: int,
                        db: DatabaseManager = Depends(get_db)):
        def _delete():
            db.customers.delete_customer(customer_id)
            return {"success": True}
        return _call("delete customer", _delete)

    # ==================== Services ====================

    @app.get("/api/services")
    def list_services(db: DatabaseManager = Depends(get_db)):
        return _call(
            "fetch services",
            lambda: [service_to_dict(s) for s in db.services.list_all()],
        )

    @app.post("/api/services")
    def create_service(payload: ServiceCreate,
                       db: DatabaseManager = Depends(get_db)):
        return _call(
            "create service",
            lambda: service_to_dict(
                db.services.create_service(payload.model_dump(exclude_none=True))
            ),
        )

    @app.put("/api/services/{service_id}")
    def update_service(service_id: int, payload: ServiceUpdate,
                       db: DatabaseManager = Depends(get_db)):
        return _call(
            "update service",
            lambda: service_to_dict(db.services.update_service(
                service_id, payload.model_dump(exclude_unset=True)
            )),
        )

    @app.delete("/api/services/{service_id}")
    def delete_service(service_id: int,
                       db: DatabaseManager = Depends(get_db)):
        def _delete():
            db.services.delete_service(service_id)
            return {"success": True}
        return _call("delete service", _delete)

    # ==================== Staff ====================

    @app.get("/api/staff")
    def list_staff(db: DatabaseManager = Depends(get_db)):
        return _call(
            "fetch staff",
            lambda: [staff_to_dict(s) for s in db.staff.list_all()],
        )

    @app.post("/api/staff")
    def create_staff(payload: StaffCreate,
                     db: DatabaseManager = Depends(get_db)):
        return _call(
            "create staff",
            lambda: staff_to_dict(db.staff.create_staff(payload.model_dump())),
        )

    @app.get("/api/staff/commissions")
    def staff_commissions(
        start_date: Optional[str] = Query(default=None),
        end_date: Optional[str] = Query(default=None),
        db: DatabaseManager = Depends(get_db),
    ):
        return _call(
            "fetch commission summary", db.staff_commissions,
            start_date, end_date,
        )

    @app.put("/api/staff/{staff_id}")
    def update_staff(staff_id: int, payload: StaffUpdate,
                     db: DatabaseManager = Depends(get_db)):
        return _call(
            "update staff",
            lambda: staff_to_dict(db.staff.update_staff(
                staff_id, payload.model_dump(exclude_unset=True)
            )),
        )

    @app.delete("/api/staff/{staff_id}")
    def delete_staff(staff_id: int, db: DatabaseManager = Depends(get_db)):
        def _delete():
            db.staff.delete_staff(staff_id)
            return {"success": True}
        return _call("delete staff", _delete)

    # ==================== Transactions ====================

    @app.post("/api/transactions")
    def checkout(payload: CheckoutRequest,
                 db: DatabaseManager = Depends(get_db)):
        return _call("create transaction", db.checkout, payload.model_dump())

    @app.get("/api/transactions/list")
    def transaction_history(
        start_date: Optional[str] = Query(default=None),
        end_date: Optional[str] = Query(default=None),
        payment_method: Optional[str] = Query(default=None),
        db: DatabaseManager = Depends(get_db),
    ):
        return _call(
            "fetch transactions", db.transaction_history,
            start_date, end_date, payment_method,
        )

    @app.get("/api/transactions/void-reasons")
    def void_reasons(db: DatabaseManager = Depends(get_db)):
        return {"reasons": db.get_void_reasons()}

    @app.post("/api/transactions/{transaction_id}/void")
    def void_transaction(transaction_id: int, payload: VoidRequest,
                         db: DatabaseManager = Depends(get_db)):
        def _void():
            tx = db.void_transaction(
                transaction_id, payload.pin, payload.reason, payload.note
            )
            return {
                "success": True,
                "message": "Transaction voided successfully.",
                "transaction": tx,
            }
        return _call("void transaction", _void)

    @app.get("/api/transactions/{transaction_id}")
    def get_transaction(transaction_id: int,
                        db: DatabaseManager = Depends(get_db)):
        return _call(
            "fetch transaction", db.transactions.get_transaction, transaction_id
        )

    # ==================== Reports ====================

    @app.get("/api/reports/daily")
    def daily_report(
        day: Optional[str] = Query(default=None, alias="date"),
        start_date: Optional[str] = Query(default=None),
        end_date: Optional[str] = Query(default=None),
        db: DatabaseManager = Depends(get_db),
    ):
        return _call(
            "build daily report", db.daily_report, day, start_date, end_date
        )

    @app.get("/api/dashboard")
    def dashboard(db: DatabaseManager = Depends(get_db)):
        return _call("fetch dashboard metrics", db.dashboard)

    @app.post("/api/seed")
    def seed(db: DatabaseManager = Depends(get_db)):
        def _seed():
            created = db.seed()
            return {"message": "Database seeded successfully", "created": created}
        return _call("seed database", _seed)

    return app
