"""Report repositories - read-only aggregations over the checkout ledger.

Covers the daily/period sales report, the transaction history summary,
the staff commission summary and the dashboard metrics. Nothing here is
persisted: every report is computed from the transactions on request.
Voided transactions never count towards revenue or commission.
"""
from typing import Optional, List, Dict, Any
from datetime import date, datetime, time
from sqlalchemy import func
from sqlalchemy.orm import selectinload

from business.constants import PaymentMethod, ServiceCategory, TransactionStatus
from business.reports import aggregate_sales
from .base_crud import BaseCRUD
from .business_repos import TransactionRepository, day_bounds
from .connection import DatabaseConnection
from .models import (
    Staff, Customer, Transaction, TransactionItem, CommissionLog
)
from .serializers import money, iso

PAYMENT_METHOD_KEYS = [m.value for m in PaymentMethod]
CATEGORY_KEYS = [c.value for c in ServiceCategory]


class ReportRepository(BaseCRUD):
    """Sales, commission and dashboard reports."""

    def __init__(self, conn: DatabaseConnection,
                 transaction_repo: TransactionRepository) -> None:
        super().__init__(conn)
        self._transactions = transaction_repo

    def daily_report(self, target_date: Optional[Any] = None,
                     start_date: Optional[Any] = None,
                     end_date: Optional[Any] = None) -> Dict[str, Any]:
        """Sales report of completed transactions for a day or a date range.

        Args:
            target_date: Day to report on (defaults to today). Ignored when
                ``start_date`` or ``end_date`` is given.
            start_date: First day of the range (optional).
            end_date: Last day of the range (optional, defaults to start_date).

        Returns:
            ``date``, ``start_date``, ``end_date``, ``total_sales``,
            ``total_transactions``, ``sales_by_payment_method`` and
            ``sales_by_category``.
        """
        if start_date or end_date:
            start = self._parse_date(start_date or end_date, "Start date")
            end = self._parse_date(end_date or start_date, "End date")
        else:
            start = end = (
                self._parse_date(target_date, "Date") if target_date else date.today()
            )

        transactions = self._transactions.list_transactions(
            start_date=start, end_date=end,
            status=TransactionStatus.COMPLETED.value,
        )
        summary = aggregate_sales(transactions)
        report = {
            "date": start.isoformat(),
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
        }
        report.update(summary.to_dict())
        return report

    def transaction_history(self, start_date: Optional[Any] = None,
                            end_date: Optional[Any] = None,
                            payment_method: Optional[str] = None
                            ) -> Dict[str, Any]:
        """Filtered transaction list plus revenue summary.

        Voided transactions are listed but excluded from every revenue figure.
        ``today_revenue`` always covers the current day, independent of the
        filters.

        Returns:
            ``{"transactions": [...], "summary": {...}}``.
        """
        transactions = self._transactions.list_transactions(
            start_date=start_date, end_date=end_date,
            payment_method=payment_method,
        )
        completed = [
            t for t in transactions
            if t["status"] == TransactionStatus.COMPLETED.value
        ]
        summary = aggregate_sales(
            completed, payment_methods=PAYMENT_METHOD_KEYS,
            categories=CATEGORY_KEYS,
        )

        today = date.today()
        today_summary = aggregate_sales(self._transactions.list_transactions(
            start_date=today, end_date=today,
            status=TransactionStatus.COMPLETED.value,
        ))

        return {
            "transactions": transactions,
            "summary": {
                "total_revenue": float(summary.total_sales),
                "today_revenue": float(today_summary.total_sales),
                "revenue_by_method": {
                    k: float(v) for k, v in summary.sales_by_payment_method.items()
                },
                "revenue_by_category": {
                    k: float(v) for k, v in summary.sales_by_category.items()
                },
            },
        }

    def staff_commission_summary(self, start_date: Optional[Any] = None,
                                 end_date: Optional[Any] = None
                                 ) -> List[Dict[str, Any]]:
        """Per-staff performed/assisted services and commission earned.

        Args:
            start_date: First day included (optional).
            end_date: Last day included (optional).

        Returns:
            One dict per staff member ordered by name with ``main_services``,
            ``assist_services``, ``total_revenue``, ``total_commission`` and
            the itemized ``items``.
        """
        start = self._parse_date(start_date, "Start date") if start_date else None
        end = self._parse_date(end_date, "End date") if end_date else None
        lower, upper = day_bounds(start, end)

        with self._get_session() as sess:
            def _in_range(query):
                query = query.filter(
                    Transaction.status == TransactionStatus.COMPLETED.value
                )
                if lower is not None:
                    query = query.filter(Transaction.created_at >= lower)
                if upper is not None:
                    query = query.filter(Transaction.created_at < upper)
                return query

            items = _in_range(
                sess.query(TransactionItem)
                .join(Transaction, TransactionItem.transaction_id == Transaction.id)
                .options(selectinload(TransactionItem.transaction))
            ).order_by(Transaction.created_at, TransactionItem.id).all()

            logs = _in_range(
                sess.query(CommissionLog)
                .join(Transaction, CommissionLog.transaction_id == Transaction.id)
            ).all()

            earned: Dict[tuple, float] = {}
            for log in logs:
                key = (log.staff_id, log.transaction_item_id)
                earned[key] = earned.get(key, 0.0) + money(log.amount)

            summary = []
            for staff in sess.query(Staff).order_by(Staff.name).all():
                entry = {
                    "id": staff.id,
                    "name": staff.name,
                    "role": staff.role,
                    "avatar": staff.avatar,
                    "main_services": 0,
                    "assist_services": 0,
                    "total_revenue": 0.0,
                    "total_commission": 0.0,
                    "items": [],
                }
                for item in items:
                    if item.primary_staff_id == staff.id:
                        kind, price = "main", money(item.price)
                        entry["main_services"] += 1
                        entry["total_revenue"] += price
                    elif item.assistant_staff_id == staff.id:
                        # Revenue stays with the main performer
                        kind, price = "assist", 0.0
                        entry["assist_services"] += 1
                    else:
                        continue
                    commission = round(earned.get((staff.id, item.id), 0.0), 2)
                    entry["total_commission"] += commission
                    entry["items"].append({
                        "id": item.id,
                        "transaction_id": item.transaction_id,
                        "service_name": item.service_name,
                        "category": item.category,
                        "price": price,
                        "commission": commission,
                        "date": iso(item.transaction.created_at),
                        "type": kind,
                    })
                entry["total_revenue"] = round(entry["total_revenue"], 2)
                entry["total_commission"] = round(entry["total_commission"], 2)
                summary.append(entry)
            return summary

    def dashboard(self) -> Dict[str, Any]:
        """Headline metrics for the back-office home page.

        Returns:
            ``monthly_revenue``, ``today_revenue``, ``today_transactions``,
            ``total_staff``, ``total_customers`` and the 5 most recent
            ``recent_transactions``.
        """
        now = datetime.now()
        start_of_month = datetime(now.year, now.month, 1)
        start_of_today = datetime.combine(now.date(), time.min)
        completed = Transaction.status == TransactionStatus.COMPLETED.value

        with self._get_session() as sess:
            monthly_revenue = sess.query(
                func.coalesce(func.sum(Transaction.total_amount), 0)
            ).filter(completed, Transaction.created_at >= start_of_month).scalar()

            today_revenue = sess.query(
                func.coalesce(func.sum(Transaction.total_amount), 0)
            ).filter(completed, Transaction.created_at >= start_of_today).scalar()

            today_count = sess.query(Transaction).filter(
                completed, Transaction.created_at >= start_of_today
            ).count()

            data = {
                "monthly_revenue": money(monthly_revenue),
                "today_revenue": money(today_revenue),
                "today_transactions": today_count,
                "total_staff": self.count(Staff, session=sess),
                "total_customers": self.count(Customer, session=sess),
            }

        data["recent_transactions"] = self._transactions.list_transactions(limit=5)
        return data
