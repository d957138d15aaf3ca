"""Sales aggregation.

Folds serialized transactions into totals grouped by payment method and by
service category. Amounts are summed as ``Decimal`` so the grouped totals
always add back up to the overall total.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

UNCATEGORIZED = "UNCATEGORIZED"


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass
class SalesSummary:
    """Aggregated sales figures for a set of transactions."""

    total_sales: Decimal = Decimal("0")
    transaction_count: int = 0
    sales_by_payment_method: Dict[str, Decimal] = field(default_factory=dict)
    sales_by_category: Dict[str, Decimal] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_sales": float(self.total_sales),
            "total_transactions": self.transaction_count,
            "sales_by_payment_method": {
                k: float(v) for k, v in self.sales_by_payment_method.items()
            },
            "sales_by_category": {
                k: float(v) for k, v in self.sales_by_category.items()
            },
        }


def aggregate_sales(transactions: Iterable[Mapping[str, Any]],
                    payment_methods: Optional[Sequence[str]] = None,
                    categories: Optional[Sequence[str]] = None) -> SalesSummary:
    """Aggregate transactions in a single pass.

    Args:
        transactions: Mappings with ``total_amount``, ``payment_method``
            and ``items`` (each item a mapping with ``price`` and ``category``).
        payment_methods: Keys always present in the payment method totals.
        categories: Keys always present in the category totals.

    Returns:
        A SalesSummary. The per-method totals and the per-category totals
        each sum to ``total_sales``; item prices without a category are
        counted under ``UNCATEGORIZED``.
    """
    summary = SalesSummary(
        sales_by_payment_method={m: Decimal("0") for m in payment_methods or ()},
        sales_by_category={c: Decimal("0") for c in categories or ()},
    )

    for tx in transactions:
        amount = _to_decimal(tx.get("total_amount"))
        summary.total_sales += amount
        summary.transaction_count += 1

        method = tx.get("payment_method")
        summary.sales_by_payment_method[method] = (
            summary.sales_by_payment_method.get(method, Decimal("0")) + amount
        )

        for item in tx.get("items") or []:
            category = item.get("category") or UNCATEGORIZED
            summary.sales_by_category[category] = (
                summary.sales_by_category.get(category, Decimal("0"))
                + _to_decimal(item.get("price"))
            )

    return summary
