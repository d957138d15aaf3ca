"""Sales aggregation tests."""
from decimal import Decimal

from business.reports import UNCATEGORIZED, SalesSummary, aggregate_sales


def _tx(method, *items):
    return {
        "total_amount": sum(price for _, price in items),
        "payment_method": method,
        "items": [{"category": c, "price": p} for c, p in items],
    }


TRANSACTIONS = [
    _tx("CASH", ("HAIR", 50.0), ("PRODUCT", 25.0)),
    _tx("CREDIT_CARD", ("NAIL", 40.0)),
    _tx("CASH", ("LASH", 80.0), ("HAIR", 30.5)),
    _tx("TRANSFER", ("HAIR", 0.25), ("HAIR", 0.5)),
]


class TestAggregateSales:

    def test_totals(self):
        summary = aggregate_sales(TRANSACTIONS)
        assert summary.transaction_count == 4
        assert summary.total_sales == Decimal("226.25")

    def test_grouped_sums_equal_total(self):
        summary = aggregate_sales(TRANSACTIONS)
        assert sum(summary.sales_by_payment_method.values()) == summary.total_sales
        assert sum(summary.sales_by_category.values()) == summary.total_sales

    def test_by_payment_method(self):
        summary = aggregate_sales(TRANSACTIONS)
        assert summary.sales_by_payment_method["CASH"] == Decimal("185.5")
        assert summary.sales_by_payment_method["CREDIT_CARD"] == Decimal("40.0")

    def test_by_category(self):
        summary = aggregate_sales(TRANSACTIONS)
        assert summary.sales_by_category["HAIR"] == Decimal("81.25")
        assert summary.sales_by_category["LASH"] == Decimal("80.0")

    def test_fixed_keys_are_always_present(self):
        summary = aggregate_sales(
            [], payment_methods=["CASH", "GOWABI"], categories=["HAIR", "NAIL"]
        )
        assert summary.sales_by_payment_method == {
            "CASH": Decimal("0"), "GOWABI": Decimal("0")
        }
        assert summary.sales_by_category == {
            "HAIR": Decimal("0"), "NAIL": Decimal("0")
        }

    def test_missing_category_is_uncategorized(self):
        summary = aggregate_sales([_tx("CASH", (None, 12.5))])
        assert summary.sales_by_category == {UNCATEGORIZED: Decimal("12.5")}

    def test_empty(self):
        summary = aggregate_sales([])
        assert summary.total_sales == 0
        assert summary.transaction_count == 0
        assert summary.sales_by_payment_method == {}


class TestSalesSummaryToDict:

    def test_renders_floats(self):
        data = aggregate_sales(TRANSACTIONS[:2]).to_dict()
        assert data["total_sales"] == 115.0
        assert data["total_transactions"] == 2
        assert data["sales_by_payment_method"] == {"CASH": 75.0, "CREDIT_CARD": 40.0}
        assert data["sales_by_category"] == {"HAIR": 50.0, "PRODUCT": 25.0, "NAIL": 40.0}

    def test_default_is_empty(self):
        assert SalesSummary().to_dict() == {
            "total_sales": 0.0,
            "total_transactions": 0,
            "sales_by_payment_method": {},
            "sales_by_category": {},
        }
