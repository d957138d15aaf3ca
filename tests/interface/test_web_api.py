"""Web API tests.

Drives the FastAPI application end to end with TestClient over a temp
SQLite database: CRUD endpoints, checkout and void, reports, error mapping.
"""
from datetime import date

import pytest
from fastapi.testclient import TestClient

from interface.web import create_app


@pytest.fixture
def client(temp_db):
    with TestClient(create_app(temp_db)) as test_client:
        yield test_client


@pytest.fixture
def seeded(client):
    """Seed the default salon and return ``(client, staff, services)`` keyed by name."""
    assert client.post("/api/seed").status_code == 200
    staff = {s["name"]: s for s in client.get("/api/staff").json()}
    services = {s["name"]: s for s in client.get("/api/services").json()}
    return client, staff, services


# ==================== Health & seed ====================

class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "db_connected": True}


class TestSeed:

    def test_seed_twice(self, client):
        first = client.post("/api/seed").json()
        second = client.post("/api/seed").json()
        assert first["created"] == {"staff": 3, "services": 8}
        assert second["created"] == {"staff": 0, "services": 0}
        assert second["message"] == "Database seeded successfully"


# ==================== Staff ====================

class TestStaffApi:

    def test_list_hides_pin(self, seeded):
        client, staff, _ = seeded
        for member in staff.values():
            assert "pin" not in member
            assert member["has_pin"] is True
        assert list(staff) == sorted(staff)

    def test_create_update_delete(self, client):
        created = client.post(
            "/api/staff", json={"name": "Nina", "role": "TECHNICIAN", "pin": "4444"}
        )
        assert created.status_code == 200
        staff_id = created.json()["id"]

        updated = client.put(f"/api/staff/{staff_id}", json={"role": "MANAGER"})
        assert updated.status_code == 200
        assert updated.json()["role"] == "MANAGER"
        assert updated.json()["name"] == "Nina"

        assert client.delete(f"/api/staff/{staff_id}").json() == {"success": True}
        assert client.get("/api/staff").json() == []

    def test_create_invalid_pin(self, client):
        response = client.post(
            "/api/staff", json={"name": "Nina", "role": "TECHNICIAN", "pin": "44"}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "PIN must be exactly 4 digits."}

    def test_update_unknown(self, client):
        response = client.put("/api/staff/999", json={"name": "Ghost"})
        assert response.status_code == 404
        assert "not found" in response.json()["error"]

    def test_non_integer_id(self, client):
        response = client.delete("/api/staff/abc")
        assert response.status_code == 400
        assert "error" in response.json()


# ==================== Services ====================

class TestServicesApi:

    def test_catalog_order(self, seeded):
        client, _, _ = seeded
        categories = [s["category"] for s in client.get("/api/services").json()]
        assert categories == sorted(categories)

    def test_create_and_update(self, client):
        created = client.post(
            "/api/services",
            json={"name": "Keratin", "category": "HAIR", "price": 150, "cogs": 30},
        ).json()
        assert created["price"] == 150.0
        assert created["cogs"] == 30.0
        assert created["duration_min"] == 0

        updated = client.put(f"/api/services/{created['id']}", json={"price": 160})
        assert updated.json()["price"] == 160.0
        assert updated.json()["cogs"] == 30.0

    def test_negative_price(self, client):
        response = client.post(
            "/api/services", json={"name": "Keratin", "category": "HAIR", "price": -1}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Price must be a positive number"

    def test_price_type_error(self, client):
        response = client.post(
            "/api/services", json={"name": "Keratin", "category": "HAIR", "price": "cheap"}
        )
        assert response.status_code == 400

    def test_delete_unknown(self, client):
        assert client.delete("/api/services/999").status_code == 404


# ==================== Customers ====================

class TestCustomersApi:

    def test_crud(self, client):
        created = client.post(
            "/api/customers",
            json={"full_name": "Jane Doe", "phone": "0812345678", "birthday": "1990-05-17"},
        )
        assert created.status_code == 200
        customer = created.json()
        assert customer["total_visits"] == 0
        assert customer["birthday"] == "1990-05-17"
        assert customer["consent_allow_contact"] is True

        patched = client.patch(
            f"/api/customers/{customer['id']}", json={"notes": "Allergic to latex"}
        ).json()
        assert patched["notes"] == "Allergic to latex"
        assert patched["phone"] == "0812345678"

        fetched = client.get(f"/api/customers/{customer['id']}").json()
        assert fetched["notes"] == "Allergic to latex"

        assert client.delete(f"/api/customers/{customer['id']}").json() == {"success": True}
        assert client.get(f"/api/customers/{customer['id']}").status_code == 404

    def test_search(self, client):
        client.post("/api/customers", json={"full_name": "Jane Doe", "phone": "0812345678"})
        client.post("/api/customers", json={"full_name": "Adam Smith"})
        names = [c["full_name"] for c in client.get("/api/customers").json()]
        assert names == ["Adam Smith", "Jane Doe"]
        found = client.get("/api/customers", params={"q": "0812"}).json()
        assert [c["full_name"] for c in found] == ["Jane Doe"]
        assert found[0]["transaction_count"] == 0

    def test_short_name(self, client):
        response = client.post("/api/customers", json={"full_name": "J"})
        assert response.status_code == 400


# ==================== Appointments ====================

class TestAppointmentsApi:

    def test_book_and_list(self, seeded):
        client, staff, services = seeded
        booked = client.post("/api/appointments", json={
            "customer_name": "Walk In",
            "scheduled_at": "2024-03-10T10:30:00",
            "service_id": services["Lash Lift"]["id"],
            "staff_id": staff["Alice (Stylist)"]["id"],
        })
        assert booked.status_code == 200
        appt = booked.json()
        assert appt["status"] == "BOOKED"
        assert appt["service"]["name"] == "Lash Lift"

        by_month = client.get("/api/appointments", params={"month": "2024-03"}).json()
        assert [a["id"] for a in by_month] == [appt["id"]]
        by_day = client.get("/api/appointments", params={"date": "2024-03-11"}).json()
        assert by_day == []

    def test_update_status_and_delete(self, seeded):
        client, _, services = seeded
        appt = client.post("/api/appointments", json={
            "customer_name": "Walk In",
            "scheduled_at": "2024-03-10T10:30:00",
            "service_id": services["Pedicure"]["id"],
        }).json()
        updated = client.put(f"/api/appointments/{appt['id']}", json={"status": "COMPLETED"})
        assert updated.json()["status"] == "COMPLETED"
        assert client.get(f"/api/appointments/{appt['id']}").json()["status"] == "COMPLETED"
        assert client.delete(f"/api/appointments/{appt['id']}").json() == {"success": True}
        assert client.get(f"/api/appointments/{appt['id']}").status_code == 404

    def test_unknown_service(self, client):
        response = client.post("/api/appointments", json={
            "customer_name": "Walk In",
            "scheduled_at": "2024-03-10T10:30:00",
            "service_id": 999,
        })
        assert response.status_code == 404

    def test_invalid_month(self, client):
        response = client.get("/api/appointments", params={"month": "03-2024"})
        assert response.status_code == 400


# ==================== Transactions ====================

class TestTransactionsApi:

    def _checkout(self, client, staff, services, customer_id=None):
        return client.post("/api/transactions", json={
            "items": [{
                "service_id": services["Women's Haircut"]["id"],
                "main_staff_id": staff["Alice (Stylist)"]["id"],
                "assistant_id": staff["Bob (Assistant)"]["id"],
            }],
            "payment_method": "CASH",
            "customer_id": customer_id,
        })

    def test_checkout(self, seeded):
        client, staff, services = seeded
        customer = client.post("/api/customers", json={"full_name": "Jane Doe"}).json()
        response = self._checkout(client, staff, services, customer["id"])
        assert response.status_code == 200
        tx = response.json()
        assert tx["total_amount"] == 50.0
        assert tx["items"][0]["commission_amount"] == 7.5

        customer = client.get(f"/api/customers/{customer['id']}").json()
        assert customer["total_visits"] == 1
        assert customer["lifetime_spend"] == 50.0

    def test_checkout_rounds_price_override(self, seeded):
        client, _, services = seeded
        item = {"service_id": services["Women's Haircut"]["id"], "price": 33.333}
        tx = client.post("/api/transactions", json={
            "items": [item, item, item], "payment_method": "CASH",
        }).json()
        assert tx["total_amount"] == 99.99
        report = client.get("/api/reports/daily").json()
        assert report["sales_by_category"] == {"HAIR": report["total_sales"]}

    def test_empty_cart(self, client):
        response = client.post("/api/transactions", json={"items": [], "payment_method": "CASH"})
        assert response.status_code == 400
        assert response.json() == {"error": "Cart is empty."}

    def test_void_flow(self, seeded):
        client, staff, services = seeded
        tx = self._checkout(client, staff, services).json()

        no_reason = client.post(f"/api/transactions/{tx['id']}/void", json={"pin": "3333"})
        assert no_reason.status_code == 400

        stylist_pin = client.post(
            f"/api/transactions/{tx['id']}/void", json={"pin": "1111", "reason": "Other"}
        )
        assert stylist_pin.status_code == 403
        assert stylist_pin.json() == {"error": "Invalid PIN or insufficient permission."}

        voided = client.post(
            f"/api/transactions/{tx['id']}/void",
            json={"pin": "3333", "reason": "Wrong service", "note": "rang up twice"},
        )
        assert voided.status_code == 200
        body = voided.json()
        assert body["success"] is True
        assert body["transaction"]["status"] == "VOID"
        assert body["transaction"]["void_note"] == "rang up twice"

        again = client.post(
            f"/api/transactions/{tx['id']}/void", json={"pin": "3333", "reason": "Other"}
        )
        assert again.status_code == 400
        assert again.json() == {"error": "Transaction is already voided."}

    def test_get_transaction(self, seeded):
        client, staff, services = seeded
        tx = self._checkout(client, staff, services).json()
        fetched = client.get(f"/api/transactions/{tx['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["items"][0]["service_name"] == "Women's Haircut"
        assert fetched.json()["customer"] is None
        assert client.get("/api/transactions/999").status_code == 404

    def test_void_unknown(self, seeded):
        client, _, _ = seeded
        response = client.post("/api/transactions/999/void", json={"pin": "3333", "reason": "Other"})
        assert response.status_code == 404

    def test_void_reasons(self, client):
        reasons = client.get("/api/transactions/void-reasons").json()["reasons"]
        assert reasons[0] == "Wrong service"

    def test_history(self, seeded):
        client, staff, services = seeded
        kept = self._checkout(client, staff, services).json()
        voided = self._checkout(client, staff, services).json()
        client.post(f"/api/transactions/{voided['id']}/void", json={"pin": "3333", "reason": "Other"})

        history = client.get("/api/transactions/list", params={"payment_method": "ALL"}).json()
        assert {t["id"] for t in history["transactions"]} == {kept["id"], voided["id"]}
        assert history["summary"]["total_revenue"] == 50.0
        assert set(history["summary"]["revenue_by_method"]) == {
            "CASH", "CREDIT_CARD", "TRANSFER", "GOWABI"
        }

    def test_history_bad_date(self, client):
        response = client.get("/api/transactions/list", params={"start_date": "01/02/2024"})
        assert response.status_code == 400


# ==================== Reports ====================

class TestReportsApi:

    def test_daily_report_and_commissions(self, seeded):
        client, staff, services = seeded
        client.post("/api/transactions", json={
            "items": [
                {"service_id": services["Women's Haircut"]["id"],
                 "main_staff_id": staff["Alice (Stylist)"]["id"]},
                {"service_id": services["Shampoo Bottle"]["id"]},
            ],
            "payment_method": "TRANSFER",
        })

        report = client.get("/api/reports/daily", params={"date": date.today().isoformat()}).json()
        assert report["total_sales"] == 75.0
        assert report["sales_by_category"] == {"HAIR": 50.0, "PRODUCT": 25.0}

        commissions = client.get("/api/staff/commissions").json()
        alice = next(e for e in commissions if e["name"] == "Alice (Stylist)")
        assert alice["total_commission"] == 5.0
        assert alice["items"][0]["type"] == "main"

    def test_dashboard(self, seeded):
        client, _, _ = seeded
        data = client.get("/api/dashboard").json()
        assert data["total_staff"] == 3
        assert data["today_transactions"] == 0
        assert data["recent_transactions"] == []


class TestUnexpectedErrors:

    def test_unexpected_exception_returns_500(self, temp_db, client, monkeypatch):
        def boom():
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(temp_db.reports, "dashboard", boom)
        response = client.get("/api/dashboard")
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch dashboard metrics"}
