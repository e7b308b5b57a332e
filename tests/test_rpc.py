import inspect
import pytest
from datetime import date, datetime

from rpc import router

JANE = {
    "first_name": "Jane",
    "last_name": "Smith",
    "email": "jane.smith@example.com",
    "phone": "555-0100",
    "date_of_birth": "1990-01-01",
    "notes": None,
}


@pytest.fixture
def jane(client):
    response = client.post("/rpc/createCustomer", json=JANE)
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def haircut(client):
    response = client.post("/rpc/createService", json={
        "name": "Haircut", "description": None, "duration_minutes": 45, "price": 35.5,
    })
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def appointment(client, jane, haircut):
    response = client.post("/rpc/createAppointment", json={
        "customer_id": jane["id"],
        "service_id": haircut["id"],
        "appointment_date": "2024-01-15T00:00:00.000Z",
        "start_time": "10:00",
        "end_time": "10:45",
        "notes": None,
    })
    assert response.status_code == 200
    return response.json()


class TestHealth:

    def test_healthcheck(self, client):
        response = client.get("/rpc/healthcheck")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert datetime.fromisoformat(body["timestamp"])

    def test_root(self, client):
        assert client.get("/").json()["message"] == "Salon Manager API"

    def test_handlers_run_in_threadpool(self):
        # Session work blocks, so no handler may be a coroutine on the event loop
        coroutines = [r.path for r in router.routes if inspect.iscoroutinefunction(r.endpoint)]
        assert coroutines == []


class TestCustomerProcedures:

    def test_create_customer(self, jane):
        assert jane["id"] > 0
        assert jane["date_of_birth"] == "1990-01-01"
        assert jane["created_at"]

    def test_duplicate_email_conflict(self, client, jane):
        response = client.post("/rpc/createCustomer", json=JANE)
        assert response.status_code == 409
        assert response.json()["error"] == "unique_violation"

    def test_invalid_email_rejected(self, client):
        response = client.post("/rpc/createCustomer", json={**JANE, "email": "nope"})
        assert response.status_code == 422

    def test_get_customer_by_id(self, client, jane):
        assert client.get("/rpc/getCustomerById", params={"id": jane["id"]}).json()["email"] == JANE["email"]
        missing = client.get("/rpc/getCustomerById", params={"id": 999})
        assert missing.status_code == 200
        assert missing.json() is None

    def test_update_customer(self, client, jane):
        response = client.post("/rpc/updateCustomer", json={"id": jane["id"], "notes": "VIP"})
        assert response.status_code == 200
        body = response.json()
        assert body["notes"] == "VIP"
        assert body["first_name"] == "Jane"

    def test_update_missing_customer(self, client):
        response = client.post("/rpc/updateCustomer", json={"id": 999, "notes": "VIP"})
        assert response.status_code == 404
        assert response.json() == {"error": "not_found", "detail": "Customer with id 999 not found"}

    def test_delete_customer(self, client, jane):
        assert client.post("/rpc/deleteCustomer", json={"id": jane["id"]}).status_code == 200
        assert client.get("/rpc/getCustomers").json() == []

    def test_delete_missing_customer_succeeds(self, client):
        response = client.post("/rpc/deleteCustomer", json={"id": 999})
        assert response.status_code == 200
        assert response.json() is None

    def test_delete_customer_with_appointments_conflicts(self, client, appointment):
        response = client.post("/rpc/deleteCustomer", json={"id": appointment["customer_id"]})
        assert response.status_code == 409
        assert response.json()["error"] == "customer_in_use"

    def test_search_customers(self, client, jane):
        found = client.get("/rpc/searchCustomers", params={"query": "jane"}).json()
        assert [c["last_name"] for c in found] == ["Smith"]
        assert client.get("/rpc/searchCustomers", params={"query": "nonexistent"}).json() == []

    def test_search_requires_query_text(self, client):
        assert client.get("/rpc/searchCustomers", params={"query": ""}).status_code == 422
        assert client.get("/rpc/searchCustomers", params={"query": "a", "limit": 0}).status_code == 422


class TestServiceProcedures:

    def test_price_surfaces_as_number(self, client, haircut):
        assert haircut["price"] == 35.5
        assert client.get("/rpc/getServices").json()[0]["price"] == 35.5

    def test_invalid_service_rejected(self, client):
        response = client.post("/rpc/createService", json={
            "name": "Haircut", "duration_minutes": -5, "price": 35,
        })
        assert response.status_code == 422

    @pytest.mark.parametrize("price", [1e30, "0.001"])
    def test_price_outside_currency_precision_rejected(self, client, price):
        response = client.post("/rpc/createService", json={
            "name": "Haircut", "duration_minutes": 45, "price": price,
        })
        assert response.status_code == 422
        assert client.get("/rpc/getServices").json() == []


class TestAppointmentProcedures:

    def test_create_appointment(self, appointment):
        assert appointment["status"] == "scheduled"
        assert appointment["appointment_date"] == "2024-01-15"

    def test_create_for_missing_customer(self, client, haircut):
        response = client.post("/rpc/createAppointment", json={
            "customer_id": 999, "service_id": haircut["id"], "appointment_date": "2024-01-15",
            "start_time": "10:00", "end_time": "10:45",
        })
        assert response.status_code == 404
        assert "Customer with id 999" in response.json()["detail"]

    def test_listings_embed_details(self, client, appointment):
        by_customer = client.get(
            "/rpc/getAppointmentsByCustomer", params={"id": appointment["customer_id"]}
        ).json()
        assert len(by_customer) == 1
        assert by_customer[0]["customer"]["email"] == JANE["email"]
        assert by_customer[0]["service"]["price"] == 35.5

        by_date = client.get("/rpc/getAppointmentsByDate", params={"date": "2024-01-15"}).json()
        assert [a["id"] for a in by_date] == [appointment["id"]]
        assert client.get("/rpc/getAppointmentsByDate", params={"date": "2024-01-16"}).json() == []
        by_timestamp = client.get(
            "/rpc/getAppointmentsByDate", params={"date": "2024-01-15T10:00:00.000Z"}
        ).json()
        assert [a["id"] for a in by_timestamp] == [appointment["id"]]
        assert len(client.get("/rpc/getAppointments").json()) == 1

    def test_update_and_cancel(self, client, appointment):
        updated = client.post("/rpc/updateAppointment", json={
            "id": appointment["id"], "status": "confirmed",
        }).json()
        assert updated["status"] == "confirmed"
        assert updated["start_time"] == "10:00"

        cancelled = client.post("/rpc/cancelAppointment", json={"id": appointment["id"]}).json()
        assert cancelled["status"] == "cancelled"

    def test_cancel_missing_appointment(self, client):
        response = client.post("/rpc/cancelAppointment", json={"id": 999})
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestHistoryAndDashboard:

    def test_service_history(self, client, appointment):
        response = client.post("/rpc/createServiceHistory", json={
            "customer_id": appointment["customer_id"],
            "service_id": appointment["service_id"],
            "appointment_id": appointment["id"],
            "service_date": "2024-01-15",
            "price_paid": 100.5,
            "notes": None,
        })
        assert response.status_code == 200
        assert response.json()["price_paid"] == 100.5

        rows = client.get(
            "/rpc/getServiceHistoryByCustomer", params={"id": appointment["customer_id"]}
        ).json()
        assert len(rows) == 1
        assert rows[0]["service"]["name"] == "Haircut"

    def test_dashboard_on_empty_store(self, client):
        assert client.get("/rpc/getDashboardStats").json() == {
            "today_appointments": 0,
            "new_customers_this_month": 0,
            "total_revenue_this_month": 0.0,
            "upcoming_appointments": [],
            "recent_customers": [],
        }

    def test_dashboard_counts_todays_appointment(self, client, jane, haircut):
        today = date.today()
        client.post("/rpc/createAppointment", json={
            "customer_id": jane["id"], "service_id": haircut["id"],
            "appointment_date": today.isoformat(), "start_time": "10:00", "end_time": "10:45",
        })

        stats = client.get("/rpc/getDashboardStats").json()
        assert stats["today_appointments"] == 1
        assert stats["new_customers_this_month"] == 1
        assert [c["id"] for c in stats["recent_customers"]] == [jane["id"]]
