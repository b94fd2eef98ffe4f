"""Tests for the REST transaction routes."""

from __future__ import annotations

from datetime import date

from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from finance_tracker.database import get_session
from finance_tracker.main import app

from .conftest import count_rows


def _post(client, **overrides):
    payload = {
        "type": "expense",
        "category": "Groceries",
        "amount": 42.5,
        "description": "Weekly shop",
        "date": "2024-04-02",
    }
    payload.update(overrides)
    return client.post("/api/transactions", json=payload)


def test_root_and_health(client) -> None:
    root = client.get("/")
    health = client.get("/health")

    assert root.status_code == 200
    assert root.json()["status"] == "running"
    assert health.json() == {"status": "healthy"}


def test_cors_is_open_to_any_origin(client) -> None:
    response = client.get("/health", headers={"Origin": "https://example.com"})

    assert response.headers["access-control-allow-origin"] == "*"


def test_create_returns_id_and_row(client) -> None:
    response = _post(client)

    assert response.status_code == 201
    payload = response.json()
    assert payload["success"] is True
    assert payload["message"] == "Transaction added successfully"
    assert payload["data"]["id"] == payload["id"]
    assert payload["data"]["amount"] == 42.5


def test_create_then_get_matches_submitted_fields(client) -> None:
    created = _post(client).json()

    response = client.get(f"/api/transactions/{created['id']}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["type"] == "expense"
    assert data["category"] == "Groceries"
    assert data["amount"] == 42.5
    assert data["description"] == "Weekly shop"
    assert data["date"] == "2024-04-02"


def test_create_without_date_uses_today(client) -> None:
    created = client.post(
        "/api/transactions",
        json={"type": "income", "category": "Gift", "amount": 5},
    ).json()

    data = client.get(f"/api/transactions/{created['id']}").json()["data"]

    assert data["date"] == date.today().isoformat()
    assert data["description"] == ""


def test_create_with_non_positive_amount_fails_without_insert(client, engine) -> None:
    for amount in (0, -5):
        response = _post(client, amount=amount)

        assert response.status_code == 422
        assert response.json() == {
            "success": False,
            "message": "Please fill all required fields",
        }

    assert count_rows(engine) == 0


def test_create_rejects_unknown_type_and_blank_category(client, engine) -> None:
    assert _post(client, type="transfer").status_code == 422
    assert _post(client, category="   ").status_code == 422
    assert count_rows(engine) == 0


def test_get_missing_transaction_has_no_data_key(client) -> None:
    for transaction_id in ("0", "999999", "abc"):
        response = client.get(f"/api/transactions/{transaction_id}")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Transaction not found"}


def test_list_is_ordered_newest_date_first(client) -> None:
    for day in ("2024-01-01", "2024-03-01", "2024-02-01"):
        _post(client, date=day)

    response = client.get("/api/transactions")

    assert response.status_code == 200
    assert [t["date"] for t in response.json()["data"]] == [
        "2024-03-01",
        "2024-02-01",
        "2024-01-01",
    ]


def test_list_on_empty_table_returns_empty_data(client) -> None:
    assert client.get("/api/transactions").json() == {"success": True, "data": []}


def test_list_filters_by_type(client) -> None:
    _post(client, type="income", category="Salary")
    _post(client, type="expense", category="Food")

    response = client.get("/api/transactions", params={"type": "income"})

    assert [t["category"] for t in response.json()["data"]] == ["Salary"]


def test_update_replaces_row(client) -> None:
    created = _post(client).json()

    response = client.put(
        f"/api/transactions/{created['id']}",
        json={"type": "income", "category": "Refund", "amount": 10, "date": "2024-04-03"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["message"] == "Transaction updated successfully"
    assert payload["data"]["type"] == "income"
    assert payload["data"]["description"] == ""


def test_update_missing_id_succeeds_when_lenient(client) -> None:
    response = client.put(
        "/api/transactions/999999",
        json={"type": "income", "category": "Refund", "amount": 10},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Transaction updated successfully"}


def test_update_missing_id_is_not_found_when_strict(client, settings) -> None:
    settings.STRICT_MUTATIONS = True

    response = client.put(
        "/api/transactions/999999",
        json={"type": "income", "category": "Refund", "amount": 10},
    )

    assert response.status_code == 404
    assert response.json()["message"] == "Transaction not found"


def test_update_with_invalid_id(client) -> None:
    response = client.put(
        "/api/transactions/abc",
        json={"type": "income", "category": "Refund", "amount": 10},
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid transaction ID"}


def test_delete_removes_row(client, engine) -> None:
    created = _post(client).json()

    response = client.delete(f"/api/transactions/{created['id']}")

    assert response.json() == {"success": True, "message": "Transaction deleted successfully"}
    assert count_rows(engine) == 0


def test_delete_nonexistent_id_still_succeeds(client) -> None:
    response = client.delete("/api/transactions/999999")

    assert response.status_code == 200
    assert response.json()["success"] is True


def test_delete_nonexistent_id_when_strict(client, settings) -> None:
    settings.STRICT_MUTATIONS = True

    response = client.delete("/api/transactions/999999")

    assert response.status_code == 404


def test_stats_summary_totals_and_breakdowns(client) -> None:
    _post(client, type="income", category="Salary", amount=100)
    _post(client, type="expense", category="Food", amount=40)

    response = client.get("/api/transactions/stats/summary")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totalIncome"] == 100
    assert data["totalExpense"] == 40
    assert data["balance"] == 60

    for key in ("categories", "monthly"):
        by_type = {"income": 0, "expense": 0}
        for row in data[key]:
            by_type[row["type"]] += row["total"]
        assert by_type == {"income": 100, "expense": 40}


def test_storage_failure_surfaces_driver_message(client, engine) -> None:
    def _failing_session():
        with Session(engine) as session:
            def _fail():
                raise OperationalError("INSERT", {}, Exception("database is locked"))

            session.commit = _fail
            yield session

    app.dependency_overrides[get_session] = _failing_session

    response = _post(client)

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "message": "Error adding transaction: database is locked",
    }


def test_out_of_range_path_ids(client) -> None:
    huge = "99999999999999999999"

    assert client.get(f"/api/transactions/{huge}").status_code == 404
    assert client.delete(f"/api/transactions/{huge}").json() == {
        "success": False,
        "message": "Invalid transaction ID",
    }


def test_sub_cent_amount_is_rejected(client, engine) -> None:
    response = _post(client, amount=0.001)

    assert response.status_code == 422
    assert count_rows(engine) == 0


def test_list_storage_failure_surfaces_driver_message(client, engine) -> None:
    def _failing_session():
        with Session(engine) as session:
            def _fail(*_args, **_kwargs):
                raise OperationalError("SELECT", {}, Exception("no such table: transactions"))

            session.exec = _fail
            yield session

    app.dependency_overrides[get_session] = _failing_session

    response = client.get("/api/transactions")

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "message": "Error loading transactions: no such table: transactions",
    }
