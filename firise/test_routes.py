import importlib
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from firise import database, main
from firise.auth import get_current_user, verify_password
from firise.main import create_app
from firise.schemas import CategoryCreate, ExpenseCreate, GoalCreate
from firise.services.mem_storage import MemStorage

OTHER_USER = 2


def money(value):
    return Decimal(str(value))


# ── Health / users ────────────────────────────────────────────────
def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_current_user_has_no_password(client):
    body = client.get("/api/users/current").json()
    assert body["username"] == "jamie"
    assert body["fullName"] == "Jamie Smith"
    assert "password" not in body


def test_register_user_hashes_password(client, seeded_storage):
    res = client.post("/api/users", json={"username": "robin", "password": "secret99", "fullName": "Robin Lee"})
    assert res.status_code == 201
    assert "password" not in res.json()

    stored = seeded_storage.get_user_by_username("robin")
    assert stored.password != "secret99"
    assert verify_password("secret99", stored.password)


def test_register_duplicate_username(client):
    res = client.post("/api/users", json={"username": "jamie", "password": "secret99", "fullName": "Other Jamie"})
    assert res.status_code == 400
    assert res.json()["errors"] == [{"field": "username", "message": "Username is already taken"}]


def test_register_reports_every_bad_field(client):
    res = client.post("/api/users", json={"username": "ab", "password": "123", "fullName": "", "email": "nope"})
    assert res.status_code == 400
    fields = {e["field"] for e in res.json()["errors"]}
    assert fields == {"username", "password", "fullName", "email"}


# ── Expenses ──────────────────────────────────────────────────────
def test_list_expenses_newest_first(client):
    body = client.get("/api/expenses").json()
    assert [e["description"] for e in body] == [
        "Grocery Store", "Lunch Cafe", "Public Transit", "Electric Bill", "Rent",
    ]
    assert money(body[0]["amount"]) == Decimal("78.25")
    assert body[0]["categoryId"] == 2


def test_recent_expenses_limit(client):
    assert len(client.get("/api/expenses/recent").json()) == 5
    assert [e["id"] for e in client.get("/api/expenses/recent?limit=2").json()] == [1, 2]
    assert client.get("/api/expenses/recent?limit=0").status_code == 400


def test_create_expense(client):
    res = client.post(
        "/api/expenses",
        json={"description": "  Bus pass ", "amount": "45.00", "date": "2023-09-18", "categoryId": 3},
    )
    assert res.status_code == 201
    body = res.json()
    assert body["id"] > 5
    assert body["description"] == "Bus pass"
    assert body["userId"] == 1
    assert money(body["amount"]) == Decimal("45")
    assert client.get(f"/api/expenses/{body['id']}").status_code == 200


def test_create_expense_without_category(client):
    res = client.post("/api/expenses", json={"description": "Gift", "amount": 20, "date": "2023-09-18"})
    assert res.status_code == 201
    assert res.json()["categoryId"] is None


def test_create_expense_reports_all_errors(client, seeded_storage):
    before = len(seeded_storage.get_expenses(1))
    res = client.post("/api/expenses", json={"description": "", "amount": -5, "date": "2023-13-01"})

    assert res.status_code == 400
    body = res.json()
    assert {e["field"] for e in body["errors"]} == {"description", "amount", "date"}
    assert body["message"].startswith("Validation failed: ")
    assert len(seeded_storage.get_expenses(1)) == before


@pytest.mark.parametrize("amount", ["0", "12.345", "123456789.99"])
def test_create_expense_rejects_bad_amounts(client, amount):
    res = client.post("/api/expenses", json={"description": "x", "amount": amount, "date": "2023-09-18"})
    assert res.status_code == 400
    assert [e["field"] for e in res.json()["errors"]] == ["amount"]


def test_create_expense_unknown_category(client):
    res = client.post("/api/expenses", json={"description": "x", "amount": 1, "date": "2023-09-18", "categoryId": 99})
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "categoryId"


def test_update_expense_is_partial(client):
    res = client.put("/api/expenses/2", json={"amount": "15.00"})
    assert res.status_code == 200
    body = res.json()
    assert money(body["amount"]) == Decimal("15")
    assert body["description"] == "Lunch Cafe"
    assert body["date"] == "2023-09-14"


def test_update_expense_empty_body_is_noop(client):
    before = client.get("/api/expenses/2").json()
    res = client.put("/api/expenses/2", json={})
    assert res.status_code == 200
    assert res.json() == before


def test_update_expense_rejects_null_required_field(client):
    res = client.put("/api/expenses/2", json={"description": None})
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "description"
    assert client.get("/api/expenses/2").json()["description"] == "Lunch Cafe"


def test_update_expense_ignores_owner_change(client):
    res = client.put("/api/expenses/2", json={"userId": OTHER_USER, "amount": 20})
    assert res.status_code == 200
    assert res.json()["userId"] == 1


def test_delete_expense(client):
    res = client.delete("/api/expenses/3")
    assert res.status_code == 204
    assert res.content == b""
    assert client.get("/api/expenses/3").status_code == 404
    assert client.delete("/api/expenses/3").status_code == 404


def test_missing_expense_404(client):
    assert client.get("/api/expenses/999").status_code == 404
    assert client.put("/api/expenses/999", json={"amount": 1}).status_code == 404


def test_non_numeric_id_is_validation_error(client):
    res = client.get("/api/expenses/abc")
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "expense_id"


# ── Ownership ─────────────────────────────────────────────────────
def test_other_users_expense_is_invisible(client, seeded_storage):
    theirs = seeded_storage.create_expense(
        OTHER_USER, ExpenseCreate(description="Private", amount="99", date="2023-09-20")
    )

    assert theirs.id not in [e["id"] for e in client.get("/api/expenses").json()]
    assert client.get(f"/api/expenses/{theirs.id}").status_code == 404
    assert client.put(f"/api/expenses/{theirs.id}", json={"amount": 1}).status_code == 404
    assert client.delete(f"/api/expenses/{theirs.id}").status_code == 404
    assert seeded_storage.get_expense(theirs.id) == theirs


def test_other_users_goal_is_invisible(client, seeded_storage):
    theirs = seeded_storage.create_goal(OTHER_USER, GoalCreate(name="Boat", target_amount="5000"))

    assert client.get(f"/api/goals/{theirs.id}").status_code == 404
    assert client.put(f"/api/goals/{theirs.id}", json={"completed": True}).status_code == 404
    assert client.delete(f"/api/goals/{theirs.id}").status_code == 404
    assert seeded_storage.get_goal(theirs.id).completed is False


def test_effective_user_comes_from_dependency(app, seeded_storage):
    seeded_storage.create_expense(OTHER_USER, ExpenseCreate(description="Mine", amount="5", date="2023-09-20"))
    app.dependency_overrides[get_current_user] = lambda: OTHER_USER

    with TestClient(app) as c:
        assert [e["description"] for e in c.get("/api/expenses").json()] == ["Mine"]
        assert c.get("/api/expenses/1").status_code == 404


# ── Categories ────────────────────────────────────────────────────
def test_categories_global_and_own(client, seeded_storage):
    seeded_storage.create_category(CategoryCreate(name="Golf", icon="golf_course"), user_id=OTHER_USER)

    res = client.post("/api/categories", json={"name": "Pets", "icon": "pets"})
    assert res.status_code == 201
    mine = res.json()
    assert mine["userId"] == 1

    names = [c["name"] for c in client.get("/api/categories").json()]
    assert "Pets" in names
    assert "Golf" not in names
    assert len(names) == 9

    scoped = client.get(f"/api/categories?userId={OTHER_USER}").json()
    assert all(c["userId"] is None for c in scoped)
    assert len(scoped) == 8


def test_other_users_category_cannot_be_read_or_used(client, seeded_storage):
    theirs = seeded_storage.create_category(CategoryCreate(name="Golf", icon="golf_course"), user_id=OTHER_USER)

    assert client.get(f"/api/categories/{theirs.id}").status_code == 404
    res = client.post(
        "/api/expenses", json={"description": "Clubs", "amount": 80, "date": "2023-09-18", "categoryId": theirs.id}
    )
    assert res.status_code == 400


# ── Goals ─────────────────────────────────────────────────────────
def test_goals_ordered_by_target_date(client):
    names = [g["name"] for g in client.get("/api/goals").json()]
    assert names == ["Emergency Fund", "Pay Off Credit Card"]


def test_create_goal_starts_incomplete(client):
    res = client.post("/api/goals", json={"name": "Laptop", "targetAmount": 800, "currentAmount": 800})
    assert res.status_code == 201
    body = res.json()
    assert body["completed"] is False
    assert body["targetDate"] is None


def test_create_goal_validation(client):
    res = client.post("/api/goals", json={"name": "", "targetAmount": 0, "currentAmount": -1})
    assert res.status_code == 400
    assert {e["field"] for e in res.json()["errors"]} == {"name", "targetAmount", "currentAmount"}


def test_goals_summary(client):
    client.put("/api/goals/2", json={"completed": True})
    body = client.get("/api/goals/summary").json()

    assert body["completed"] == 1
    assert body["active"] == 1
    first, second = body["goals"]
    assert first["goal"]["name"] == "Emergency Fund"
    assert first["progress"] == 45
    assert first["status"] == "45% Complete"
    assert second["progress"] == 25
    assert second["status"] == "Completed"


def test_delete_goal(client):
    assert client.delete("/api/goals/1").status_code == 204
    assert [g["id"] for g in client.get("/api/goals").json()] == [2]


# ── Budgets ───────────────────────────────────────────────────────
def test_list_budgets_for_month(client):
    assert len(client.get("/api/budgets?month=9&year=2023").json()) == 6
    assert client.get("/api/budgets?month=10&year=2023").json() == []


def test_budget_window_validation(client):
    res = client.get("/api/budgets?month=13&year=1999")
    assert res.status_code == 400
    assert {e["field"] for e in res.json()["errors"]} == {"month", "year"}


def test_set_budget_creates_then_updates(client):
    payload = {"amount": 120, "categoryId": 7, "month": 9, "year": 2023}

    created = client.post("/api/budgets", json=payload)
    assert created.status_code == 201

    updated = client.post("/api/budgets", json={**payload, "amount": "150.50"})
    assert updated.status_code == 200
    assert updated.json()["id"] == created.json()["id"]
    assert money(updated.json()["amount"]) == Decimal("150.50")

    assert len(client.get("/api/budgets?month=9&year=2023").json()) == 7


def test_set_budget_unknown_category(client):
    res = client.post("/api/budgets", json={"amount": 10, "categoryId": 99, "month": 9, "year": 2023})
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "categoryId"


def test_budget_overview(client):
    body = client.get("/api/budgets/overview?month=9&year=2023").json()
    lines = {line["name"]: line for line in body["categories"]}

    assert money(lines["Food"]["spent"]) == Decimal("90.75")
    assert lines["Food"]["percentage"] == 30
    assert lines["Housing"]["percentage"] == 100
    assert lines["Housing"]["overspent"] is False
    assert lines["Utilities"]["percentage"] == 58
    assert lines["Transportation"]["percentage"] == 3
    assert money(lines["Healthcare"]["spent"]) == Decimal("0")
    assert money(body["totalBudget"]) == Decimal("1500")
    assert money(body["totalSpent"]) == Decimal("833.82")
    assert body["totalPercentage"] == 56


def test_budget_overview_flags_overspend(client):
    client.post("/api/expenses", json={"description": "Plumber", "amount": 200, "date": "2023-09-21", "categoryId": 1})
    body = client.get("/api/budgets/overview?month=9&year=2023").json()
    housing = next(line for line in body["categories"] if line["name"] == "Housing")

    assert housing["percentage"] == 100
    assert housing["overspent"] is True
    assert money(housing["remaining"]) == Decimal("-200")


def test_budget_overview_empty_month(client):
    body = client.get("/api/budgets/overview?month=1&year=2030").json()
    assert body["categories"] == []
    assert body["totalPercentage"] == 0
    assert (body["month"], body["year"]) == (1, 2030)


def test_budget_window_defaults_to_today(client):
    today = date.today()
    body = client.get("/api/budgets/overview").json()
    assert (body["month"], body["year"]) == (today.month, today.year)


# ── Resources / articles ──────────────────────────────────────────
def test_resources_and_type_filter(client):
    assert len(client.get("/api/resources").json()) == 3
    housing = client.get("/api/resources?type=housing").json()
    assert [r["name"] for r in housing] == ["Community Action Agency"]
    assert client.get("/api/resources?type=spaceships").status_code == 400


def test_bookmark_toggle(client):
    assert client.post("/api/resources/1/bookmark").json()["bookmarked"] is True
    assert client.get("/api/resources/1").json()["bookmarked"] is True
    assert client.post("/api/resources/1/bookmark").json()["bookmarked"] is False
    assert client.post("/api/resources/99/bookmark").status_code == 404


def test_articles(client):
    assert len(client.get("/api/articles").json()) == 7
    credit = client.get("/api/articles?category=credit").json()
    assert [a["title"] for a in credit] == ["Understanding Credit Scores"]
    assert "imageUrl" in credit[0]
    assert client.get("/api/articles/99").status_code == 404


# ── Failures ──────────────────────────────────────────────────────
class BrokenStorage(MemStorage):
    def get_expenses(self, user_id):
        raise RuntimeError("disk on fire")


def test_storage_failure_is_generic_500(caplog):
    with TestClient(create_app(storage=BrokenStorage())) as c:
        res = c.get("/api/expenses")

    assert res.status_code == 500
    assert res.json() == {"detail": "Internal server error"}
    assert "disk on fire" not in res.text
    assert "disk on fire" in caplog.text


def test_importing_main_builds_no_storage(monkeypatch):
    def refuse(*args, **kwargs):
        raise AssertionError("storage built at import time")

    with monkeypatch.context() as m:
        m.setattr(database, "create_storage", refuse)
        importlib.reload(main)
    importlib.reload(main)

    assert not hasattr(main, "app")


def test_app_factory_uses_configured_storage(monkeypatch):
    store = MemStorage()
    monkeypatch.setattr(main, "create_storage", lambda: store)
    assert main.create_app().state.storage is store


# ── Money and dates on the wire ───────────────────────────────────
@pytest.mark.parametrize("sent, returned", [("1e2", "100.00"), ("45.5", "45.50"), (12, "12.00"), ("0.1", "0.10")])
def test_money_comes_back_in_cents(client, sent, returned):
    res = client.post("/api/expenses", json={"description": "Snacks", "amount": sent, "date": "2023-09-18"})
    assert res.status_code == 201
    assert res.json()["amount"] == returned
    assert client.get(f"/api/expenses/{res.json()['id']}").json()["amount"] == returned


def test_seeded_money_reads_back_in_cents(client):
    rent = next(e for e in client.get("/api/expenses").json() if e["description"] == "Rent")
    assert rent["amount"] == "650.00"

    goal = client.get("/api/goals/1").json()
    assert (goal["targetAmount"], goal["currentAmount"]) == ("1000.00", "450.00")


def test_updated_money_in_cents(client):
    assert client.put("/api/expenses/2", json={"amount": "15.5"}).json()["amount"] == "15.50"
    assert client.put("/api/goals/1", json={"currentAmount": 500}).json()["currentAmount"] == "500.00"


def test_overview_money_in_cents(client):
    body = client.get("/api/budgets/overview?month=9&year=2023").json()
    healthcare = next(line for line in body["categories"] if line["name"] == "Healthcare")

    assert (healthcare["budget"], healthcare["spent"], healthcare["remaining"]) == ("100.00", "0.00", "100.00")
    assert (body["totalBudget"], body["totalSpent"], body["totalRemaining"]) == ("1500.00", "833.82", "666.18")


@pytest.mark.parametrize("when", [1693872000, "1693872000", "2023-09-05T00:00:00", "2023/09/05", "05-09-2023", True])
def test_expense_date_must_be_iso(client, when):
    res = client.post("/api/expenses", json={"description": "x", "amount": 1, "date": when})
    assert res.status_code == 400
    assert [e["field"] for e in res.json()["errors"]] == ["date"]

    res = client.put("/api/expenses/2", json={"date": when})
    assert res.status_code == 400
    assert client.get("/api/expenses/2").json()["date"] == "2023-09-14"


@pytest.mark.parametrize("when", [1693872000, "2023-09-05T00:00:00"])
def test_goal_target_date_must_be_iso(client, when):
    res = client.post("/api/goals", json={"name": "Trip", "targetAmount": 500, "targetDate": when})
    assert res.status_code == 400
    assert [e["field"] for e in res.json()["errors"]] == ["targetDate"]
    assert client.put("/api/goals/1", json={"targetDate": when}).status_code == 400


def test_impossible_iso_date_rejected(client):
    res = client.post("/api/expenses", json={"description": "x", "amount": 1, "date": "2023-02-30"})
    assert res.status_code == 400
