from datetime import datetime, timezone

from app.core.config import settings
from app.db.storage import DEFAULT_CATEGORIES


def post_expense(client, amount="10.00", category_id=1, date="2025-11-12T09:00:00Z", description="Coffee"):
    return client.post(
        "/api/expenses",
        json={"amount": amount, "description": description, "categoryId": category_id, "date": date},
    )


def test_root_and_health(client):
    assert client.get("/").status_code == 200
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["categories"] == len(DEFAULT_CATEGORIES)


def test_list_categories(client):
    response = client.get("/api/categories")
    assert response.status_code == 200
    body = response.json()
    assert len(body) == len(DEFAULT_CATEGORIES)
    assert body[0] == {
        "id": 1,
        "name": "Food & Dining",
        "icon": "fas fa-utensils",
        "color": "red",
        "description": "Restaurants, cafes, groceries",
    }


def test_create_category(client):
    response = client.post("/api/categories", json={"name": "Pets", "icon": "fas fa-paw", "color": "green"})
    assert response.status_code == 201
    body = response.json()
    assert body["id"] == len(DEFAULT_CATEGORIES) + 1
    assert body["description"] is None
    assert client.get(f"/api/categories/{body['id']}").json()["name"] == "Pets"


def test_create_category_rejects_invalid_body(client):
    response = client.post("/api/categories", json={"name": "Pets"})
    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Invalid category data"
    assert {tuple(err["loc"])[-1] for err in body["errors"]} == {"icon", "color"}


def test_get_missing_category(client):
    assert client.get("/api/categories/999").status_code == 404


def test_create_and_list_expense(client, store):
    response = post_expense(client, category_id=2)
    assert response.status_code == 201
    created = response.json()
    assert created["id"] == 1
    assert created["amount"] == "10.00"
    assert created["categoryId"] == 2
    assert created["category"]["name"] == "Transportation"
    assert "createdAt" in created

    listed = client.get("/api/expenses").json()
    assert listed == [created]
    assert client.get("/api/expenses/1").json() == created

    # Dropping the category hides the expense from every read
    store.delete_category(2)
    assert client.get("/api/expenses").json() == []
    assert client.get("/api/expenses/1").status_code == 404


def test_list_expenses_newest_first(client):
    post_expense(client, date="2025-11-01T09:00:00Z")
    post_expense(client, date="2025-11-20T09:00:00Z")
    post_expense(client, date="2025-11-10T09:00:00Z")
    dates = [item["date"][:10] for item in client.get("/api/expenses").json()]
    assert dates == ["2025-11-20", "2025-11-10", "2025-11-01"]


def test_create_expense_rejects_invalid_body(client):
    response = post_expense(client, amount="not-a-number")
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid expense data"
    assert response.json()["errors"]

    response = client.post("/api/expenses", json={"amount": "1.00", "categoryId": 1})
    assert response.status_code == 400
    missing = {tuple(err["loc"])[-1] for err in response.json()["errors"]}
    assert missing == {"description", "date"}


def test_create_expense_with_unknown_category_fails(client):
    response = post_expense(client, category_id=999)
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to create expense"
    assert client.get("/api/expenses").json() == []


def test_update_expense_changes_only_amount(client):
    created = post_expense(client, category_id=3, description="Shoes").json()
    response = client.put(f"/api/expenses/{created['id']}", json={"amount": "55.5"})
    assert response.status_code == 200
    updated = response.json()
    assert updated["amount"] == "55.50"
    for field in ("description", "categoryId", "date", "createdAt", "category"):
        assert updated[field] == created[field]


def test_update_missing_expense(client):
    assert client.put("/api/expenses/42", json={"amount": "1.00"}).status_code == 404


def test_update_with_unknown_category_reports_not_found(client):
    created = post_expense(client).json()
    response = client.put(f"/api/expenses/{created['id']}", json={"categoryId": 999})
    assert response.status_code == 404
    assert client.get(f"/api/expenses/{created['id']}").json() == created


def test_update_rejects_invalid_id(client):
    response = client.put("/api/expenses/abc", json={"amount": "1.00"})
    assert response.status_code == 400


def test_delete_expense(client):
    assert client.delete("/api/expenses/1").status_code == 404
    created = post_expense(client).json()
    assert client.delete(f"/api/expenses/{created['id']}").status_code == 204
    assert client.delete(f"/api/expenses/{created['id']}").status_code == 404


def test_ids_not_reused_after_delete(client):
    for _ in range(3):
        post_expense(client)
    assert client.delete("/api/expenses/3").status_code == 204
    assert post_expense(client).json()["id"] == 4


def test_category_analytics(client):
    post_expense(client, amount="5.00", category_id=1)
    post_expense(client, amount="3.00", category_id=2)
    post_expense(client, amount="15.00", category_id=1)

    body = client.get("/api/analytics/categories").json()
    assert [(item["category"]["id"], item["total"], item["count"]) for item in body] == [
        (1, 20.0, 2),
        (2, 3.0, 1),
    ]


def test_summary_analytics(client, freeze):
    freeze(datetime(2025, 11, 12, 15, 0, tzinfo=timezone.utc))
    post_expense(client, amount="10.00", date="2025-11-12T09:00:00Z")

    body = client.get("/api/analytics/summary").json()
    assert body["todayTotal"] == 10.0
    assert body["weekTotal"] == 10.0
    assert body["monthTotal"] == 10.0
    assert body["averageDaily"] == round(10.0 / 12, 2)


def test_summary_analytics_empty_store(client):
    body = client.get("/api/analytics/summary").json()
    assert body == {"todayTotal": 0.0, "weekTotal": 0.0, "monthTotal": 0.0, "averageDaily": 0.0}


def test_range_analytics(client):
    for day in ("01", "05", "10"):
        post_expense(client, amount="2.50", date=f"2025-11-{day}T00:00:00Z")

    response = client.get(
        "/api/analytics/range",
        params={"start": "2025-11-05T00:00:00Z", "end": "2025-11-10T00:00:00Z"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert body["total"] == 5.0
    assert [item["date"][:10] for item in body["expenses"]] == ["2025-11-10", "2025-11-05"]


def test_range_analytics_rejects_reversed_range(client):
    response = client.get(
        "/api/analytics/range",
        params={"start": "2025-11-10T00:00:00Z", "end": "2025-11-05T00:00:00Z"},
    )
    assert response.status_code == 400


def test_trend_daily_and_top(client, freeze):
    now = datetime(2025, 11, 12, 15, 0, tzinfo=timezone.utc)
    freeze(now)
    post_expense(client, amount="12.00", date=now.isoformat())
    post_expense(client, amount="30.00", date=now.isoformat())

    trend = client.get("/api/analytics/trend").json()
    assert trend == {"thisWeekTotal": 42.0, "lastWeekTotal": 0.0, "change": 0.0}

    daily = client.get("/api/analytics/daily", params={"days": 3}).json()
    assert len(daily) == 3
    assert daily[-1]["date"] == now.date().isoformat()
    assert daily[-1]["total"] == 42.0
    assert daily[-1]["count"] == 2

    top = client.get("/api/analytics/top", params={"limit": 1}).json()
    assert [item["amount"] for item in top] == ["30.00"]

    assert client.get("/api/analytics/daily", params={"days": 0}).status_code == 400


def test_export_expenses_csv(client):
    post_expense(client, amount="4.20", description="Bus", category_id=2)
    post_expense(client, amount="9.99", description="Lunch", category_id=1)

    response = client.get("/api/expenses/export")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.splitlines()
    assert lines[0] == "id,date,description,category,amount"
    assert len(lines) == 3
    assert lines[1].endswith(",Bus,Transportation,4.20")


def test_naive_expense_date_uses_configured_zone(client, monkeypatch):
    monkeypatch.setattr(settings, "TIMEZONE", "America/New_York")
    created = post_expense(client, date="2025-11-05T10:00:00").json()
    assert created["date"] == "2025-11-05T10:00:00-05:00"

    # Naive bounds are read in the same zone
    naive = {"start": "2025-11-05T10:00:00", "end": "2025-11-05T10:00:00"}
    assert client.get("/api/analytics/range", params=naive).json()["count"] == 1

    utc = {"start": "2025-11-05T15:00:00Z", "end": "2025-11-05T15:00:00Z"}
    assert client.get("/api/analytics/range", params=utc).json()["count"] == 1


def test_summary_uses_store_zone(client, freeze, monkeypatch):
    monkeypatch.setattr(settings, "TIMEZONE", "America/New_York")
    # 22:00 on the 12th in New York, already the 13th in UTC
    freeze(datetime(2025, 11, 13, 3, 0, tzinfo=timezone.utc), tz="America/New_York")
    post_expense(client, amount="8.00", date="2025-11-12T21:30:00")
    post_expense(client, amount="4.00", date="2025-11-12T00:30:00")

    body = client.get("/api/analytics/summary").json()
    assert body["todayTotal"] == 12.0
    assert body["monthTotal"] == 12.0
    assert body["averageDaily"] == 1.0  # 12 / 12


def test_list_expenses_filters_and_sorts(client, freeze):
    freeze(datetime(2025, 11, 12, 15, 0, tzinfo=timezone.utc))
    post_expense(client, amount="12.00", description="Team lunch", category_id=1, date="2025-11-12T12:00:00Z")
    post_expense(client, amount="40.00", description="Train ticket", category_id=2, date="2025-11-10T08:00:00Z")
    post_expense(client, amount="5.00", description="LUNCH snack", category_id=1, date="2025-11-03T12:00:00Z")
    post_expense(client, amount="90.00", description="Lunch with family", category_id=1, date="2025-10-20T12:00:00Z")

    def descriptions(**params):
        response = client.get("/api/expenses", params=params)
        assert response.status_code == 200
        return [item["description"] for item in response.json()]

    assert descriptions() == ["Team lunch", "Train ticket", "LUNCH snack", "Lunch with family"]
    assert descriptions(search="lunch") == ["Team lunch", "LUNCH snack", "Lunch with family"]
    assert descriptions(categoryId=2) == ["Train ticket"]
    assert descriptions(period="today") == ["Team lunch"]
    assert descriptions(period="week") == ["Team lunch", "Train ticket"]
    assert descriptions(period="month") == ["Team lunch", "Train ticket", "LUNCH snack"]
    assert descriptions(sort="amount-low") == ["LUNCH snack", "Team lunch", "Train ticket", "Lunch with family"]
    assert descriptions(sort="date-oldest", search="lunch", categoryId=1, period="month") == [
        "LUNCH snack",
        "Team lunch",
    ]


def test_list_expenses_rejects_unknown_sort(client):
    assert client.get("/api/expenses", params={"sort": "random"}).status_code == 400
    assert client.get("/api/expenses", params={"period": "year"}).status_code == 400
