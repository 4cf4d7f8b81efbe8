from datetime import datetime, timedelta, timezone
from decimal import Decimal

from phm.core.clock import utcnow
from phm.services.reporting import group_revenue, period_key, resolve_window

QUOTE = {
    "title": "Combi swap",
    "lines": [{"description": "Boiler", "quantity": 1, "unitPrice": 1200}],
}


def _accepted_quote(client, auth, customer):
    quote = client.post("/api/quotes", json={"customerId": customer["id"], **QUOTE}, headers=auth).json()["data"]
    client.post(f"/api/quotes/{quote['id']}/send", headers=auth)
    client.post(f"/api/quotes/{quote['id']}/accept", headers=auth)
    return quote


def test_stats(client, auth, customer, visit):
    _accepted_quote(client, auth, customer)
    client.post("/api/quotes", json={"customerId": customer["id"], **QUOTE}, headers=auth)
    client.post("/api/leads", json={"customerId": customer["id"]}, headers=auth)
    client.post("/api/leads", json={"customerId": customer["id"], "status": "lost"}, headers=auth)
    client.post(
        "/api/appointments",
        json={
            "customerId": customer["id"],
            "appointmentType": "installation",
            "scheduledStart": "2030-01-07T08:00:00Z",
            "scheduledEnd": "2030-01-07T16:00:00Z",
        },
        headers=auth,
    )
    client.post(f"/api/visits/{visit['id']}/complete", headers=auth)

    r = client.get("/api/dashboard/stats", headers=auth)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["totalCustomers"] == 1
    assert data["activeLeads"] == 1
    assert data["quotesIssued"] == 2
    assert data["revenue"] == "1440.00"
    assert data["upcomingAppointments"] == 1
    assert data["completedSurveys"] == 1
    assert set(data["period"]) == {"start", "end"}


def test_stats_for_an_empty_account(client, auth):
    data = client.get("/api/dashboard/stats", headers=auth).json()["data"]
    assert data["totalCustomers"] == 0
    assert data["revenue"] == "0.00"


def test_stats_window_excludes_older_work(client, auth, customer):
    _accepted_quote(client, auth, customer)
    r = client.get(
        "/api/dashboard/stats",
        params={"startDate": "2020-01-01T00:00:00Z", "endDate": "2020-12-31T00:00:00Z"},
        headers=auth,
    )
    data = r.json()["data"]
    assert data["quotesIssued"] == 0
    assert data["revenue"] == "0.00"


def test_stats_are_account_scoped(client, auth, other_auth, customer):
    _accepted_quote(client, auth, customer)
    data = client.get("/api/dashboard/stats", headers=other_auth).json()["data"]
    assert data["totalCustomers"] == 0
    assert data["revenue"] == "0.00"


def test_revenue_grouped_by_month(client, auth, customer):
    _accepted_quote(client, auth, customer)
    _accepted_quote(client, auth, customer)

    r = client.get("/api/dashboard/revenue", headers=auth)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["groupBy"] == "month"
    assert data["revenue"] == [{"period": period_key(utcnow()), "total": "2880.00", "count": 2}]


def test_revenue_rejects_unknown_grouping(client, auth):
    r = client.get("/api/dashboard/revenue", params={"groupBy": "day"}, headers=auth)
    assert r.status_code == 400


def test_conversion(client, auth, customer):
    _accepted_quote(client, auth, customer)
    client.post("/api/quotes", json={"customerId": customer["id"], **QUOTE}, headers=auth)
    client.post("/api/leads", json={"customerId": customer["id"]}, headers=auth)

    data = client.get("/api/dashboard/conversion", headers=auth).json()["data"]
    assert data["leads"] == [{"status": "new", "count": 1}]
    assert data["quotes"] == [
        {"status": "accepted", "count": 1, "totalValue": "1440.00"},
        {"status": "draft", "count": 1, "totalValue": "1440.00"},
    ]


def test_surveyor_performance(client, account, auth, visit):
    client.post(f"/api/visits/{visit['id']}/complete", headers=auth)
    data = client.get("/api/dashboard/surveyor-performance", headers=auth).json()["data"]
    assert data["surveyors"] == [{"surveyorId": account["_user"]["id"], "completedSurveys": 1}]


def test_recent_activity(client, auth, customer, visit):
    quote = _accepted_quote(client, auth, customer)
    data = client.get("/api/dashboard/recent-activity", params={"limit": 5}, headers=auth).json()["data"]
    assert [q["id"] for q in data["quotes"]] == [quote["id"]]
    assert [v["id"] for v in data["surveys"]] == [visit["id"]]
    assert data["appointments"] == []

    assert client.get("/api/dashboard/recent-activity", params={"limit": 0}, headers=auth).status_code == 400


# --- reporting helpers ---
def test_period_key():
    moment = datetime(2025, 3, 14, 10, 0, tzinfo=timezone.utc)
    assert period_key(moment) == "2025-03"
    assert period_key(moment, "week") == "2025-W11"
    # ISO weeks can belong to the previous year
    assert period_key(datetime(2027, 1, 1, tzinfo=timezone.utc), "week") == "2026-W53"


def test_group_revenue_sorts_and_skips_undated():
    rows = [
        (datetime(2025, 4, 2, tzinfo=timezone.utc), Decimal("100.10")),
        (datetime(2025, 3, 30, tzinfo=timezone.utc), Decimal("50")),
        (None, Decimal("999")),
        (datetime(2025, 4, 20, tzinfo=timezone.utc), Decimal("0.905")),
    ]
    assert group_revenue(rows) == [
        {"period": "2025-03", "total": "50.00", "count": 1},
        {"period": "2025-04", "total": "101.01", "count": 2},
    ]


def test_resolve_window_defaults():
    end = datetime(2025, 6, 30, tzinfo=timezone.utc)
    start, resolved_end = resolve_window(None, end, default_days=30)
    assert resolved_end == end
    assert start == end - timedelta(days=30)

    start, end = resolve_window(None, None, default_days=7)
    assert end.tzinfo is not None
    assert end - start == timedelta(days=7)
