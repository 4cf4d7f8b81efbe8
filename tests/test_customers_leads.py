def _make_customer(client, auth, **overrides):
    body = {"firstName": "Sam", "lastName": "Smith", "postcode": "M1 1AE"}
    body.update(overrides)
    r = client.post("/api/customers", json=body, headers=auth)
    assert r.status_code == 201, r.text
    return r.json()["data"]


# --- customers ---
def test_create_customer_defaults(client, auth, customer):
    assert customer["firstName"] == "Jane"
    assert customer["country"] == "UK"
    assert customer["tags"] == ["boiler", "vip"]
    assert customer["constructionYear"] == 1965


def test_create_customer_requires_postcode(client, auth):
    r = client.post("/api/customers", json={"firstName": "No", "lastName": "Postcode"}, headers=auth)
    assert r.status_code == 400
    fields = [d["field"] for d in r.json()["details"]]
    assert "postcode" in fields


def test_construction_year_bounds(client, auth):
    r = client.post(
        "/api/customers",
        json={"firstName": "Old", "lastName": "House", "postcode": "YO1 7HH", "constructionYear": 1500},
        headers=auth,
    )
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "constructionYear"


def test_bad_email_is_rejected(client, auth):
    r = client.post(
        "/api/customers",
        json={"firstName": "Bad", "lastName": "Mail", "postcode": "B1 1AA", "email": "not-an-email"},
        headers=auth,
    )
    assert r.status_code == 400


def test_list_customers_paginates(client, auth):
    for i in range(3):
        _make_customer(client, auth, lastName=f"Page{i}")

    r = client.get("/api/customers", params={"pageSize": 2}, headers=auth)
    assert r.status_code == 200
    body = r.json()
    assert len(body["data"]) == 2
    assert body["pagination"] == {"page": 1, "pageSize": 2, "total": 3, "totalPages": 2}

    r = client.get("/api/customers", params={"pageSize": 2, "page": 2}, headers=auth)
    assert len(r.json()["data"]) == 1

    r = client.get("/api/customers", params={"pageSize": 2, "page": 9}, headers=auth)
    assert r.status_code == 200
    assert r.json()["data"] == []


def test_page_size_is_bounded(client, auth):
    r = client.get("/api/customers", params={"pageSize": 500}, headers=auth)
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "pageSize"


def test_list_customers_newest_first(client, auth):
    first = _make_customer(client, auth, lastName="First")
    second = _make_customer(client, auth, lastName="Second")
    ids = [c["id"] for c in client.get("/api/customers", headers=auth).json()["data"]]
    assert ids.index(second["id"]) < ids.index(first["id"])


def test_search_and_tag_filters(client, auth, customer):
    _make_customer(client, auth, lastName="Other", tags=["solar"])

    r = client.get("/api/customers", params={"search": "ls1"}, headers=auth)
    assert [c["id"] for c in r.json()["data"]] == [customer["id"]]

    r = client.get("/api/customers", params={"tags": "vip,heatpump"}, headers=auth)
    assert [c["id"] for c in r.json()["data"]] == [customer["id"]]

    r = client.get("/api/customers", params={"propertyType": "semi"}, headers=auth)
    assert [c["id"] for c in r.json()["data"]] == [customer["id"]]


def test_update_customer_partial(client, auth, customer):
    r = client.put(f"/api/customers/{customer['id']}", json={"city": "York"}, headers=auth)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["city"] == "York"
    assert data["firstName"] == "Jane"


def test_update_customer_cannot_null_required(client, auth, customer):
    r = client.put(f"/api/customers/{customer['id']}", json={"postcode": None}, headers=auth)
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "postcode"


def test_delete_customer(client, auth):
    c = _make_customer(client, auth)
    r = client.delete(f"/api/customers/{c['id']}", headers=auth)
    assert r.status_code == 200
    assert client.get(f"/api/customers/{c['id']}", headers=auth).status_code == 404


def test_customer_visits(client, auth, customer, visit):
    r = client.get(f"/api/customers/{customer['id']}/visits", headers=auth)
    assert r.status_code == 200
    assert [v["id"] for v in r.json()["data"]] == [visit["id"]]


# --- tenancy ---
def test_other_account_cannot_see_customer(client, auth, other_auth, customer):
    r = client.get(f"/api/customers/{customer['id']}", headers=other_auth)
    assert r.status_code == 404
    assert r.json() == {"error": "NotFoundError", "message": "Customer not found"}

    assert client.put(f"/api/customers/{customer['id']}", json={"city": "X"}, headers=other_auth).status_code == 404
    assert client.delete(f"/api/customers/{customer['id']}", headers=other_auth).status_code == 404

    listed = client.get("/api/customers", headers=other_auth).json()["data"]
    assert customer["id"] not in [c["id"] for c in listed]


def test_cannot_create_lead_for_foreign_customer(client, other_auth, customer):
    r = client.post("/api/leads", json={"customerId": customer["id"]}, headers=other_auth)
    assert r.status_code == 404


# --- leads ---
def test_create_lead_defaults_assignee_to_creator(client, account, auth, customer):
    r = client.post("/api/leads", json={"customerId": customer["id"], "source": "website"}, headers=auth)
    assert r.status_code == 201, r.text
    lead = r.json()["data"]
    assert lead["status"] == "new"
    assert lead["priority"] == "medium"
    assert lead["assignedTo"] == account["_user"]["id"]


def test_lead_estimated_value_is_decimal_string(client, auth, customer):
    r = client.post(
        "/api/leads",
        json={"customerId": customer["id"], "estimatedValue": "3500.50"},
        headers=auth,
    )
    assert r.json()["data"]["estimatedValue"] == "3500.50"


def test_lead_rejects_unknown_status(client, auth, customer):
    r = client.post("/api/leads", json={"customerId": customer["id"], "status": "won"}, headers=auth)
    assert r.status_code == 400


def test_lead_assignee_must_be_in_account(client, auth, other_account, customer):
    r = client.post(
        "/api/leads",
        json={"customerId": customer["id"], "assignedTo": other_account["_user"]["id"]},
        headers=auth,
    )
    assert r.status_code == 404
    assert r.json()["message"] == "User not found"


def test_update_and_filter_leads(client, auth, customer):
    lead = client.post("/api/leads", json={"customerId": customer["id"]}, headers=auth).json()["data"]
    r = client.put(
        f"/api/leads/{lead['id']}",
        json={"status": "lost", "lostReason": "Went with a competitor"},
        headers=auth,
    )
    assert r.status_code == 200
    assert r.json()["data"]["lostReason"] == "Went with a competitor"

    r = client.get("/api/leads", params={"status": "lost"}, headers=auth)
    assert lead["id"] in [item["id"] for item in r.json()["data"]]
    r = client.get("/api/leads", params={"status": "new"}, headers=auth)
    assert lead["id"] not in [item["id"] for item in r.json()["data"]]


def test_lead_status_cannot_be_nulled(client, auth, customer):
    lead = client.post("/api/leads", json={"customerId": customer["id"]}, headers=auth).json()["data"]
    r = client.put(f"/api/leads/{lead['id']}", json={"status": None}, headers=auth)
    assert r.status_code == 400


def test_delete_lead(client, auth, customer):
    lead = client.post("/api/leads", json={"customerId": customer["id"]}, headers=auth).json()["data"]
    assert client.delete(f"/api/leads/{lead['id']}", headers=auth).status_code == 200
    assert client.get(f"/api/leads/{lead['id']}", headers=auth).status_code == 404


def test_other_account_cannot_touch_lead(client, other_auth, auth, customer):
    lead = client.post("/api/leads", json={"customerId": customer["id"]}, headers=auth).json()["data"]
    url = f"/api/leads/{lead['id']}"

    r = client.get(url, headers=other_auth)
    assert r.status_code == 404
    assert r.json()["message"] == "Lead not found"
    assert client.put(url, json={"status": "lost"}, headers=other_auth).status_code == 404
    assert client.delete(url, headers=other_auth).status_code == 404

    assert client.get(url, headers=auth).json()["data"]["status"] == lead["status"]
