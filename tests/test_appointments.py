START = "2026-03-02T09:00:00Z"
END = "2026-03-02T11:00:00Z"


def _appointment(client, auth, customer, **overrides):
    body = {
        "customerId": customer["id"],
        "appointmentType": "survey",
        "scheduledStart": START,
        "scheduledEnd": END,
        "location": "1 High Street",
    }
    body.update(overrides)
    r = client.post("/api/appointments", json=body, headers=auth)
    assert r.status_code == 201, r.text
    return r.json()["data"]


def test_create_appointment(client, auth, customer):
    appt = _appointment(client, auth, customer)
    assert appt["status"] == "scheduled"
    assert appt["scheduledStart"].startswith("2026-03-02T09:00:00")


def test_end_must_follow_start(client, auth, customer):
    r = client.post(
        "/api/appointments",
        json={
            "customerId": customer["id"],
            "appointmentType": "survey",
            "scheduledStart": END,
            "scheduledEnd": START,
        },
        headers=auth,
    )
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "scheduledEnd"


def test_update_checks_the_resulting_window(client, auth, customer):
    appt = _appointment(client, auth, customer)
    # only the start is sent, but it lands after the stored end
    r = client.put(
        f"/api/appointments/{appt['id']}",
        json={"scheduledStart": "2026-03-02T12:00:00Z"},
        headers=auth,
    )
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "scheduledEnd"

    r = client.put(
        f"/api/appointments/{appt['id']}",
        json={"scheduledStart": "2026-03-02T10:00:00Z", "status": "confirmed"},
        headers=auth,
    )
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "confirmed"


def test_foreign_customer_is_not_found(client, other_auth, customer):
    r = client.post(
        "/api/appointments",
        json={
            "customerId": customer["id"],
            "appointmentType": "survey",
            "scheduledStart": START,
            "scheduledEnd": END,
        },
        headers=other_auth,
    )
    assert r.status_code == 404


def test_checkin_then_complete(client, auth, customer):
    appt = _appointment(client, auth, customer)

    r = client.post(f"/api/appointments/{appt['id']}/checkin", headers=auth)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["status"] == "in_progress"
    assert data["actualStart"]

    r = client.post(
        f"/api/appointments/{appt['id']}/complete",
        json={"notes": "Boiler flue needs extending"},
        headers=auth,
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["status"] == "completed"
    assert data["actualEnd"]
    assert data["notes"] == "Boiler flue needs extending"


def test_complete_before_checkin_time_is_rejected(client, auth, customer):
    appt = _appointment(client, auth, customer)
    client.post(
        f"/api/appointments/{appt['id']}/checkin",
        json={"actualStart": "2026-03-02T09:05:00Z"},
        headers=auth,
    )
    r = client.post(
        f"/api/appointments/{appt['id']}/complete",
        json={"actualEnd": "2026-03-02T09:00:00Z"},
        headers=auth,
    )
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "actualEnd"


def test_cancel(client, auth, customer):
    appt = _appointment(client, auth, customer)
    r = client.post(
        f"/api/appointments/{appt['id']}/cancel",
        json={"cancelledReason": "Customer away"},
        headers=auth,
    )
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "cancelled"
    assert r.json()["data"]["cancelledReason"] == "Customer away"


def test_list_by_window_and_status(client, auth, customer):
    early = _appointment(client, auth, customer)
    late = _appointment(
        client, auth, customer, scheduledStart="2026-04-10T09:00:00Z", scheduledEnd="2026-04-10T10:00:00Z"
    )

    r = client.get(
        "/api/appointments",
        params={"start": "2026-04-01T00:00:00Z", "end": "2026-04-30T00:00:00Z"},
        headers=auth,
    )
    assert [a["id"] for a in r.json()["data"]] == [late["id"]]

    r = client.get("/api/appointments", headers=auth)
    assert [a["id"] for a in r.json()["data"]] == [early["id"], late["id"]]

    client.post(f"/api/appointments/{early['id']}/cancel", headers=auth)
    r = client.get("/api/appointments", params={"status": "cancelled"}, headers=auth)
    assert [a["id"] for a in r.json()["data"]] == [early["id"]]


def test_delete_appointment(client, auth, customer):
    appt = _appointment(client, auth, customer)
    assert client.delete(f"/api/appointments/{appt['id']}", headers=auth).status_code == 200
    assert client.get(f"/api/appointments/{appt['id']}", headers=auth).status_code == 404


def test_other_account_cannot_touch_appointment(client, auth, other_auth, customer):
    appt = _appointment(client, auth, customer)
    url = f"/api/appointments/{appt['id']}"

    r = client.get(url, headers=other_auth)
    assert r.status_code == 404
    assert r.json()["message"] == "Appointment not found"
    assert client.put(url, json={"location": "Elsewhere"}, headers=other_auth).status_code == 404
    for action in ("checkin", "complete", "cancel"):
        assert client.post(f"{url}/{action}", headers=other_auth).status_code == 404
    assert client.delete(url, headers=other_auth).status_code == 404

    r = client.get(url, headers=auth)
    assert r.json()["data"]["status"] == "scheduled"
    assert r.json()["data"]["location"] == "1 High Street"
