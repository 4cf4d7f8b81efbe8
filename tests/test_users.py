from conftest import PASSWORD, unique_email


def _member(client, auth, role="surveyor"):
    email = unique_email(role)
    r = client.post(
        "/api/users",
        json={"email": email, "name": "Field Surveyor", "password": PASSWORD, "role": role},
        headers=auth,
    )
    assert r.status_code == 201, r.text
    return r.json()["data"], email


def _login(client, email, password=PASSWORD):
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    client.cookies.clear()
    return r


def _bearer(client, email):
    r = _login(client, email)
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['data']['accessToken']}"}


def test_admin_creates_member(client, account, auth):
    member, _ = _member(client, auth)
    assert member["role"] == "surveyor"
    assert member["accountId"] == account["_user"]["accountId"]
    assert member["isActive"] is True


def test_member_email_is_globally_unique(client, auth, other_account):
    r = client.post(
        "/api/users",
        json={"email": other_account["_email"], "name": "Dup", "password": PASSWORD},
        headers=auth,
    )
    assert r.status_code == 409
    assert r.json()["message"] == "User with this email already exists"


def test_non_admin_cannot_manage_users(client, auth):
    _, email = _member(client, auth)
    surveyor = _bearer(client, email)

    r = client.post(
        "/api/users",
        json={"email": unique_email(), "name": "Nope", "password": PASSWORD},
        headers=surveyor,
    )
    assert r.status_code == 403
    assert r.json()["error"] == "ForbiddenError"

    # reading the team is fine
    assert client.get("/api/users", headers=surveyor).status_code == 200


def test_list_users_is_account_scoped(client, auth, other_auth):
    _member(client, auth)
    r = client.get("/api/users", headers=auth)
    assert r.json()["pagination"]["total"] == 2

    r = client.get("/api/users", headers=other_auth)
    assert r.json()["pagination"]["total"] == 1


def test_member_of_other_account_is_hidden(client, auth, other_auth):
    member, _ = _member(client, auth)
    assert client.get(f"/api/users/{member['id']}", headers=other_auth).status_code == 404
    assert client.put(f"/api/users/{member['id']}", json={"role": "office"}, headers=other_auth).status_code == 404


def test_profile_read_and_update(client, account, auth):
    r = client.get("/api/users/profile", headers=auth)
    assert r.json()["data"]["email"] == account["_email"]

    r = client.put("/api/users/profile", json={"phone": "0113 496 0000"}, headers=auth)
    assert r.status_code == 200
    assert r.json()["data"]["phone"] == "0113 496 0000"
    # the role cannot be changed through the profile
    r = client.put("/api/users/profile", json={"role": "readonly"}, headers=auth)
    assert r.json()["data"]["role"] == "admin"


def test_change_password(client, account, auth):
    r = client.post(
        "/api/users/change-password",
        json={"currentPassword": "Wrong-Password-1", "newPassword": "Brand-New-Pass-9"},
        headers=auth,
    )
    assert r.status_code == 401
    assert r.json()["message"] == "Current password is incorrect"

    r = client.post(
        "/api/users/change-password",
        json={"currentPassword": PASSWORD, "newPassword": "short"},
        headers=auth,
    )
    assert r.status_code == 400

    r = client.post(
        "/api/users/change-password",
        json={"currentPassword": PASSWORD, "newPassword": "Brand-New-Pass-9"},
        headers=auth,
    )
    assert r.status_code == 200

    assert _login(client, account["_email"]).status_code == 401
    assert _login(client, account["_email"], "Brand-New-Pass-9").status_code == 200


def test_admin_cannot_deactivate_self(client, account, auth):
    me = account["_user"]["id"]
    r = client.delete(f"/api/users/{me}", headers=auth)
    assert r.status_code == 400
    assert r.json()["message"] == "You cannot deactivate your own account"

    r = client.put(f"/api/users/{me}", json={"isActive": False}, headers=auth)
    assert r.status_code == 400


def test_deactivated_member_is_locked_out(client, auth):
    member, email = _member(client, auth)
    token = _bearer(client, email)

    r = client.delete(f"/api/users/{member['id']}", headers=auth)
    assert r.status_code == 200
    assert r.json()["message"] == "User deactivated successfully"

    r = _login(client, email)
    assert r.status_code == 401
    assert r.json()["message"] == "Account is disabled"
    assert client.get("/api/auth/me", headers=token).status_code == 401


def test_admin_changes_role(client, auth):
    member, _ = _member(client, auth)
    r = client.put(f"/api/users/{member['id']}", json={"role": "office"}, headers=auth)
    assert r.status_code == 200
    assert r.json()["data"]["role"] == "office"

    r = client.put(f"/api/users/{member['id']}", json={"role": "owner"}, headers=auth)
    assert r.status_code == 400
