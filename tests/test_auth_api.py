from jose import jwt

from payroll.core.tokens import TokenKind

COMPANY = {
    "name": "Acme Pvt Ltd",
    "entityType": "private_limited",
    "panVat": "PAN-1001",
    "address": "1 Main Road",
    "phone": "+977-1-5550000",
}


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


def _signup_and_login(client, email="alice@example.com", password="secret1"):
    assert client.post("/api/auth/signup", json={"email": email, "password": password}).status_code == 201
    res = client.post("/api/auth/login", json={"email": email, "password": password})
    assert res.status_code == 200
    return res.json()


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_signup_returns_user_without_tokens(client):
    res = client.post("/api/auth/signup", json={"email": "Alice@Example.com", "password": "secret1"})
    assert res.status_code == 201
    body = res.json()
    assert body["user"]["email"] == "alice@example.com"
    assert body["message"].startswith("Signup successful")
    assert "access_token" not in body


def test_signup_validation(client):
    short = client.post("/api/auth/signup", json={"email": "alice@example.com", "password": "12345"})
    bad_email = client.post("/api/auth/signup", json={"email": "not-an-email", "password": "secret1"})
    assert short.status_code == 422
    assert bad_email.status_code == 422

    body = short.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["message"].startswith("password:")
    assert body["details"][0]["loc"] == ["body", "password"]
    assert "12345" not in short.text
    assert bad_email.json()["message"].startswith("email:")


def test_duplicate_signup_conflict_envelope(client):
    client.post("/api/auth/signup", json={"email": "alice@example.com", "password": "secret1"})
    res = client.post("/api/auth/signup", json={"email": "ALICE@example.com", "password": "secret1"})
    assert res.status_code == 409
    assert res.json() == {"code": "CONFLICT", "message": "Email already in use"}


def test_login_failures_share_one_response(client):
    client.post("/api/auth/signup", json={"email": "alice@example.com", "password": "secret1"})
    wrong = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "nope"})
    unknown = client.post("/api/auth/login", json={"email": "bob@example.com", "password": "secret1"})

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"code": "UNAUTHORIZED", "message": "Invalid credentials"}
    assert wrong.headers["WWW-Authenticate"] == "Bearer"


def test_login_payload_shape(client):
    body = _signup_and_login(client)
    assert set(body) == {"user", "access_token", "refresh_token"}
    assert body["user"]["companyId"] is None
    assert jwt.get_unverified_claims(body["access_token"])["companyId"] is None


def test_protected_route_guard_messages(client, issuer):
    missing = client.get("/api/company/me")
    assert missing.status_code == 401
    assert missing.json()["message"] == "Missing token"

    garbage = client.get("/api/company/me", headers=_auth("garbage"))
    assert garbage.json()["message"] == "Invalid token"

    expired = issuer.sign(TokenKind.ACCESS, sub="u1", email="a@x.com", company_id=None, expires_in=-60)
    assert client.get("/api/company/me", headers=_auth(expired)).status_code == 401


def test_refresh_token_is_not_an_access_token(client):
    session = _signup_and_login(client)
    res = client.get("/api/company/me", headers=_auth(session["refresh_token"]))
    assert res.status_code == 401


def test_access_token_is_not_a_refresh_token(client):
    session = _signup_and_login(client)
    res = client.post("/api/auth/refresh", headers=_auth(session["access_token"]))
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid refresh token"


def test_refresh_requires_bearer(client):
    res = client.post("/api/auth/refresh")
    assert res.status_code == 401
    assert res.json()["message"] == "Missing token"


def test_refresh_rotation_over_http(client):
    session = _signup_and_login(client)

    first = client.post("/api/auth/refresh", headers=_auth(session["refresh_token"]))
    assert first.status_code == 200
    rotated = first.json()
    assert set(rotated) == {"access_token", "refresh_token"}

    replay = client.post("/api/auth/refresh", headers=_auth(session["refresh_token"]))
    assert replay.status_code == 401
    assert replay.json()["message"] == "Refresh not allowed"

    assert client.post("/api/auth/refresh", headers=_auth(rotated["refresh_token"])).status_code == 200


def test_logout_revokes_refresh(client):
    session = _signup_and_login(client)

    res = client.post("/api/auth/logout", headers=_auth(session["access_token"]))
    assert res.status_code == 200
    assert res.json() == {"success": True}

    # still idempotent while the access token lives
    assert client.post("/api/auth/logout", headers=_auth(session["access_token"])).status_code == 200

    after = client.post("/api/auth/refresh", headers=_auth(session["refresh_token"]))
    assert after.status_code == 401


def test_logout_requires_access_token(client):
    assert client.post("/api/auth/logout").status_code == 401


def test_tenant_appears_after_company_creation_and_refresh(client):
    session = _signup_and_login(client)
    access = session["access_token"]

    blocked = client.get("/api/departments", headers=_auth(access))
    assert blocked.status_code == 403
    assert blocked.json() == {"code": "FORBIDDEN", "message": "Company not set up for this account"}

    assert client.get("/api/company/me", headers=_auth(access)).json() is None

    created = client.post("/api/company", json=COMPANY, headers=_auth(access))
    assert created.status_code == 201
    company = created.json()
    assert company["panVat"] == "PAN-1001"
    assert company["userId"] == session["user"]["id"]

    # old token still carries no tenant
    assert client.get("/api/departments", headers=_auth(access)).status_code == 403

    rotated = client.post("/api/auth/refresh", headers=_auth(session["refresh_token"])).json()
    assert jwt.get_unverified_claims(rotated["access_token"])["companyId"] == company["id"]

    res = client.get("/api/departments", headers=_auth(rotated["access_token"]))
    assert res.status_code == 200
    assert res.json() == []


def test_company_lifecycle(client):
    access = _signup_and_login(client)["access_token"]

    missing = client.patch("/api/company/me", json={"name": "X"}, headers=_auth(access))
    assert missing.status_code == 404

    client.post("/api/company", json=COMPANY, headers=_auth(access))
    again = client.post("/api/company", json=COMPANY, headers=_auth(access))
    assert again.status_code == 400

    patched = client.patch("/api/company/me", json={"name": "Acme Two"}, headers=_auth(access))
    assert patched.status_code == 200
    assert patched.json()["name"] == "Acme Two"
    assert patched.json()["panVat"] == COMPANY["panVat"]


def test_company_pan_vat_must_be_unique(client):
    alice = _signup_and_login(client)["access_token"]
    bob = _signup_and_login(client, email="bob@example.com")["access_token"]

    assert client.post("/api/company", json=COMPANY, headers=_auth(alice)).status_code == 201
    res = client.post("/api/company", json={**COMPANY, "name": "Other"}, headers=_auth(bob))
    assert res.status_code == 409


def _tenant_session(client, email="alice@example.com", pan_vat="PAN-1001"):
    session = _signup_and_login(client, email=email)
    client.post("/api/company", json={**COMPANY, "panVat": pan_vat}, headers=_auth(session["access_token"]))
    rotated = client.post("/api/auth/refresh", headers=_auth(session["refresh_token"])).json()
    return rotated["access_token"]


def test_department_crud(client):
    access = _tenant_session(client)

    created = client.post("/api/departments", json={"name": "  Finance ", "description": "Books"}, headers=_auth(access))
    assert created.status_code == 201
    dept = created.json()
    assert dept["name"] == "Finance"

    dup = client.post("/api/departments", json={"name": "Finance"}, headers=_auth(access))
    assert dup.status_code == 409
    assert dup.json()["message"] == "Department name already exists."

    patched = client.patch(f"/api/departments/{dept['id']}", json={"description": "Ledgers"}, headers=_auth(access))
    assert patched.status_code == 200
    assert patched.json()["name"] == "Finance"
    assert patched.json()["description"] == "Ledgers"

    listed = client.get("/api/departments", headers=_auth(access)).json()
    assert [d["id"] for d in listed] == [dept["id"]]

    deleted = client.delete(f"/api/departments/{dept['id']}", headers=_auth(access))
    assert deleted.json() == {"success": True}
    assert client.delete(f"/api/departments/{dept['id']}", headers=_auth(access)).status_code == 404


def test_departments_are_isolated_per_company(client):
    alice = _tenant_session(client)
    bob = _tenant_session(client, email="bob@example.com", pan_vat="PAN-2002")

    dept = client.post("/api/departments", json={"name": "Finance"}, headers=_auth(alice)).json()

    assert client.get("/api/departments", headers=_auth(bob)).json() == []
    res = client.patch(f"/api/departments/{dept['id']}", json={"name": "Hijacked"}, headers=_auth(bob))
    assert res.status_code == 404
    # same name is fine in a different company
    assert client.post("/api/departments", json={"name": "Finance"}, headers=_auth(bob)).status_code == 201
