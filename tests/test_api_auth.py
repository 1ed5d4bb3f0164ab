"""Tests for signup, login and the authentication dependencies."""

TEST_PASSWORD = "secret123"


def _signup(client, **overrides):
    body = {
        "name": "Neha Admin",
        "email": "Neha@Example.com",
        "password": "secret123",
        "role": "Admin",
        "company_name": "Studio Nine Interiors",
    }
    body.update(overrides)
    return client.post("/api/auth/signup", json=body)


def test_signup_returns_token_and_joins_existing_company(client, company):
    response = _signup(client, company_name="studio nine interiors")
    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["token"]
    assert data["user"]["email"] == "neha@example.com"
    assert data["user"]["role"] == "Admin"
    assert data["company"]["id"] == company.id


def test_signup_creates_new_company(client):
    response = _signup(client, company_name="Fresh Spaces")
    assert response.status_code == 201
    assert response.json()["company"]["name"] == "Fresh Spaces"

    companies = client.get("/api/auth/companies").json()
    assert [c["name"] for c in companies] == ["Fresh Spaces"]


def test_signup_duplicate_email_conflicts(client):
    assert _signup(client).status_code == 201
    response = _signup(client, email="neha@example.com")
    assert response.status_code == 409
    assert response.json()["error"] == "User with this email already exists"


def test_signup_validation_error_envelope(client):
    response = _signup(client, email="not-an-email", role="Owner")
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Validation failed"
    assert {detail["field"] for detail in body["details"]} == {"email", "role"}


def test_login_and_me(client, admin_user):
    response = client.post("/api/auth/login", json={"email": admin_user.email, "password": TEST_PASSWORD})
    assert response.status_code == 200
    token = response.json()["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["id"] == admin_user.id


def test_login_wrong_password(client, admin_user):
    response = client.post("/api/auth/login", json={"email": admin_user.email, "password": "wrong-pass"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid email or password"


def test_missing_token_is_401(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["error"] == "Access token required"


def test_garbage_token_is_401(client):
    response = client.get("/api/materials", headers={"Authorization": "Bearer not.a.token"})
    assert response.status_code == 401


def test_deactivated_user_is_401(client, db_session, admin_user, auth_headers):
    headers = auth_headers(admin_user)
    admin_user.is_active = False
    db_session.commit()
    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_engineer_blocked_from_admin_routes(client, engineer_user, auth_headers):
    response = client.get("/api/material-requests/pending", headers=auth_headers(engineer_user))
    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"


def test_company_lookup_is_tenant_scoped(client, company, other_company, admin_user, auth_headers):
    headers = auth_headers(admin_user)
    assert client.get(f"/api/companies/{company.id}", headers=headers).status_code == 200
    assert client.get(f"/api/companies/{other_company.id}", headers=headers).status_code == 403


def test_health_and_metrics(client):
    assert client.get("/health").json() == {"status": "ok"}
    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "http_requests_total" in metrics.text
