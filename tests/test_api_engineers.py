"""Tests for the engineer roster endpoints and engineer login."""

import pytest

from app.models.user import User
from app.services.storage import LocalBackend, storage


@pytest.fixture()
def local_storage(tmp_path):
    backend = LocalBackend(root=str(tmp_path), url_prefix="/uploads")
    storage.configure(backend)
    yield backend
    storage.configure(None)


def _form(**overrides):
    data = {
        "emp_id": "ENG-07",
        "name": "Kiran Patil",
        "phone": "9876543210",
        "address": "12 MG Road, Pune",
        "username": "kiran.site",
        "password": "site-pass",
    }
    data.update(overrides)
    return data


def test_create_with_profile_image_and_login(client, admin_user, auth_headers, local_storage, tmp_path):
    response = client.post(
        "/api/engineers",
        data=_form(),
        files={"profile_image": ("kiran.png", b"\x89PNG fake", "image/png")},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == 201
    engineer = response.json()["engineer"]
    assert engineer["company_id"] == admin_user.company_id
    assert engineer["profile_image"].startswith("/uploads/engineers/")
    assert list((tmp_path / "engineers").iterdir())

    login = client.post("/api/engineers/login", json={"username": "kiran.site", "password": "site-pass"})
    assert login.status_code == 200
    body = login.json()
    assert body["token"]
    assert body["user"]["role"] == "Site_Engineer"
    assert body["engineer"]["emp_id"] == "ENG-07"


def test_phone_must_be_ten_digits(client, admin_user, auth_headers):
    response = client.post("/api/engineers", data=_form(phone="12345"), headers=auth_headers(admin_user))
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "phone"


def test_duplicate_username_conflicts(client, admin_user, auth_headers):
    headers = auth_headers(admin_user)
    assert client.post("/api/engineers", data=_form(), headers=headers).status_code == 201
    again = client.post("/api/engineers", data=_form(emp_id="ENG-08"), headers=headers)
    assert again.status_code == 409
    assert again.json()["error"] == "Username already exists"


def test_bad_image_type_rejected(client, admin_user, auth_headers, local_storage):
    response = client.post(
        "/api/engineers",
        data=_form(),
        files={"profile_image": ("kiran.exe", b"MZ", "application/octet-stream")},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == 400


def test_delete_deactivates_login(client, db_session, admin_user, auth_headers):
    headers = auth_headers(admin_user)
    engineer = client.post("/api/engineers", data=_form(), headers=headers).json()["engineer"]

    deleted = client.delete(f"/api/engineers/{engineer['id']}", headers=headers)
    assert deleted.status_code == 200

    db_session.expire_all()
    user = db_session.get(User, engineer["user_id"])
    assert user.is_active is False
    assert user.username is None
    login = client.post("/api/engineers/login", json={"username": "kiran.site", "password": "site-pass"})
    assert login.status_code == 401


def test_engineer_cannot_manage_roster(client, engineer_user, auth_headers):
    assert client.get("/api/engineers", headers=auth_headers(engineer_user)).status_code == 403
