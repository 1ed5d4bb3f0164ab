"""Tests for the error taxonomy and its HTTP rendering."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from app.db import unit_of_work
from app.errors import (
    AppError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
    register_error_handlers,
)


@pytest.mark.parametrize(
    "error,status_code,code",
    [
        (ValidationError("bad"), 400, "validation_error"),
        (AuthenticationError(), 401, "unauthenticated"),
        (AuthorizationError(), 403, "forbidden"),
        (NotFoundError("gone"), 404, "not_found"),
        (ConflictError("taken"), 409, "conflict"),
        (InternalError(), 500, "internal_error"),
    ],
)
def test_error_status_codes(error, status_code, code):
    assert isinstance(error, AppError)
    assert error.status_code == status_code
    assert error.code == code
    assert error.to_http_exception().status_code == status_code


def test_unit_of_work_rolls_back_and_reraises(db_session, company):
    company.name = "Renamed"
    with pytest.raises(ConflictError):
        with unit_of_work(db_session):
            db_session.flush()
            raise ConflictError("stop")
    db_session.refresh(company)
    assert company.name == "Studio Nine Interiors"


class _Body(BaseModel):
    quantity: int


@pytest.fixture()
def error_client():
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/conflict")
    def _conflict():
        raise ConflictError("Request has already been reviewed")

    @app.post("/body")
    def _body(payload: _Body):
        return payload

    @app.get("/boom")
    def _boom():
        raise RuntimeError("unexpected")

    return TestClient(app, raise_server_exceptions=False)


def test_app_error_envelope(error_client):
    response = error_client.get("/conflict")
    assert response.status_code == 409
    assert response.json() == {
        "success": False,
        "error": "Request has already been reviewed",
        "code": "conflict",
    }


def test_request_validation_is_400_with_details(error_client):
    response = error_client.post("/body", json={"quantity": "lots"})
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    assert body["details"][0]["field"] == "quantity"


def test_unhandled_error_is_500(error_client):
    response = error_client.get("/boom")
    assert response.status_code == 500
    assert response.json()["code"] == "internal_error"
