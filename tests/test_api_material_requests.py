"""End-to-end request, approval and usage flow through the HTTP API."""

from decimal import Decimal

from app.models.inventory import ProjectMaterial, ProjectMaterialStatus


def _request_body(project_id: int, **overrides) -> dict:
    body = {
        "name": "Laminate sheet 1mm",
        "category": "Laminates",
        "unit": "sheet",
        "default_rate": "1450.50",
        "type": "PROJECT",
        "project_id": project_id,
        "quantity": "50",
    }
    body.update(overrides)
    return body


def test_request_approve_then_log_usage(client, db_session, admin_user, engineer_user, project, auth_headers):
    engineer = auth_headers(engineer_user)
    admin = auth_headers(admin_user)

    submitted = client.post("/api/material-requests", json=_request_body(project.id), headers=engineer)
    assert submitted.status_code == 201
    request = submitted.json()["request"]
    assert request["request_code"] == "REQ001"
    assert request["status"] == "PENDING"
    assert request["default_rate"] == 1450.5

    pending = client.get("/api/material-requests/pending", headers=admin).json()
    assert [item["id"] for item in pending["items"]] == [request["id"]]

    approved = client.put(
        f"/api/material-requests/{request['id']}/approve",
        json={"approval_notes": "Approved for site"},
        headers=admin,
    )
    assert approved.status_code == 200
    assert approved.json()["request"]["status"] == "APPROVED"

    allocations = client.get(f"/api/project-materials/{project.id}", headers=engineer).json()["items"]
    assert len(allocations) == 1
    allocation = allocations[0]
    assert allocation["material"]["material_code"] == "MAT001"
    assert allocation["assigned"] == 50
    assert allocation["status"] == "NOT_USED"

    material_id = allocation["material_id"]
    logged = client.post(
        "/api/usage-logs",
        json={"project_id": project.id, "material_id": material_id, "quantity": "20"},
        headers=engineer,
    )
    assert logged.status_code == 201
    body = logged.json()
    assert body["warning"] is None
    assert body["project_material"]["used"] == 20
    assert body["project_material"]["remaining"] == 30
    assert body["project_material"]["status"] == "ACTIVE"

    db_session.expire_all()
    row = db_session.query(ProjectMaterial).one()
    assert row.used == Decimal("20")
    assert row.status == ProjectMaterialStatus.active

    over = client.post(
        "/api/usage-logs",
        json={"project_id": project.id, "material_id": material_id, "quantity": "40"},
        headers=engineer,
    )
    assert over.status_code == 201
    assert over.json()["warning"] == "Usage exceeds assigned quantity. Assigned: 50, Used: 60"

    logs = client.get(f"/api/usage-logs?project_id={project.id}", headers=engineer).json()
    assert logs["count"] == 2

    deleted = client.delete(f"/api/usage-logs/{logs['items'][0]['id']}", headers=admin)
    assert deleted.status_code == 200
    db_session.expire_all()
    assert db_session.query(ProjectMaterial).one().used == Decimal("20")


def test_approve_without_body(client, admin_user, engineer_user, auth_headers):
    submitted = client.post(
        "/api/material-requests",
        json=_request_body(None, type="GLOBAL", quantity=None),
        headers=auth_headers(engineer_user),
    )
    request_id = submitted.json()["request"]["id"]

    response = client.put(f"/api/material-requests/{request_id}/approve", headers=auth_headers(admin_user))
    assert response.status_code == 200
    assert response.json()["request"]["approval_notes"] is None


def test_second_approval_is_409(client, admin_user, engineer_user, project, auth_headers):
    admin = auth_headers(admin_user)
    submitted = client.post(
        "/api/material-requests", json=_request_body(project.id), headers=auth_headers(engineer_user)
    )
    request_id = submitted.json()["request"]["id"]

    assert client.put(f"/api/material-requests/{request_id}/approve", headers=admin).status_code == 200
    again = client.put(f"/api/material-requests/{request_id}/approve", headers=admin)
    assert again.status_code == 409
    assert again.json()["error"] == "Request has already been reviewed"


def test_reject_requires_reason(client, admin_user, engineer_user, project, auth_headers):
    admin = auth_headers(admin_user)
    submitted = client.post(
        "/api/material-requests", json=_request_body(project.id), headers=auth_headers(engineer_user)
    )
    request_id = submitted.json()["request"]["id"]

    missing = client.put(f"/api/material-requests/{request_id}/reject", json={}, headers=admin)
    assert missing.status_code == 400

    rejected = client.put(
        f"/api/material-requests/{request_id}/reject",
        json={"rejection_reason": "Use stock from warehouse"},
        headers=admin,
    )
    assert rejected.status_code == 200
    assert rejected.json()["request"]["status"] == "REJECTED"


def test_invalid_type_is_400(client, engineer_user, auth_headers):
    response = client.post(
        "/api/material-requests",
        json=_request_body(None, type="BULK", quantity=None),
        headers=auth_headers(engineer_user),
    )
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


def test_other_company_admin_cannot_approve(client, engineer_user, other_admin, project, auth_headers):
    submitted = client.post(
        "/api/material-requests", json=_request_body(project.id), headers=auth_headers(engineer_user)
    )
    request_id = submitted.json()["request"]["id"]

    response = client.put(f"/api/material-requests/{request_id}/approve", headers=auth_headers(other_admin))
    assert response.status_code == 403


def test_my_requests_only_lists_own(client, admin_user, engineer_user, auth_headers):
    body = _request_body(None, type="GLOBAL", quantity=None)
    client.post("/api/material-requests", json=body, headers=auth_headers(engineer_user))
    client.post("/api/material-requests", json=body, headers=auth_headers(admin_user))

    mine = client.get("/api/material-requests/my-requests", headers=auth_headers(engineer_user)).json()
    assert mine["count"] == 1
    assert mine["items"][0]["employee_id"] == engineer_user.id

    everything = client.get("/api/material-requests", headers=auth_headers(admin_user)).json()
    assert everything["count"] == 2
