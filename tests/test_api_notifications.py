"""Tests for the notification inbox endpoints."""

from app.models.notification import Notification, NotificationType


def _seed(db_session, user, *messages, read=False):
    rows = [
        Notification(recipient_id=user.id, message=message, type=NotificationType.info, read=read)
        for message in messages
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


def test_list_reports_unread_count(client, db_session, engineer_user, auth_headers):
    _seed(db_session, engineer_user, "one", "two")
    _seed(db_session, engineer_user, "old", read=True)

    data = client.get("/api/notifications", headers=auth_headers(engineer_user)).json()
    assert data["count"] == 3
    assert data["unread_count"] == 2

    unread = client.get("/api/notifications?unread_only=true", headers=auth_headers(engineer_user)).json()
    assert {item["message"] for item in unread["items"]} == {"one", "two"}


def test_mark_read_and_read_all(client, db_session, engineer_user, auth_headers):
    first, _ = _seed(db_session, engineer_user, "one", "two")
    headers = auth_headers(engineer_user)

    response = client.put(f"/api/notifications/{first.id}/read", headers=headers)
    assert response.status_code == 200
    assert response.json()["read"] is True

    response = client.put("/api/notifications/read-all", headers=headers)
    assert response.status_code == 200
    assert client.get("/api/notifications", headers=headers).json()["unread_count"] == 0


def test_cannot_touch_someone_elses_notification(client, db_session, admin_user, engineer_user, auth_headers):
    (note,) = _seed(db_session, admin_user, "for the admin")
    headers = auth_headers(engineer_user)
    assert client.put(f"/api/notifications/{note.id}/read", headers=headers).status_code == 404
    assert client.delete(f"/api/notifications/{note.id}", headers=headers).status_code == 404


def test_delete_and_clear_read(client, db_session, engineer_user, auth_headers):
    keep, gone = _seed(db_session, engineer_user, "keep", "gone")
    _seed(db_session, engineer_user, "read-1", "read-2", read=True)
    headers = auth_headers(engineer_user)

    assert client.delete(f"/api/notifications/{gone.id}", headers=headers).status_code == 200
    assert client.delete("/api/notifications/clear-read", headers=headers).status_code == 200

    db_session.expire_all()
    remaining = db_session.query(Notification).filter(Notification.recipient_id == engineer_user.id).all()
    assert [row.id for row in remaining] == [keep.id]


def test_workflow_notifications_reach_inbox(client, admin_user, engineer_user, auth_headers):
    body = {"name": "Wallpaper", "category": "Finishes", "unit": "roll", "default_rate": "900", "type": "GLOBAL"}
    request_id = client.post("/api/material-requests", json=body, headers=auth_headers(engineer_user)).json()[
        "request"
    ]["id"]
    client.put(
        f"/api/material-requests/{request_id}/reject",
        json={"rejection_reason": "Client picked paint"},
        headers=auth_headers(admin_user),
    )

    items = client.get("/api/notifications", headers=auth_headers(engineer_user)).json()["items"]
    assert {item["type"] for item in items} == {"INFO", "ERROR"}
    assert any("Client picked paint" in item["message"] for item in items)
