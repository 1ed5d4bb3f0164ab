from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.schemas.common import MessageResponse
from app.schemas.notification import NotificationList, NotificationRead
from app.services.notifications import notifications

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationList)
def list_notifications(
    unread_only: bool = False,
    auth=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return notifications.list(db, auth["user_id"], unread_only)


@router.put("/read-all", response_model=MessageResponse)
def mark_all_read(auth=Depends(get_current_user), db: Session = Depends(get_db)):
    updated = notifications.mark_all_read(db, auth["user_id"])
    return {"success": True, "message": f"{updated} notification(s) marked as read"}


@router.delete("/clear-read", response_model=MessageResponse)
def clear_read(auth=Depends(get_current_user), db: Session = Depends(get_db)):
    deleted = notifications.clear_read(db, auth["user_id"])
    return {"success": True, "message": f"{deleted} notification(s) cleared"}


@router.put("/{notification_id}/read", response_model=NotificationRead)
def mark_read(notification_id: int, auth=Depends(get_current_user), db: Session = Depends(get_db)):
    return notifications.mark_read(db, notification_id, auth["user_id"])


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(notification_id: int, auth=Depends(get_current_user), db: Session = Depends(get_db)):
    notifications.delete(db, notification_id, auth["user_id"])
    return {"success": True, "message": "Notification deleted successfully"}
