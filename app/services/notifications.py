from sqlalchemy.orm import Session

from app.errors import NotFoundError
from app.logging import get_logger
from app.models.notification import Notification, NotificationType
from app.services.common import coerce_int

logger = get_logger(__name__)

UNREAD_LIMIT = 50


class InAppNotifier:
    """Writes notifications as rows in the caller's transaction.

    The row commits or rolls back together with the workflow step that
    produced it.
    """

    def notify(self, db: Session, recipient_id: int, message: str, kind: NotificationType) -> Notification:
        notification = Notification(recipient_id=recipient_id, message=message, type=kind)
        db.add(notification)
        logger.debug("notification_queued recipient_id=%s type=%s", recipient_id, kind.value)
        return notification


in_app_notifier = InAppNotifier()


def notify(db: Session, recipient_id: int, message: str, kind: NotificationType) -> Notification:
    from app.container import container

    return container.notifier().notify(db, recipient_id, message, kind)


def _get_own(db: Session, notification_id, user_id: int) -> Notification:
    notification = db.get(Notification, coerce_int(notification_id))
    if not notification or notification.recipient_id != user_id:
        raise NotFoundError("Notification not found")
    return notification


class Notifications:
    @staticmethod
    def list(db: Session, user_id: int, unread_only: bool = False, limit: int = UNREAD_LIMIT) -> dict:
        query = db.query(Notification).filter(Notification.recipient_id == user_id)
        if unread_only:
            query = query.filter(Notification.read.is_(False))
        items = query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()
        unread_count = (
            db.query(Notification)
            .filter(Notification.recipient_id == user_id)
            .filter(Notification.read.is_(False))
            .count()
        )
        return {"items": items, "count": len(items), "unread_count": unread_count}

    @staticmethod
    def mark_read(db: Session, notification_id, user_id: int) -> Notification:
        notification = _get_own(db, notification_id, user_id)
        notification.read = True
        db.commit()
        db.refresh(notification)
        return notification

    @staticmethod
    def mark_all_read(db: Session, user_id: int) -> int:
        updated = (
            db.query(Notification)
            .filter(Notification.recipient_id == user_id)
            .filter(Notification.read.is_(False))
            .update({Notification.read: True}, synchronize_session=False)
        )
        db.commit()
        return updated

    @staticmethod
    def delete(db: Session, notification_id, user_id: int) -> None:
        notification = _get_own(db, notification_id, user_id)
        db.delete(notification)
        db.commit()

    @staticmethod
    def clear_read(db: Session, user_id: int) -> int:
        deleted = (
            db.query(Notification)
            .filter(Notification.recipient_id == user_id)
            .filter(Notification.read.is_(True))
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted


notifications = Notifications()
