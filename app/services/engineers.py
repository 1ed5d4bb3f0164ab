from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.db import unit_of_work
from app.errors import ConflictError
from app.logging import get_logger
from app.models.engineer import Engineer
from app.models.user import User, UserRole
from app.schemas.auth import UsernameLoginRequest
from app.schemas.engineer import EngineerCreate, EngineerUpdate
from app.services.auth import auth, hash_password
from app.services.common import apply_pagination, get_company_scoped_or_404
from app.services.response import ListResponseMixin
from app.services.storage import discard, profile_image_policy, store_upload, storage

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProfileImage:
    file_name: str
    content_type: str | None
    content: bytes


def _store_profile_image(image: ProfileImage) -> str:
    url, _key = store_upload(
        profile_image_policy(), "engineers", image.file_name, image.content, image.content_type
    )
    return url


def _discard_profile_image(url: str | None) -> None:
    discard(storage.key_for_url(url))


def _ensure_username_available(db: Session, username: str, exclude_user_id: int | None = None) -> None:
    query = db.query(User.id).filter(User.username == username)
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    if query.first():
        raise ConflictError("Username already exists")


def _ensure_emp_id_available(db: Session, company_id: int, emp_id: str, exclude_id: int | None = None) -> None:
    query = db.query(Engineer.id).filter(Engineer.company_id == company_id).filter(Engineer.emp_id == emp_id)
    if exclude_id is not None:
        query = query.filter(Engineer.id != exclude_id)
    if query.first():
        raise ConflictError("Employee ID already exists")


def _get(db: Session, company_id: int, engineer_id) -> Engineer:
    return get_company_scoped_or_404(db, Engineer, engineer_id, company_id, detail="Engineer not found")


class Engineers(ListResponseMixin):
    @staticmethod
    def create(
        db: Session,
        company_id: int,
        payload: EngineerCreate,
        image: ProfileImage | None = None,
    ) -> Engineer:
        username = payload.username.strip()
        _ensure_username_available(db, username)
        _ensure_emp_id_available(db, company_id, payload.emp_id)
        image_url = _store_profile_image(image) if image else None
        try:
            with unit_of_work(db):
                user = User(
                    name=payload.name,
                    username=username,
                    password_hash=hash_password(payload.password),
                    role=UserRole.site_engineer,
                    company_id=company_id,
                )
                db.add(user)
                db.flush()
                engineer = Engineer(
                    **payload.model_dump(exclude={"username", "password"}),
                    profile_image=image_url,
                    company_id=company_id,
                    user_id=user.id,
                )
                db.add(engineer)
        except IntegrityError as exc:
            _discard_profile_image(image_url)
            raise ConflictError("Username or employee ID already exists") from exc
        except Exception:
            _discard_profile_image(image_url)
            raise
        db.refresh(engineer)
        logger.info("engineer_created id=%s user_id=%s company_id=%s", engineer.id, engineer.user_id, company_id)
        return engineer

    @staticmethod
    def get(db: Session, company_id: int, engineer_id) -> Engineer:
        return _get(db, company_id, engineer_id)

    @staticmethod
    def list(db: Session, company_id: int, limit: int, offset: int) -> list[Engineer]:
        query = (
            db.query(Engineer)
            .options(selectinload(Engineer.user))
            .filter(Engineer.company_id == company_id)
            .order_by(Engineer.name.asc(), Engineer.id.asc())
        )
        return apply_pagination(query, limit, offset).all()

    @staticmethod
    def update(
        db: Session,
        company_id: int,
        engineer_id,
        payload: EngineerUpdate,
        image: ProfileImage | None = None,
    ) -> Engineer:
        engineer = _get(db, company_id, engineer_id)
        data = payload.model_dump(exclude_unset=True, exclude_none=True)
        username = data.pop("username", None)
        password = data.pop("password", None)
        if username is not None:
            username = username.strip()
            _ensure_username_available(db, username, exclude_user_id=engineer.user_id)
        if "emp_id" in data:
            _ensure_emp_id_available(db, company_id, data["emp_id"], exclude_id=engineer.id)
        old_image = engineer.profile_image
        new_image = _store_profile_image(image) if image else None
        try:
            with unit_of_work(db):
                for field, value in data.items():
                    setattr(engineer, field, value)
                user = engineer.user
                if "name" in data:
                    user.name = data["name"]
                if username is not None:
                    user.username = username
                if password is not None:
                    user.password_hash = hash_password(password)
                if new_image:
                    engineer.profile_image = new_image
        except Exception:
            _discard_profile_image(new_image)
            raise
        if new_image:
            _discard_profile_image(old_image)
        db.refresh(engineer)
        return engineer

    @staticmethod
    def delete(db: Session, company_id: int, engineer_id) -> None:
        engineer = _get(db, company_id, engineer_id)
        image = engineer.profile_image
        with unit_of_work(db):
            user = engineer.user
            # The login row stays for history (usage logs, requests) but can no longer sign in.
            user.is_active = False
            user.username = None
            db.delete(engineer)
        _discard_profile_image(image)
        logger.info("engineer_deleted id=%s company_id=%s", engineer_id, company_id)

    @staticmethod
    def login(db: Session, payload: UsernameLoginRequest) -> dict:
        result = auth.login_with_username(db, payload)
        user = result["user"]
        result["engineer"] = db.query(Engineer).filter(Engineer.user_id == user.id).first()
        return result


engineers = Engineers()
