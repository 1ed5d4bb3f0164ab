"""Password hashing, bearer tokens, signup and login."""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from app.config import jwt_secret, settings
from app.db import unit_of_work
from app.errors import AuthenticationError, ConflictError
from app.logging import get_logger
from app.models.company import Company
from app.models.user import User
from app.schemas.auth import LoginRequest, SignupRequest, UsernameLoginRequest

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


def create_access_token(user: User) -> str:
    now = _now()
    expires_at = now + timedelta(minutes=settings.jwt_access_ttl_minutes)
    payload = {
        "sub": str(user.id),
        "role": user.role.value,
        "company_id": user.company_id,
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, jwt_secret(), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, jwt_secret(), algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise AuthenticationError("Invalid or expired token") from exc


def _find_or_create_company(db: Session, name: str) -> Company:
    normalized = name.strip()
    company = db.query(Company).filter(func.lower(Company.name) == normalized.lower()).first()
    if company:
        return company
    company = Company(name=normalized)
    db.add(company)
    db.flush()
    logger.info("company_created id=%s name=%s", company.id, company.name)
    return company


def _token_payload(user: User, message: str) -> dict:
    return {
        "success": True,
        "message": message,
        "token": create_access_token(user),
        "user": user,
        "company": user.company,
    }


class Auth:
    @staticmethod
    def signup(db: Session, payload: SignupRequest) -> dict:
        email = payload.email.lower()
        if db.query(User).filter(User.email == email).first():
            raise ConflictError("User with this email already exists")
        try:
            with unit_of_work(db):
                company = _find_or_create_company(db, payload.company_name)
                user = User(
                    name=payload.name.strip(),
                    email=email,
                    password_hash=hash_password(payload.password),
                    role=payload.role,
                    company_id=company.id,
                )
                db.add(user)
        except IntegrityError as exc:
            raise ConflictError("User with this email already exists") from exc
        db.refresh(user)
        logger.info("user_signed_up id=%s company_id=%s role=%s", user.id, user.company_id, user.role.value)
        return _token_payload(user, "User registered successfully")

    @staticmethod
    def login(db: Session, payload: LoginRequest) -> dict:
        user = db.query(User).filter(User.email == payload.email.lower()).first()
        if not user or not user.is_active or not verify_password(payload.password, user.password_hash):
            raise AuthenticationError("Invalid email or password")
        return _token_payload(user, "Login successful")

    @staticmethod
    def login_with_username(db: Session, payload: UsernameLoginRequest) -> dict:
        user = db.query(User).filter(User.username == payload.username.strip()).first()
        if not user or not user.is_active or not verify_password(payload.password, user.password_hash):
            raise AuthenticationError("Invalid username or password")
        return _token_payload(user, "Login successful")

    @staticmethod
    def list_companies(db: Session) -> list[Company]:
        return db.query(Company).order_by(Company.name.asc()).all()


auth = Auth()
