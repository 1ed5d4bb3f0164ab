from __future__ import annotations

from sqlalchemy.orm import Session

from app.errors import AuthorizationError, NotFoundError
from app.models.company import Company
from app.models.user import User, UserRole
from app.services.common import coerce_int


class Users:
    @staticmethod
    def get(db: Session, user_id: int) -> User:
        user = db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def list(db: Session, company_id: int, role: UserRole | None = None) -> list[User]:
        query = db.query(User).filter(User.company_id == company_id).filter(User.is_active.is_(True))
        if role is not None:
            query = query.filter(User.role == role)
        return query.order_by(User.name.asc(), User.id.asc()).all()

    @staticmethod
    def employees(db: Session, company_id: int) -> list[User]:
        return Users.list(db, company_id, UserRole.site_engineer)


class Companies:
    @staticmethod
    def get(db: Session, company_id, requester_company_id: int) -> Company:
        company_pk = coerce_int(company_id, "company id")
        if company_pk != requester_company_id:
            raise AuthorizationError("Access denied to this company")
        company = db.get(Company, company_pk)
        if not company:
            raise NotFoundError("Company not found")
        return company


users = Users()
companies = Companies()
