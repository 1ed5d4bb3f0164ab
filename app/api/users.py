from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_admin
from app.models.user import UserRole
from app.schemas.auth import CompanyRead, UserRead
from app.services.common import validate_enum
from app.services.users import companies, users

router = APIRouter()


@router.get("/users/employees", response_model=list[UserRead], tags=["users"])
def list_employees(auth=Depends(require_admin), db: Session = Depends(get_db)):
    return users.employees(db, auth["company_id"])


@router.get("/users", response_model=list[UserRead], tags=["users"])
def list_users(role: str | None = None, auth=Depends(require_admin), db: Session = Depends(get_db)):
    role_value = validate_enum(role, UserRole, "role") if role else None
    return users.list(db, auth["company_id"], role_value)


@router.get("/companies/{company_id}", response_model=CompanyRead, tags=["companies"])
def get_company(company_id: int, auth=Depends(get_current_user), db: Session = Depends(get_db)):
    return companies.get(db, company_id, auth["company_id"])
