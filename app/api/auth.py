from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.schemas.auth import CompanyRead, LoginRequest, SignupRequest, TokenResponse, UserRead
from app.services.auth import auth as auth_service
from app.services.users import users

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    return auth_service.signup(db, payload)


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    return auth_service.login(db, payload)


@router.get("/companies", response_model=list[CompanyRead])
def list_companies(db: Session = Depends(get_db)):
    return auth_service.list_companies(db)


@router.get("/me", response_model=UserRead)
def me(auth=Depends(get_current_user), db: Session = Depends(get_db)):
    return users.get(db, auth["user_id"])
