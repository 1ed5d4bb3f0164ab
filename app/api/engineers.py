from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_admin
from app.api.uploads import form_model, read_upload
from app.schemas.auth import UsernameLoginRequest
from app.schemas.common import ListResponse, MessageResponse
from app.schemas.engineer import (
    EngineerCreate,
    EngineerLoginResponse,
    EngineerRead,
    EngineerResult,
    EngineerUpdate,
)
from app.services.engineers import ProfileImage, engineers

router = APIRouter(prefix="/engineers", tags=["engineers"])


def _profile_image(file: UploadFile | None) -> ProfileImage | None:
    upload = read_upload(file)
    if upload is None:
        return None
    return ProfileImage(*upload)


@router.post("/login", response_model=EngineerLoginResponse)
def engineer_login(payload: UsernameLoginRequest, db: Session = Depends(get_db)):
    return engineers.login(db, payload)


@router.get("", response_model=ListResponse[EngineerRead])
def list_engineers(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    return engineers.list_response(db, auth["company_id"], limit, offset)


@router.post("", response_model=EngineerResult, status_code=status.HTTP_201_CREATED)
def create_engineer(
    emp_id: str = Form(...),
    name: str = Form(...),
    phone: str = Form(...),
    address: str = Form(...),
    username: str = Form(...),
    password: str = Form(...),
    alternate_phone: str | None = Form(default=None),
    profile_image: UploadFile | None = File(default=None),
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    payload = form_model(
        EngineerCreate,
        emp_id=emp_id,
        name=name,
        phone=phone,
        alternate_phone=alternate_phone or None,
        address=address,
        username=username,
        password=password,
    )
    engineer = engineers.create(db, auth["company_id"], payload, _profile_image(profile_image))
    return {"success": True, "message": "Engineer created successfully", "engineer": engineer}


@router.get("/{engineer_id}", response_model=EngineerRead)
def get_engineer(engineer_id: int, auth=Depends(require_admin), db: Session = Depends(get_db)):
    return engineers.get(db, auth["company_id"], engineer_id)


@router.put("/{engineer_id}", response_model=EngineerResult)
def update_engineer(
    engineer_id: int,
    emp_id: str | None = Form(default=None),
    name: str | None = Form(default=None),
    phone: str | None = Form(default=None),
    alternate_phone: str | None = Form(default=None),
    address: str | None = Form(default=None),
    username: str | None = Form(default=None),
    password: str | None = Form(default=None),
    profile_image: UploadFile | None = File(default=None),
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    payload = form_model(
        EngineerUpdate,
        emp_id=emp_id,
        name=name,
        phone=phone,
        alternate_phone=alternate_phone or None,
        address=address,
        username=username,
        password=password or None,
    )
    engineer = engineers.update(db, auth["company_id"], engineer_id, payload, _profile_image(profile_image))
    return {"success": True, "message": "Engineer updated successfully", "engineer": engineer}


@router.delete("/{engineer_id}", response_model=MessageResponse)
def delete_engineer(engineer_id: int, auth=Depends(require_admin), db: Session = Depends(get_db)):
    engineers.delete(db, auth["company_id"], engineer_id)
    return {"success": True, "message": "Engineer deleted successfully"}
