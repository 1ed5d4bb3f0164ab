from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_admin
from app.schemas.common import ListResponse
from app.schemas.material_request import (
    MaterialRequestApprove,
    MaterialRequestCreate,
    MaterialRequestRead,
    MaterialRequestReject,
    MaterialRequestResult,
)
from app.services.material_requests import material_requests

router = APIRouter(prefix="/material-requests", tags=["material-requests"])


@router.post("", response_model=MaterialRequestResult, status_code=status.HTTP_201_CREATED)
def submit_material_request(
    payload: MaterialRequestCreate,
    auth=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    mr = material_requests.submit(db, auth["user_id"], auth["company_id"], payload)
    return {"success": True, "message": "Material request submitted successfully", "request": mr}


@router.get("", response_model=ListResponse[MaterialRequestRead])
def list_material_requests(
    status_filter: str | None = Query(default=None, alias="status"),
    request_type: str | None = Query(default=None, alias="type"),
    order_by: str = Query(default="request_date"),
    order_dir: str = Query(default="desc", pattern="^(asc|desc)$"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    return material_requests.list_response(
        db, auth["company_id"], None, status_filter, request_type, order_by, order_dir, limit, offset
    )


@router.get("/my-requests", response_model=ListResponse[MaterialRequestRead])
def list_my_requests(
    status_filter: str | None = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    auth=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return material_requests.list_response(
        db, auth["company_id"], auth["user_id"], status_filter, None, "request_date", "desc", limit, offset
    )


@router.get("/pending", response_model=ListResponse[MaterialRequestRead])
def list_pending_requests(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    return material_requests.list_response(
        db, auth["company_id"], None, "PENDING", None, "request_date", "desc", limit, offset
    )


@router.get("/{request_id}", response_model=MaterialRequestRead)
def get_material_request(request_id: int, auth=Depends(get_current_user), db: Session = Depends(get_db)):
    return material_requests.get(db, request_id, auth["user_id"], auth["company_id"], auth["role"])


# ── Status transitions ──────────────────────────────────────────


@router.put("/{request_id}/approve", response_model=MaterialRequestResult)
def approve_material_request(
    request_id: int,
    payload: MaterialRequestApprove | None = None,
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    notes = payload.approval_notes if payload else None
    mr = material_requests.approve(db, request_id, auth["user_id"], auth["company_id"], notes)
    return {"success": True, "message": "Material request approved successfully", "request": mr}


@router.put("/{request_id}/reject", response_model=MaterialRequestResult)
def reject_material_request(
    request_id: int,
    payload: MaterialRequestReject,
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    mr = material_requests.reject(db, request_id, auth["user_id"], auth["company_id"], payload.rejection_reason)
    return {"success": True, "message": "Material request rejected", "request": mr}
