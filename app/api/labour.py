from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_admin
from app.schemas.common import ListResponse, MessageResponse
from app.schemas.labour import (
    LabourCreate,
    LabourPaymentCreate,
    LabourPaymentRead,
    LabourPaymentResult,
    LabourRead,
    LabourResult,
    LabourStatistics,
    LabourUpdate,
)
from app.services.labour import labours

router = APIRouter(prefix="/labours", tags=["labours"])


@router.get("", response_model=ListResponse[LabourRead])
def list_labours(
    project_id: int | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    return labours.list_response(db, auth["company_id"], project_id, limit, offset)


@router.get("/statistics", response_model=LabourStatistics)
def labour_statistics(auth=Depends(require_admin), db: Session = Depends(get_db)):
    return labours.statistics(db, auth["company_id"])


@router.get("/project/{project_id}", response_model=ListResponse[LabourRead])
def list_project_labours(
    project_id: int,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    return labours.list_response(db, auth["company_id"], project_id, limit, offset)


@router.post("", response_model=LabourResult, status_code=status.HTTP_201_CREATED)
def create_labour(payload: LabourCreate, auth=Depends(require_admin), db: Session = Depends(get_db)):
    labour = labours.create(db, auth["company_id"], payload)
    return {"success": True, "message": "Labour created successfully", "labour": labour}


@router.get("/{labour_id}", response_model=LabourRead)
def get_labour(labour_id: int, auth=Depends(require_admin), db: Session = Depends(get_db)):
    return labours.get(db, auth["company_id"], labour_id)


@router.put("/{labour_id}", response_model=LabourResult)
def update_labour(
    labour_id: int,
    payload: LabourUpdate,
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    labour = labours.update(db, auth["company_id"], labour_id, payload)
    return {"success": True, "message": "Labour updated successfully", "labour": labour}


@router.delete("/{labour_id}", response_model=MessageResponse)
def delete_labour(labour_id: int, auth=Depends(require_admin), db: Session = Depends(get_db)):
    labours.delete(db, auth["company_id"], labour_id)
    return {"success": True, "message": "Labour deleted successfully"}


@router.get("/{labour_id}/payments", response_model=list[LabourPaymentRead])
def list_labour_payments(labour_id: int, auth=Depends(require_admin), db: Session = Depends(get_db)):
    return labours.list_payments(db, auth["company_id"], labour_id)


@router.post(
    "/{labour_id}/payments",
    response_model=LabourPaymentResult,
    status_code=status.HTTP_201_CREATED,
)
def add_labour_payment(
    labour_id: int,
    payload: LabourPaymentCreate,
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    payment = labours.add_payment(db, auth["company_id"], labour_id, payload)
    return {"success": True, "message": "Payment added successfully", "payment": payment}


@router.delete("/{labour_id}/payments/{payment_id}", response_model=MessageResponse)
def delete_labour_payment(
    labour_id: int,
    payment_id: int,
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    labours.delete_payment(db, auth["company_id"], labour_id, payment_id)
    return {"success": True, "message": "Payment deleted successfully"}
