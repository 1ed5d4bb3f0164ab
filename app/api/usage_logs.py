from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_admin
from app.schemas.common import ListResponse, MessageResponse
from app.schemas.inventory import (
    MaterialUsageCreate,
    MaterialUsageRead,
    MaterialUsageResult,
    MaterialUsageUpdate,
)
from app.services.usage_logs import usage_logs

router = APIRouter(prefix="/usage-logs", tags=["usage-logs"])


@router.get("", response_model=ListResponse[MaterialUsageRead])
def list_usage_logs(
    project_id: int | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    auth=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return usage_logs.list_response(db, auth["company_id"], project_id, limit, offset)


@router.post("", response_model=MaterialUsageResult, status_code=status.HTTP_201_CREATED)
def create_usage_log(payload: MaterialUsageCreate, auth=Depends(get_current_user), db: Session = Depends(get_db)):
    result = usage_logs.create(db, auth["user_id"], auth["company_id"], payload)
    return {"success": True, "message": "Usage logged successfully", **result}


@router.put("/{usage_id}", response_model=MaterialUsageResult)
def update_usage_log(
    usage_id: int,
    payload: MaterialUsageUpdate,
    auth=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = usage_logs.update(db, usage_id, auth["user_id"], auth["company_id"], auth["role"], payload)
    return {"success": True, "message": "Usage log updated successfully", **result}


@router.delete("/{usage_id}", response_model=MessageResponse)
def delete_usage_log(usage_id: int, auth=Depends(require_admin), db: Session = Depends(get_db)):
    usage_logs.delete(db, usage_id, auth["company_id"])
    return {"success": True, "message": "Usage log deleted successfully"}
