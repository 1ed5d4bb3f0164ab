from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_admin
from app.schemas.common import ListResponse, MessageResponse
from app.schemas.contract import ContractCreate, ContractRead, ContractResult, ContractUpdate
from app.services.contracts import contracts

router = APIRouter(prefix="/contracts", tags=["contracts"])


@router.get("", response_model=ListResponse[ContractRead])
def list_contracts(
    project_id: int | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    return contracts.list_response(db, auth["company_id"], project_id, limit, offset)


@router.get("/project/{project_id}", response_model=ListResponse[ContractRead])
def list_project_contracts(
    project_id: int,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    return contracts.list_response(db, auth["company_id"], project_id, limit, offset)


@router.post("", response_model=ContractResult, status_code=status.HTTP_201_CREATED)
def create_contract(payload: ContractCreate, auth=Depends(require_admin), db: Session = Depends(get_db)):
    contract = contracts.create(db, auth["company_id"], payload)
    return {"success": True, "message": "Contract created successfully", "contract": contract}


@router.get("/{contract_id}", response_model=ContractRead)
def get_contract(contract_id: int, auth=Depends(require_admin), db: Session = Depends(get_db)):
    return contracts.get(db, auth["company_id"], contract_id)


@router.put("/{contract_id}", response_model=ContractResult)
def update_contract(
    contract_id: int,
    payload: ContractUpdate,
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    contract = contracts.update(db, auth["company_id"], contract_id, payload)
    return {"success": True, "message": "Contract updated successfully", "contract": contract}


@router.delete("/{contract_id}", response_model=MessageResponse)
def delete_contract(contract_id: int, auth=Depends(require_admin), db: Session = Depends(get_db)):
    contracts.delete(db, auth["company_id"], contract_id)
    return {"success": True, "message": "Contract deleted successfully"}
