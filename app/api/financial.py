from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_admin
from app.schemas.common import MessageResponse
from app.schemas.financial import (
    ExpenseCreate,
    ExpenseResult,
    ExpenseUpdate,
    FinancialProjectCreate,
    FinancialProjectRead,
    FinancialSummary,
)
from app.services.financial import financial

router = APIRouter(prefix="/financial", tags=["financial"])


@router.get("/summary", response_model=FinancialSummary)
def financial_summary(auth=Depends(require_admin), db: Session = Depends(get_db)):
    return financial.summary(db, auth["company_id"])


@router.get("/projects", response_model=list[FinancialProjectRead])
def list_financial_projects(auth=Depends(require_admin), db: Session = Depends(get_db)):
    return financial.list_projects(db, auth["company_id"])


@router.post(
    "/projects",
    response_model=FinancialProjectRead,
    status_code=status.HTTP_201_CREATED,
)
def create_financial_project(
    payload: FinancialProjectCreate,
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    return financial.create_project(db, auth["company_id"], payload)


@router.get("/projects/{project_id}", response_model=FinancialProjectRead)
def get_financial_project(project_id: int, auth=Depends(require_admin), db: Session = Depends(get_db)):
    return financial.get_project(db, auth["company_id"], project_id)


@router.post(
    "/projects/{project_id}/expenses",
    response_model=ExpenseResult,
    status_code=status.HTTP_201_CREATED,
)
def add_expense(
    project_id: int,
    payload: ExpenseCreate,
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    expense = financial.add_expense(db, auth["company_id"], project_id, payload)
    return {"success": True, "message": "Expense added successfully", "expense": expense}


@router.put("/expenses/{expense_id}", response_model=ExpenseResult)
def update_expense(
    expense_id: int,
    payload: ExpenseUpdate,
    auth=Depends(require_admin),
    db: Session = Depends(get_db),
):
    expense = financial.update_expense(db, auth["company_id"], expense_id, payload)
    return {"success": True, "message": "Expense updated successfully", "expense": expense}


@router.delete("/expenses/{expense_id}", response_model=MessageResponse)
def delete_expense(expense_id: int, auth=Depends(require_admin), db: Session = Depends(get_db)):
    financial.delete_expense(db, auth["company_id"], expense_id)
    return {"success": True, "message": "Expense deleted successfully"}
