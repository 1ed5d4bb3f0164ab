from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.models.projects import ProjectStatus
from app.schemas.common import DecimalNumber


class FinancialProjectCreate(BaseModel):
    project_code: str = Field(min_length=1, max_length=40)
    name: str = Field(min_length=1, max_length=200)
    client_name: str = Field(min_length=1, max_length=200)
    budget: Decimal = Field(max_digits=14, decimal_places=2, ge=0)
    quotation_amount: Decimal = Field(max_digits=14, decimal_places=2, ge=0)
    due_date: date


class ExpenseCreate(BaseModel):
    category: str = Field(min_length=1, max_length=120)
    amount: Decimal = Field(max_digits=14, decimal_places=2, gt=0)


class ExpenseUpdate(BaseModel):
    category: str | None = Field(default=None, min_length=1, max_length=120)
    amount: Decimal | None = Field(default=None, max_digits=14, decimal_places=2, gt=0)


class ExpenseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    project_id: int
    category: str
    amount: DecimalNumber
    created_at: datetime
    updated_at: datetime


class ExpenseResult(BaseModel):
    success: bool = True
    message: str
    expense: ExpenseRead


class FinancialProjectRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    project_code: str
    name: str
    client_name: str
    status: ProjectStatus
    budget: DecimalNumber | None = None
    quotation_amount: DecimalNumber | None = None
    due_date: date | None = None
    total_spent: DecimalNumber
    remaining: DecimalNumber | None = None
    expenses: list[ExpenseRead] = []


class FinancialSummary(BaseModel):
    total_budget: DecimalNumber
    total_spent: DecimalNumber
    total_remaining: DecimalNumber
    total_projects: int
    projects_over_budget: int
    utilization_percentage: float
