from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import DecimalNumber


class ContractCreate(BaseModel):
    project_id: int
    contractor_name: str = Field(min_length=1, max_length=200)
    contact_number: str = Field(min_length=1, max_length=20)
    contract_amount: Decimal = Field(max_digits=14, decimal_places=2, ge=0)
    work_status: str = Field(default="Pending", max_length=40)
    start_date: date | None = None
    end_date: date | None = None
    details: str | None = None


class ContractUpdate(BaseModel):
    project_id: int | None = None
    contractor_name: str | None = Field(default=None, min_length=1, max_length=200)
    contact_number: str | None = Field(default=None, min_length=1, max_length=20)
    contract_amount: Decimal | None = Field(default=None, max_digits=14, decimal_places=2, ge=0)
    work_status: str | None = Field(default=None, max_length=40)
    start_date: date | None = None
    end_date: date | None = None
    details: str | None = None


class ContractRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    project_id: int
    contractor_name: str
    contact_number: str
    contract_amount: DecimalNumber
    work_status: str
    start_date: date | None = None
    end_date: date | None = None
    details: str | None = None
    created_at: datetime
    updated_at: datetime


class ContractResult(BaseModel):
    success: bool = True
    message: str
    contract: ContractRead
