from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import DecimalNumber


class LabourCreate(BaseModel):
    name: str = Field(min_length=1, max_length=160)
    phone: str = Field(min_length=1, max_length=20)
    address: str | None = None
    project_id: int | None = None


class LabourUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=160)
    phone: str | None = Field(default=None, min_length=1, max_length=20)
    address: str | None = None
    project_id: int | None = None


class LabourPaymentCreate(BaseModel):
    amount: Decimal = Field(max_digits=12, decimal_places=2, gt=0)
    paid_on: date | None = None
    remarks: str | None = None


class LabourPaymentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    labour_id: int
    amount: DecimalNumber
    paid_on: date
    remarks: str | None = None
    created_at: datetime


class LabourRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    phone: str
    address: str | None = None
    company_id: int
    project_id: int | None = None
    total_paid: DecimalNumber
    payments: list[LabourPaymentRead] = []
    created_at: datetime
    updated_at: datetime


class LabourResult(BaseModel):
    success: bool = True
    message: str
    labour: LabourRead


class LabourPaymentResult(BaseModel):
    success: bool = True
    message: str
    payment: LabourPaymentRead


class LabourProjectCount(BaseModel):
    project_id: int | None = None
    project_name: str | None = None
    count: int


class LabourStatistics(BaseModel):
    total_labourers: int
    total_paid: DecimalNumber
    total_paid_this_month: DecimalNumber
    total_payments: int
    payments_this_month: int
    labourers_by_project: list[LabourProjectCount]
    average_payment_per_labourer: DecimalNumber
