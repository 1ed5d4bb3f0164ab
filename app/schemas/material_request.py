from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.models.material_request import MaterialRequestStatus, MaterialRequestType
from app.schemas.common import DecimalNumber


class MaterialRequestBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    category: str = Field(min_length=1, max_length=120)
    unit: str = Field(min_length=1, max_length=40)
    default_rate: Decimal = Field(max_digits=12, decimal_places=2, ge=0)
    vendor: str | None = Field(default=None, max_length=200)
    description: str | None = None


class MaterialRequestCreate(MaterialRequestBase):
    # Checked against MaterialRequestType by the service so the error names the allowed values.
    type: str
    project_id: int | None = None
    material_id: int | None = None
    quantity: Decimal | None = Field(default=None, max_digits=12, decimal_places=3, gt=0)


class MaterialRequestApprove(BaseModel):
    approval_notes: str | None = None


class MaterialRequestReject(BaseModel):
    rejection_reason: str | None = None


class MaterialRequestRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    request_code: str
    employee_id: int
    name: str
    category: str
    unit: str
    default_rate: DecimalNumber
    vendor: str | None = None
    description: str | None = None
    type: MaterialRequestType
    project_id: int | None = None
    material_id: int | None = None
    quantity: DecimalNumber | None = None
    status: MaterialRequestStatus
    request_date: datetime
    reviewed_by: int | None = None
    review_date: datetime | None = None
    approval_notes: str | None = None
    rejection_reason: str | None = None
    created_at: datetime
    updated_at: datetime


class MaterialRequestResult(BaseModel):
    success: bool = True
    message: str
    request: MaterialRequestRead
