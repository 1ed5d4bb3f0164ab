from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.models.inventory import ProjectMaterialStatus
from app.schemas.common import DecimalNumber


class MaterialBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    category: str = Field(min_length=1, max_length=120)
    unit: str = Field(min_length=1, max_length=40)
    default_rate: Decimal = Field(max_digits=12, decimal_places=2, ge=0)
    vendor: str | None = Field(default=None, max_length=200)
    description: str | None = None


class MaterialCreate(MaterialBase):
    pass


class MaterialUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    category: str | None = Field(default=None, min_length=1, max_length=120)
    unit: str | None = Field(default=None, min_length=1, max_length=40)
    default_rate: Decimal | None = Field(default=None, max_digits=12, decimal_places=2, ge=0)
    vendor: str | None = Field(default=None, max_length=200)
    description: str | None = None


class MaterialRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    material_code: str
    name: str
    category: str
    unit: str
    default_rate: DecimalNumber
    vendor: str | None = None
    description: str | None = None
    company_id: int
    created_at: datetime
    updated_at: datetime


class MaterialResult(BaseModel):
    success: bool = True
    message: str
    material: MaterialRead


class ProjectMaterialCreate(BaseModel):
    project_id: int
    material_id: int
    assigned: Decimal = Field(max_digits=12, decimal_places=3, ge=0)


class ProjectMaterialUpdate(BaseModel):
    assigned: Decimal = Field(max_digits=12, decimal_places=3, ge=0)


class ProjectMaterialRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    project_id: int
    material_id: int
    assigned: DecimalNumber
    used: DecimalNumber
    remaining: DecimalNumber
    status: ProjectMaterialStatus
    material: MaterialRead | None = None
    created_at: datetime
    updated_at: datetime


class ProjectMaterialResult(BaseModel):
    success: bool = True
    message: str
    project_material: ProjectMaterialRead


class MaterialUsageCreate(BaseModel):
    project_id: int
    material_id: int
    quantity: Decimal = Field(max_digits=12, decimal_places=3, gt=0)
    usage_date: date | None = None
    remarks: str | None = None


class MaterialUsageUpdate(BaseModel):
    quantity: Decimal | None = Field(default=None, max_digits=12, decimal_places=3, gt=0)
    usage_date: date | None = None
    remarks: str | None = None


class MaterialUsageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    project_id: int
    material_id: int
    user_id: int
    quantity: DecimalNumber
    usage_date: date
    remarks: str | None = None
    created_at: datetime
    updated_at: datetime


class MaterialUsageResult(BaseModel):
    success: bool = True
    message: str
    usage_log: MaterialUsageRead
    project_material: ProjectMaterialRead | None = None
    warning: str | None = None
