from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.models.projects import ProjectStatus
from app.schemas.common import DecimalNumber


class ProjectBase(BaseModel):
    project_code: str = Field(min_length=1, max_length=40)
    name: str = Field(min_length=1, max_length=200)
    client_name: str = Field(min_length=1, max_length=200)
    project_type: str = Field(default="Residential", max_length=80)
    budget: Decimal | None = Field(default=None, max_digits=14, decimal_places=2, ge=0)
    quotation_amount: Decimal | None = Field(default=None, max_digits=14, decimal_places=2, ge=0)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    due_date: date | None = None
    status: ProjectStatus = ProjectStatus.pending


class ProjectCreate(ProjectBase):
    assigned_user_id: int | None = None


class ProjectUpdate(BaseModel):
    project_code: str | None = Field(default=None, min_length=1, max_length=40)
    name: str | None = Field(default=None, min_length=1, max_length=200)
    client_name: str | None = Field(default=None, min_length=1, max_length=200)
    project_type: str | None = Field(default=None, max_length=80)
    budget: Decimal | None = Field(default=None, max_digits=14, decimal_places=2, ge=0)
    quotation_amount: Decimal | None = Field(default=None, max_digits=14, decimal_places=2, ge=0)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    due_date: date | None = None
    status: ProjectStatus | None = None
    assigned_user_id: int | None = None


class ProjectAssignmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: int
    assigned_at: datetime


class ProjectRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    project_code: str
    name: str
    client_name: str
    project_type: str
    budget: DecimalNumber | None = None
    quotation_amount: DecimalNumber | None = None
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    due_date: date | None = None
    status: ProjectStatus
    company_id: int
    assignments: list[ProjectAssignmentRead] = []
    created_at: datetime
    updated_at: datetime


class ProjectResult(BaseModel):
    success: bool = True
    message: str
    project: ProjectRead


class ProjectFileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    project_id: int
    file_name: str
    url: str
    content_type: str | None = None
    size_bytes: int
    uploaded_by: int | None = None
    created_at: datetime


class ProjectFileResult(BaseModel):
    success: bool = True
    message: str
    files: list[ProjectFileRead]
