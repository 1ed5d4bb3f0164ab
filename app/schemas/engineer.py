from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.auth import TokenResponse

_PHONE_PATTERN = r"^\d{10}$"


class EngineerCreate(BaseModel):
    emp_id: str = Field(min_length=1, max_length=40)
    name: str = Field(min_length=1, max_length=160)
    phone: str = Field(pattern=_PHONE_PATTERN)
    alternate_phone: str | None = Field(default=None, pattern=_PHONE_PATTERN)
    address: str = Field(min_length=1)
    username: str = Field(min_length=4, max_length=80)
    password: str = Field(min_length=6)


class EngineerUpdate(BaseModel):
    emp_id: str | None = Field(default=None, min_length=1, max_length=40)
    name: str | None = Field(default=None, min_length=1, max_length=160)
    phone: str | None = Field(default=None, pattern=_PHONE_PATTERN)
    alternate_phone: str | None = Field(default=None, pattern=_PHONE_PATTERN)
    address: str | None = Field(default=None, min_length=1)
    username: str | None = Field(default=None, min_length=4, max_length=80)
    password: str | None = Field(default=None, min_length=6)


class EngineerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    emp_id: str
    name: str
    phone: str
    alternate_phone: str | None = None
    address: str
    profile_image: str | None = None
    username: str | None = None
    company_id: int
    user_id: int
    created_at: datetime
    updated_at: datetime


class EngineerResult(BaseModel):
    success: bool = True
    message: str
    engineer: EngineerRead


class EngineerLoginResponse(TokenResponse):
    engineer: EngineerRead | None = None
