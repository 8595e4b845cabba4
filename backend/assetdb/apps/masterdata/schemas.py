from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DepartmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class DepartmentRead(DepartmentCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


class DepartmentRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str


class LocationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    building: Optional[str] = None


class LocationRead(LocationCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


class EmployeeCreate(BaseModel):
    emp_code: str = Field(..., min_length=1, max_length=32)
    name: str = Field(..., min_length=1, max_length=255)
    nickname: Optional[str] = None
    gender: Optional[str] = None
    email: Optional[str] = None
    tel: Optional[str] = None
    location: Optional[str] = None
    image_url: Optional[str] = None
    department_id: Optional[str] = None


class EmployeeUpdate(BaseModel):
    emp_code: Optional[str] = Field(default=None, min_length=1, max_length=32)
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    nickname: Optional[str] = None
    gender: Optional[str] = None
    email: Optional[str] = None
    tel: Optional[str] = None
    location: Optional[str] = None
    image_url: Optional[str] = None
    department_id: Optional[str] = None


class EmployeeRead(EmployeeCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime
    department: Optional[DepartmentRef] = None
