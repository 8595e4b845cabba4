from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from assetdb.apps.inventory.schemas import SerialRead
from assetdb.apps.masterdata.schemas import DepartmentRef

TransactionStatus = Literal["Active", "Completed"]


class BorrowRequest(BaseModel):
    serial_id: str = Field(..., min_length=1)
    employee_id: Optional[str] = None
    department_id: Optional[str] = None
    note: Optional[str] = None

    @model_validator(mode="after")
    def _one_borrower(self) -> "BorrowRequest":
        if bool(self.employee_id) == bool(self.department_id):
            raise ValueError("Provide exactly one of employee_id or department_id.")
        return self


class EmployeeRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    emp_code: str
    name: str


class TransactionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    serial_id: str
    employee_id: Optional[str] = None
    department_id: Optional[str] = None
    borrow_date: datetime
    return_date: Optional[datetime] = None
    status: TransactionStatus
    note: Optional[str] = None
    created_at: datetime
    serial: Optional[SerialRead] = None
    employee: Optional[EmployeeRef] = None
    department: Optional[DepartmentRef] = None
