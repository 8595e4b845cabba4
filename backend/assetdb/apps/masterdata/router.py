from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from assetdb.database import get_db, get_read_db
from assetdb.security import WRITE_ROLES, get_current_active_user, require_roles
from assetdb.apps.accounts import models as account_models

from . import schemas, services

router = APIRouter(prefix="", tags=["masterdata"])


# ---------------------------------------------------------------------------
# DEPARTMENTS
# ---------------------------------------------------------------------------


@router.get("/departments", response_model=List[schemas.DepartmentRead])
def list_departments(
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_departments(db)


@router.post(
    "/departments",
    response_model=schemas.DepartmentRead,
    status_code=status.HTTP_201_CREATED,
)
def create_department(
    payload: schemas.DepartmentCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*WRITE_ROLES)),
):
    department = services.create_department(db, payload=payload, actor=current_user)
    db.commit()
    db.refresh(department)
    return department


@router.delete("/departments/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_department(
    department_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*WRITE_ROLES)),
):
    services.delete_department(db, department_id=department_id, actor=current_user)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# LOCATIONS
# ---------------------------------------------------------------------------


@router.get("/locations", response_model=List[schemas.LocationRead])
def list_locations(
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_locations(db)


@router.post(
    "/locations",
    response_model=schemas.LocationRead,
    status_code=status.HTTP_201_CREATED,
)
def create_location(
    payload: schemas.LocationCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*WRITE_ROLES)),
):
    location = services.create_location(db, payload=payload, actor=current_user)
    db.commit()
    db.refresh(location)
    return location


@router.delete("/locations/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_location(
    location_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*WRITE_ROLES)),
):
    services.delete_location(db, location_id=location_id, actor=current_user)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# EMPLOYEES
# ---------------------------------------------------------------------------


@router.get("/employees", response_model=List[schemas.EmployeeRead])
def list_employees(
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_employees(db)


@router.post(
    "/employees",
    response_model=schemas.EmployeeRead,
    status_code=status.HTTP_201_CREATED,
)
def create_employee(
    payload: schemas.EmployeeCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*WRITE_ROLES)),
):
    employee = services.create_employee(db, payload=payload, actor=current_user)
    db.commit()
    db.refresh(employee)
    return employee


@router.patch("/employees/{employee_id}", response_model=schemas.EmployeeRead)
def update_employee(
    employee_id: str,
    payload: schemas.EmployeeUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*WRITE_ROLES)),
):
    employee = services.update_employee(db, employee_id=employee_id, payload=payload, actor=current_user)
    db.commit()
    db.refresh(employee)
    return employee


@router.delete("/employees/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employee(
    employee_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*WRITE_ROLES)),
):
    services.delete_employee(db, employee_id=employee_id, actor=current_user)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
