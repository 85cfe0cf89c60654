# payroll/api/v1/departments.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from payroll.api.deps import CurrentIdentity, TenantPolicy, get_db, require_identity
from payroll.core.errors import Conflict, NotFound
from payroll.crud.department import department_crud
from payroll.crud.employee import employee_crud
from payroll.schemas.department import DepartmentCreate, DepartmentOut, DepartmentUpdate

router = APIRouter()

tenant_identity = require_identity(TenantPolicy.REQUIRED)

DUPLICATE_NAME = "Department name already exists."


@router.get("", response_model=List[DepartmentOut])
def list_departments(
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(tenant_identity),
):
    return department_crud.list_for_company(db, identity.company_id)


@router.post("", response_model=DepartmentOut, status_code=status.HTTP_201_CREATED)
def create_department(
    body: DepartmentCreate,
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(tenant_identity),
):
    try:
        return department_crud.create(db, body, extra={"company_id": identity.company_id})
    except IntegrityError:
        db.rollback()
        raise Conflict(DUPLICATE_NAME)


@router.patch("/{department_id}", response_model=DepartmentOut)
def update_department(
    department_id: str,
    body: DepartmentUpdate,
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(tenant_identity),
):
    dept = department_crud.get_for_company(db, identity.company_id, department_id)
    if not dept:
        raise NotFound("Department not found.")
    data = body.model_dump(exclude_unset=True)
    if data.get("name") is None:
        data.pop("name", None)
    try:
        return department_crud.update(db, dept, data)
    except IntegrityError:
        db.rollback()
        raise Conflict(DUPLICATE_NAME)


@router.delete("/{department_id}")
def delete_department(
    department_id: str,
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(tenant_identity),
):
    dept = department_crud.get_for_company(db, identity.company_id, department_id)
    if not dept:
        raise NotFound("Department not found.")
    assigned = employee_crud.count_in_department(db, identity.company_id, dept.id)
    if assigned:
        raise Conflict(
            f"Cannot delete this department because {assigned} employee(s) are assigned to it. "
            "Please reassign those employees first."
        )
    department_crud.remove(db, dept.id)
    return {"success": True}
