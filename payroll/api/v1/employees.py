# payroll/api/v1/employees.py
import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from payroll.api.deps import CurrentIdentity, TenantPolicy, get_db, require_identity
from payroll.core.errors import Conflict, NotFound
from payroll.crud.department import department_crud
from payroll.crud.employee import employee_crud
from payroll.crud.role import role_crud
from payroll.schemas.employee import EmployeeCreate, EmployeeOut, EmployeeUpdate

logger = logging.getLogger(__name__)

router = APIRouter()

tenant_identity = require_identity(TenantPolicy.REQUIRED)

DUPLICATE_PAN = "Employee PAN No already exists in this company."

# fields an explicit null is allowed to clear
NULLABLE_FIELDS = {"pan_no", "date_of_joining_ad", "date_of_joining_bs"}


def _assert_department_and_role(db: Session, company_id: str, department_id: str, role_id: str) -> None:
    if not department_crud.get_for_company(db, company_id, department_id):
        raise NotFound("Department not found.")
    if not role_crud.get_for_company(db, company_id, role_id):
        raise NotFound("Role not found.")


def _get_or_404(db: Session, company_id: str, employee_id: str):
    employee = employee_crud.get_for_company(db, company_id, employee_id)
    if not employee:
        raise NotFound("Employee not found.")
    return employee


@router.get("", response_model=List[EmployeeOut])
def list_employees(
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(tenant_identity),
):
    return employee_crud.list_for_company(db, identity.company_id)


@router.get("/{employee_id}", response_model=EmployeeOut)
def get_employee(
    employee_id: str,
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(tenant_identity),
):
    return _get_or_404(db, identity.company_id, employee_id)


@router.post("", response_model=EmployeeOut, status_code=status.HTTP_201_CREATED)
def create_employee(
    body: EmployeeCreate,
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(tenant_identity),
):
    _assert_department_and_role(db, identity.company_id, body.department_id, body.role_id)
    try:
        employee = employee_crud.create(db, body, extra={"company_id": identity.company_id})
    except IntegrityError:
        db.rollback()
        raise Conflict(DUPLICATE_PAN)
    logger.info("Employee created", extra={"company_id": identity.company_id, "employee_id": employee.id})
    return employee


@router.patch("/{employee_id}", response_model=EmployeeOut)
def update_employee(
    employee_id: str,
    body: EmployeeUpdate,
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(tenant_identity),
):
    employee = _get_or_404(db, identity.company_id, employee_id)

    data = {
        field: value
        for field, value in body.model_dump(exclude_unset=True).items()
        if value is not None or field in NULLABLE_FIELDS
    }
    _assert_department_and_role(
        db,
        identity.company_id,
        data.get("department_id", employee.department_id),
        data.get("role_id", employee.role_id),
    )
    try:
        return employee_crud.update(db, employee, data)
    except IntegrityError:
        db.rollback()
        raise Conflict(DUPLICATE_PAN)


@router.delete("/{employee_id}")
def delete_employee(
    employee_id: str,
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(tenant_identity),
):
    employee = _get_or_404(db, identity.company_id, employee_id)
    employee_crud.remove(db, employee.id)
    logger.info("Employee deleted", extra={"company_id": identity.company_id, "employee_id": employee_id})
    return {"message": "Employee deleted successfully."}
