from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from payroll.api.deps import CurrentIdentity, TenantPolicy, get_db, require_identity
from payroll.core.errors import Conflict, NotFound
from payroll.crud.employee import employee_crud
from payroll.crud.role import role_crud
from payroll.schemas.role import RoleCreate, RoleOut, RoleUpdate

router = APIRouter()

tenant_identity = require_identity(TenantPolicy.REQUIRED)

DUPLICATE_NAME = "Role name already exists."


@router.get("", response_model=List[RoleOut])
def list_roles(
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(tenant_identity),
):
    return role_crud.list_for_company(db, identity.company_id)


@router.post("", response_model=RoleOut, status_code=status.HTTP_201_CREATED)
def create_role(
    body: RoleCreate,
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(tenant_identity),
):
    try:
        return role_crud.create(db, body, extra={"company_id": identity.company_id})
    except IntegrityError:
        db.rollback()
        raise Conflict(DUPLICATE_NAME)


@router.patch("/{role_id}", response_model=RoleOut)
def update_role(
    role_id: str,
    body: RoleUpdate,
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(tenant_identity),
):
    role = role_crud.get_for_company(db, identity.company_id, role_id)
    if not role:
        raise NotFound("Role not found.")
    data = body.model_dump(exclude_unset=True)
    if data.get("name") is None:
        data.pop("name", None)
    try:
        return role_crud.update(db, role, data)
    except IntegrityError:
        db.rollback()
        raise Conflict(DUPLICATE_NAME)


@router.delete("/{role_id}")
def delete_role(
    role_id: str,
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(tenant_identity),
):
    role = role_crud.get_for_company(db, identity.company_id, role_id)
    if not role:
        raise NotFound("Role not found.")
    assigned = employee_crud.count_with_role(db, identity.company_id, role.id)
    if assigned:
        raise Conflict(
            f"Cannot delete this role because it is assigned to {assigned} employee(s). "
            "Reassign them to another role first."
        )
    role_crud.remove(db, role.id)
    return {"success": True}
