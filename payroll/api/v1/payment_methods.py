from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from payroll.api.deps import CurrentIdentity, TenantPolicy, get_db, require_identity
from payroll.core.errors import BadRequest, NotFound
from payroll.crud.payment_method import payment_method_crud
from payroll.schemas.payment_method import PaymentMethodCreate, PaymentMethodOut, PaymentMethodUpdate

router = APIRouter()

tenant_identity = require_identity(TenantPolicy.REQUIRED)

# duplicates are reported as 400 on this resource, not 409
DUPLICATE_NAME = "Payment method name already exists."


@router.get("", response_model=List[PaymentMethodOut])
def list_payment_methods(
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(tenant_identity),
):
    return payment_method_crud.list_for_company(db, identity.company_id)


@router.post("", response_model=PaymentMethodOut, status_code=status.HTTP_201_CREATED)
def create_payment_method(
    body: PaymentMethodCreate,
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(tenant_identity),
):
    try:
        return payment_method_crud.create(db, body, extra={"company_id": identity.company_id})
    except IntegrityError:
        db.rollback()
        raise BadRequest(DUPLICATE_NAME)


@router.patch("/{payment_method_id}", response_model=PaymentMethodOut)
def update_payment_method(
    payment_method_id: str,
    body: PaymentMethodUpdate,
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(tenant_identity),
):
    method = payment_method_crud.get_for_company(db, identity.company_id, payment_method_id)
    if not method:
        raise NotFound("Payment method not found.")
    data = body.model_dump(exclude_unset=True)
    if data.get("name") is None:
        data.pop("name", None)
    try:
        return payment_method_crud.update(db, method, data)
    except IntegrityError:
        db.rollback()
        raise BadRequest(DUPLICATE_NAME)


@router.delete("/{payment_method_id}")
def delete_payment_method(
    payment_method_id: str,
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(tenant_identity),
):
    method = payment_method_crud.get_for_company(db, identity.company_id, payment_method_id)
    if not method:
        raise NotFound("Payment method not found.")
    payment_method_crud.remove(db, method.id)
    return {"success": True}
