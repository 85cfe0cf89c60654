# payroll/api/v1/company.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from payroll.api.deps import CurrentIdentity, TenantPolicy, get_db, require_identity
from payroll.core.errors import BadRequest, Conflict, NotFound
from payroll.crud.company import company_crud
from payroll.schemas.company import CompanyCreate, CompanyOut, CompanyUpdate

logger = logging.getLogger(__name__)

router = APIRouter()

# A freshly signed-up user has no company yet, so these endpoints accept a null tenant
any_identity = require_identity(TenantPolicy.OPTIONAL)


@router.get("/me", response_model=Optional[CompanyOut])
def get_my_company(
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(any_identity),
):
    return company_crud.get_by_user_id(db, identity.id)


@router.post("", response_model=CompanyOut, status_code=status.HTTP_201_CREATED)
def create_my_company(
    body: CompanyCreate,
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(any_identity),
):
    if company_crud.get_by_user_id(db, identity.id):
        raise BadRequest("Company already exists for this user")
    try:
        company = company_crud.create(db, body, extra={"user_id": identity.id})
    except IntegrityError:
        db.rollback()
        raise Conflict("Could not create company. Check PAN/VAT uniqueness.")
    logger.info("Company created", extra={"user_id": identity.id, "company_id": company.id})
    return company


@router.patch("/me", response_model=CompanyOut)
def update_my_company(
    body: CompanyUpdate,
    db: Session = Depends(get_db),
    identity: CurrentIdentity = Depends(any_identity),
):
    company = company_crud.get_by_user_id(db, identity.id)
    if not company:
        raise NotFound("Company not found for this user.")
    try:
        return company_crud.update(db, company, body)
    except IntegrityError:
        db.rollback()
        raise Conflict("Could not update company. Check PAN/VAT uniqueness.")
