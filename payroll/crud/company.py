from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from payroll.crud.base import CRUDBase
from payroll.models.company import Company
from payroll.schemas.company import CompanyCreate, CompanyUpdate


class CRUDCompany(CRUDBase[Company, CompanyCreate, CompanyUpdate]):
    def get_by_user_id(self, db: Session, user_id: str) -> Optional[Company]:
        return db.execute(select(Company).where(Company.user_id == user_id)).scalar_one_or_none()

    def get_id_by_user_id(self, db: Session, user_id: str) -> Optional[str]:
        """Tenant id for token claims; None while the user has not created a company."""
        return db.execute(select(Company.id).where(Company.user_id == user_id)).scalar_one_or_none()


company_crud = CRUDCompany(Company)
