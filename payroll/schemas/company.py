from typing import Optional

from pydantic import EmailStr, Field

from payroll.models.company import EntityType
from payroll.schemas.common import CamelModel


class CompanyCreate(CamelModel):
    name: str = Field(min_length=1, max_length=160)
    entity_type: EntityType
    pan_vat: str = Field(min_length=1, max_length=32)
    address: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=1, max_length=30)
    email: Optional[EmailStr] = None


class CompanyUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=160)
    entity_type: Optional[EntityType] = None
    pan_vat: Optional[str] = Field(default=None, min_length=1, max_length=32)
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None


class CompanyOut(CamelModel):
    id: str
    user_id: str
    name: str
    entity_type: EntityType
    pan_vat: str
    address: str
    phone: str
    email: Optional[str] = None
