from typing import Optional

from pydantic import BaseModel, Field, field_validator

from payroll.schemas.common import CamelModel, strip_optional, strip_required


class RoleCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)

    clean_name = field_validator("name")(strip_required)
    clean_description = field_validator("description")(strip_optional)


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)

    clean_name = field_validator("name")(strip_required)
    clean_description = field_validator("description")(strip_optional)


class RoleOut(CamelModel):
    id: str
    company_id: str
    name: str
    description: Optional[str] = None
