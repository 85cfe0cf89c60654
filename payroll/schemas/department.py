from typing import Optional

from pydantic import BaseModel, Field, field_validator

from payroll.schemas.common import CamelModel, strip_optional, strip_required


class DepartmentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = None

    clean_name = field_validator("name")(strip_required)
    clean_description = field_validator("description")(strip_optional)


class DepartmentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = None

    clean_name = field_validator("name")(strip_required)
    clean_description = field_validator("description")(strip_optional)


class DepartmentOut(CamelModel):
    id: str
    company_id: str
    name: str
    description: Optional[str] = None
