from datetime import date
from typing import Optional

from pydantic import Field, field_validator

from payroll.models.employee import Gender
from payroll.schemas.common import CamelModel, NamedRef, strip_optional, strip_required


class EmployeeCreate(CamelModel):
    name: str = Field(min_length=1, max_length=160)
    pan_no: Optional[str] = Field(default=None, max_length=32)
    department_id: str = Field(min_length=1)
    role_id: str = Field(min_length=1)
    gender: Gender
    disability: bool = False
    # AD = Gregorian calendar, BS = Bikram Sambat kept as entered (YYYY-MM-DD)
    date_of_joining_ad: Optional[date] = None
    date_of_joining_bs: Optional[str] = Field(default=None, max_length=10)
    life_insurance: int = Field(default=0, ge=0)
    health_insurance: int = Field(default=0, ge=0)
    house_insurance: int = Field(default=0, ge=0)

    clean_name = field_validator("name")(strip_required)
    clean_optional = field_validator("pan_no", "date_of_joining_bs")(strip_optional)


class EmployeeUpdate(CamelModel):
    """Partial update. Explicit null clears ``pan_no`` and the joining dates."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=160)
    pan_no: Optional[str] = Field(default=None, max_length=32)
    department_id: Optional[str] = Field(default=None, min_length=1)
    role_id: Optional[str] = Field(default=None, min_length=1)
    gender: Optional[Gender] = None
    disability: Optional[bool] = None
    date_of_joining_ad: Optional[date] = None
    date_of_joining_bs: Optional[str] = Field(default=None, max_length=10)
    life_insurance: Optional[int] = Field(default=None, ge=0)
    health_insurance: Optional[int] = Field(default=None, ge=0)
    house_insurance: Optional[int] = Field(default=None, ge=0)

    clean_name = field_validator("name")(strip_required)
    clean_optional = field_validator("pan_no", "date_of_joining_bs")(strip_optional)


class EmployeeOut(CamelModel):
    id: str
    company_id: str
    department_id: str
    role_id: str
    name: str
    pan_no: Optional[str] = None
    gender: Gender
    disability: bool
    date_of_joining_ad: Optional[date] = None
    date_of_joining_bs: Optional[str] = None
    life_insurance: int
    health_insurance: int
    house_insurance: int
    department: NamedRef
    role: NamedRef
