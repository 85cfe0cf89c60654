# payroll/models/employee.py
from __future__ import annotations

import enum
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll.db.base import Base
from payroll.models.user import new_id

if TYPE_CHECKING:
    from payroll.models.company import Company
    from payroll.models.department import Department
    from payroll.models.role import Role


class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class Employee(Base):
    __tablename__ = "employees"
    # NULL pan_no never collides, so employees without one are unrestricted
    __table_args__ = (UniqueConstraint("company_id", "pan_no", name="uq_employees_company_id_pan_no"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    company_id: Mapped[str] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), index=True)
    department_id: Mapped[str] = mapped_column(ForeignKey("departments.id", ondelete="RESTRICT"), index=True)
    role_id: Mapped[str] = mapped_column(ForeignKey("roles.id", ondelete="RESTRICT"), index=True)

    name: Mapped[str] = mapped_column(String(160))
    pan_no: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    gender: Mapped[Gender] = mapped_column(Enum(Gender, name="gender"))
    disability: Mapped[bool] = mapped_column(Boolean, default=False)
    date_of_joining_ad: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    date_of_joining_bs: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    # yearly premiums, whole rupees
    life_insurance: Mapped[int] = mapped_column(Integer, default=0)
    health_insurance: Mapped[int] = mapped_column(Integer, default=0)
    house_insurance: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    company: Mapped["Company"] = relationship(back_populates="employees")
    department: Mapped["Department"] = relationship(lazy="joined")
    role: Mapped["Role"] = relationship(lazy="joined")
