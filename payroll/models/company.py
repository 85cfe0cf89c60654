# payroll/models/company.py
from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, Enum, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll.db.base import Base
from payroll.models.user import new_id

if TYPE_CHECKING:
    from payroll.models.department import Department
    from payroll.models.employee import Employee
    from payroll.models.payment_method import PaymentMethod
    from payroll.models.role import Role
    from payroll.models.user import User


class EntityType(str, enum.Enum):
    SOLE_PROPRIETORSHIP = "sole_proprietorship"
    PARTNERSHIP = "partnership"
    PRIVATE_LIMITED = "private_limited"
    PUBLIC_LIMITED = "public_limited"
    NGO = "ngo"
    OTHER = "other"


class Company(Base):
    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    # one company per user
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), unique=True)

    name: Mapped[str] = mapped_column(String(160))
    entity_type: Mapped[EntityType] = mapped_column(Enum(EntityType, name="entity_type"))
    pan_vat: Mapped[str] = mapped_column(String(32), unique=True)
    address: Mapped[str] = mapped_column(String(255))
    phone: Mapped[str] = mapped_column(String(30))
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    owner: Mapped["User"] = relationship(back_populates="company")
    departments: Mapped[List["Department"]] = relationship(
        back_populates="company", cascade="all, delete-orphan"
    )
    roles: Mapped[List["Role"]] = relationship(back_populates="company", cascade="all, delete-orphan")
    payment_methods: Mapped[List["PaymentMethod"]] = relationship(
        back_populates="company", cascade="all, delete-orphan"
    )
    employees: Mapped[List["Employee"]] = relationship(back_populates="company", cascade="all, delete-orphan")
