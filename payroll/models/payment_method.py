# payroll/models/payment_method.py
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll.db.base import Base
from payroll.models.user import new_id

if TYPE_CHECKING:
    from payroll.models.company import Company


class PaymentMethod(Base):
    """How a company pays salaries (bank transfer, cash, cheque...)."""

    __tablename__ = "payment_methods"
    __table_args__ = (UniqueConstraint("company_id", "name", name="uq_payment_methods_company_id_name"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    company_id: Mapped[str] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(100))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    company: Mapped["Company"] = relationship(back_populates="payment_methods")
