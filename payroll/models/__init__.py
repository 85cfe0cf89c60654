# Importing the modules registers their tables on Base.metadata
from payroll.models.user import User
from payroll.models.company import Company, EntityType
from payroll.models.department import Department
from payroll.models.role import Role
from payroll.models.payment_method import PaymentMethod
from payroll.models.employee import Employee, Gender

__all__ = [
    "User",
    "Company",
    "EntityType",
    "Department",
    "Role",
    "PaymentMethod",
    "Employee",
    "Gender",
]
