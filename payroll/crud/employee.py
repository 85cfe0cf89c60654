from sqlalchemy import func, select
from sqlalchemy.orm import Session

from payroll.crud.base import CRUDCompanyScoped
from payroll.models.employee import Employee
from payroll.schemas.employee import EmployeeCreate, EmployeeUpdate


class CRUDEmployee(CRUDCompanyScoped[Employee, EmployeeCreate, EmployeeUpdate]):
    def count_in_department(self, db: Session, company_id: str, department_id: str) -> int:
        stmt = select(func.count(Employee.id)).where(
            Employee.company_id == company_id, Employee.department_id == department_id
        )
        return db.execute(stmt).scalar_one()

    def count_with_role(self, db: Session, company_id: str, role_id: str) -> int:
        stmt = select(func.count(Employee.id)).where(
            Employee.company_id == company_id, Employee.role_id == role_id
        )
        return db.execute(stmt).scalar_one()


employee_crud = CRUDEmployee(Employee)
