from payroll.crud.base import CRUDCompanyScoped
from payroll.models.department import Department
from payroll.schemas.department import DepartmentCreate, DepartmentUpdate


class CRUDDepartment(CRUDCompanyScoped[Department, DepartmentCreate, DepartmentUpdate]):
    pass


department_crud = CRUDDepartment(Department)
