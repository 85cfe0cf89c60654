from payroll.crud.base import CRUDCompanyScoped
from payroll.models.role import Role
from payroll.schemas.role import RoleCreate, RoleUpdate


class CRUDRole(CRUDCompanyScoped[Role, RoleCreate, RoleUpdate]):
    pass


role_crud = CRUDRole(Role)
