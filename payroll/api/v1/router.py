# payroll/api/v1/router.py
from fastapi import APIRouter

from payroll.api.v1 import auth, company, departments, employees, payment_methods, roles

api_router = APIRouter()

api_router.include_router(auth.router,            prefix="/auth",            tags=["auth"])
api_router.include_router(company.router,         prefix="/company",         tags=["company"])
api_router.include_router(departments.router,     prefix="/departments",     tags=["departments"])
api_router.include_router(roles.router,           prefix="/roles",           tags=["roles"])
api_router.include_router(payment_methods.router, prefix="/payment-methods", tags=["payment-methods"])
api_router.include_router(employees.router,       prefix="/employees",       tags=["employees"])
