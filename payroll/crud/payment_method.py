from payroll.crud.base import CRUDCompanyScoped
from payroll.models.payment_method import PaymentMethod
from payroll.schemas.payment_method import PaymentMethodCreate, PaymentMethodUpdate


class CRUDPaymentMethod(CRUDCompanyScoped[PaymentMethod, PaymentMethodCreate, PaymentMethodUpdate]):
    pass


payment_method_crud = CRUDPaymentMethod(PaymentMethod)
