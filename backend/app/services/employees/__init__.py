# Employee Services Package
# Record store, net salary derivation and the cached employee service

from app.services.employees.employee_repository import EmployeeRepository, WriteResult
from app.services.employees.employee_service import EmployeeService
from app.services.employees.results import ErrorKind, ServiceError, ServiceResult, StoreWriteError
from app.services.employees.salary import bonus_rate, calculate_net_salary

__all__ = [
    "EmployeeRepository",
    "WriteResult",
    "EmployeeService",
    "ErrorKind",
    "ServiceError",
    "ServiceResult",
    "StoreWriteError",
    "bonus_rate",
    "calculate_net_salary",
]
