"""
Employee service: validation, net salary derivation and cache upkeep around
the employee record store.

Reads go through the region cache:
- "employees"   full list under a single key
- "employee"    one entry per id
- "highEarners" one entry per salary threshold

Writes evict whatever regions they make stale once the store has committed.
"""

import logging
from typing import List, Optional

from app.core.cache import ALL_EMPLOYEES_KEY, CacheRegion, RegionCache
from app.models.employee import Employee
from app.schemas.employee import EmployeeCreate, EmployeeResponse
from app.services.employees.employee_repository import EmployeeRepository
from app.services.employees.results import ServiceResult, StoreWriteError
from app.services.employees.salary import calculate_net_salary

logger = logging.getLogger("employees.service")


def _to_response(employee: Employee) -> EmployeeResponse:
    return EmployeeResponse.model_validate(employee)


def _dump(employees: List[EmployeeResponse]) -> list:
    return [e.model_dump() for e in employees]


def _load(cached: list) -> List[EmployeeResponse]:
    return [EmployeeResponse.model_validate(item) for item in cached]


class EmployeeService:
    def __init__(self, repository: EmployeeRepository, cache: RegionCache):
        self.repository = repository
        self.cache = cache

    async def list_employees(self) -> ServiceResult[List[EmployeeResponse]]:
        cached = await self.cache.get(CacheRegion.EMPLOYEES, ALL_EMPLOYEES_KEY)
        if cached is not None:
            return ServiceResult.success(_load(cached))

        logger.info("Fetching all employees from DB...")
        employees = [_to_response(e) for e in await self.repository.list_all()]
        await self.cache.put(CacheRegion.EMPLOYEES, ALL_EMPLOYEES_KEY, _dump(employees))
        return ServiceResult.success(employees)

    async def get_employee(self, employee_id: int) -> ServiceResult[EmployeeResponse]:
        cached = await self.cache.get(CacheRegion.EMPLOYEE, employee_id)
        if cached is not None:
            return ServiceResult.success(EmployeeResponse.model_validate(cached))

        logger.info(f"Fetching employee {employee_id} from DB...")
        employee = await self.repository.get(employee_id)
        if employee is None:
            return ServiceResult.not_found(employee_id)

        response = _to_response(employee)
        await self.cache.put(CacheRegion.EMPLOYEE, employee_id, response.model_dump())
        return ServiceResult.success(response)

    async def create_employee(self, payload: EmployeeCreate) -> ServiceResult[EmployeeResponse]:
        problem = self._validate(payload)
        if problem:
            return ServiceResult.invalid(problem)

        net_salary = calculate_net_salary(payload.salary, payload.department)
        if net_salary <= 0:
            return ServiceResult.invalid("Calculated net salary must be positive")

        employee = Employee(
            name=payload.name,
            email=payload.email,
            department=payload.department,
            salary=net_salary,
        )
        outcome = await self.repository.insert(employee)
        if not outcome.committed:
            raise StoreWriteError("insert", outcome.error)

        await self.cache.evict_region(CacheRegion.EMPLOYEES)
        await self.cache.evict_region(CacheRegion.HIGH_EARNERS)
        logger.info(f"Created employee {outcome.employee.id} in {payload.department}")
        return ServiceResult.success(_to_response(outcome.employee))

    async def update_employee(
        self, employee_id: int, payload: EmployeeCreate
    ) -> ServiceResult[EmployeeResponse]:
        problem = self._validate(payload)
        if problem:
            return ServiceResult.invalid(problem)

        employee = await self.repository.get(employee_id)
        if employee is None:
            return ServiceResult.not_found(employee_id)

        # Derived from the submitted base only; the stored net value is not reused
        net_salary = calculate_net_salary(payload.salary, payload.department)
        if net_salary <= 0:
            return ServiceResult.invalid("Calculated net salary must be positive")

        employee.name = payload.name
        # An update body without "email" keeps the stored address
        if "email" in payload.model_fields_set:
            employee.email = payload.email
        employee.department = payload.department
        employee.salary = net_salary
        outcome = await self.repository.save(employee)
        if not outcome.committed:
            raise StoreWriteError("update", outcome.error)

        response = _to_response(outcome.employee)
        await self.cache.put(CacheRegion.EMPLOYEE, employee_id, response.model_dump())
        await self.cache.evict_region(CacheRegion.EMPLOYEES)
        await self.cache.evict_region(CacheRegion.HIGH_EARNERS)
        logger.info(f"Updated employee {employee_id}")
        return ServiceResult.success(response)

    async def delete_employee(self, employee_id: int) -> ServiceResult[None]:
        if not await self.repository.exists(employee_id):
            return ServiceResult.not_found(employee_id)

        outcome = await self.repository.delete(employee_id)
        if not outcome.committed:
            raise StoreWriteError("delete", outcome.error)

        await self.cache.evict_region(CacheRegion.EMPLOYEE)
        await self.cache.evict_region(CacheRegion.EMPLOYEES)
        await self.cache.evict_region(CacheRegion.HIGH_EARNERS)
        logger.info(f"Deleted employee {employee_id}")
        return ServiceResult.success()

    async def get_high_earners(self, min_salary: float) -> ServiceResult[List[EmployeeResponse]]:
        """Employees whose net salary is strictly greater than `min_salary`."""
        cached = await self.cache.get(CacheRegion.HIGH_EARNERS, min_salary)
        if cached is not None:
            return ServiceResult.success(_load(cached))

        logger.info(f"Fetching high earners above {min_salary} from DB...")
        employees = [
            _to_response(e) for e in await self.repository.list_with_salary_above(min_salary)
        ]
        await self.cache.put(CacheRegion.HIGH_EARNERS, min_salary, _dump(employees))
        return ServiceResult.success(employees)

    @staticmethod
    def _validate(payload: EmployeeCreate) -> Optional[str]:
        if payload.name is None or not payload.name.strip():
            return "Employee name cannot be empty"
        if payload.salary <= 0:
            return "Salary must be positive"
        return None
