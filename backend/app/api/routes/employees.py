from typing import Any, List, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from app.api.deps import get_employee_service
from app.core.rate_limiter import RateLimits, limiter
from app.schemas.employee import EmployeeCreate, EmployeeResponse
from app.services.employees import EmployeeService, ErrorKind, ServiceError

router = APIRouter()

_STATUS_FOR_ERROR = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
}


def _raise_for_error(error: ServiceError) -> NoReturn:
    raise HTTPException(status_code=_STATUS_FOR_ERROR[error.kind], detail=error.message)


@router.get("", response_model=List[EmployeeResponse])
async def get_all_employees(
    service: EmployeeService = Depends(get_employee_service),
) -> Any:
    """
    Retrieve all employees.
    """
    result = await service.list_employees()
    return result.value


# Declared before /{employee_id} so the literal path wins
@router.get("/high-earners", response_model=List[EmployeeResponse])
async def get_high_earners(
    min_salary: float = Query(..., alias="minSalary", description="Exclusive lower bound on net salary"),
    service: EmployeeService = Depends(get_employee_service),
) -> Any:
    """
    Employees earning strictly more than `minSalary`.
    """
    result = await service.get_high_earners(min_salary)
    return result.value


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee_by_id(
    employee_id: int,
    service: EmployeeService = Depends(get_employee_service),
) -> Any:
    """
    Get employee by ID.
    """
    result = await service.get_employee(employee_id)
    if not result.ok:
        _raise_for_error(result.error)
    return result.value


@router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RateLimits.API_WRITE)
async def create_employee(
    request: Request,
    payload: EmployeeCreate,
    service: EmployeeService = Depends(get_employee_service),
) -> Any:
    """
    Create an employee. `salary` is the base salary; the stored salary is the net.
    """
    result = await service.create_employee(payload)
    if not result.ok:
        _raise_for_error(result.error)
    return result.value


@router.put("/{employee_id}", response_model=EmployeeResponse)
@limiter.limit(RateLimits.API_WRITE)
async def update_employee(
    request: Request,
    employee_id: int,
    payload: EmployeeCreate,
    service: EmployeeService = Depends(get_employee_service),
) -> Any:
    """
    Replace an employee's name, department and salary; email only when the body sets it.
    """
    result = await service.update_employee(employee_id, payload)
    if not result.ok:
        _raise_for_error(result.error)
    return result.value


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
@limiter.limit(RateLimits.API_WRITE)
async def delete_employee(
    request: Request,
    employee_id: int,
    service: EmployeeService = Depends(get_employee_service),
) -> Response:
    result = await service.delete_employee(employee_id)
    if not result.ok:
        _raise_for_error(result.error)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
