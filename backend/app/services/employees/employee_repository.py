"""
Record store for employees, backed by an SQLAlchemy async session.

Every write is its own transaction: it commits on success, rolls back on any
SQLAlchemy error and reports the outcome as a WriteResult.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import delete, exists, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.employee import Employee

logger = logging.getLogger("employees.repository")


@dataclass
class WriteResult:
    committed: bool
    employee: Optional[Employee] = None
    error: Optional[str] = None


class EmployeeRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_all(self) -> List[Employee]:
        result = await self.db.execute(select(Employee).order_by(Employee.id))
        return list(result.scalars().all())

    async def list_with_salary_above(self, min_salary: float) -> List[Employee]:
        query = (
            select(Employee)
            .where(Employee.salary > min_salary)
            .order_by(Employee.id)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get(self, employee_id: int) -> Optional[Employee]:
        return await self.db.get(Employee, employee_id)

    async def exists(self, employee_id: int) -> bool:
        result = await self.db.execute(select(exists().where(Employee.id == employee_id)))
        return bool(result.scalar())

    async def insert(self, employee: Employee) -> WriteResult:
        self.db.add(employee)
        return await self._commit(employee, "insert")

    async def save(self, employee: Employee) -> WriteResult:
        return await self._commit(employee, "update")

    async def delete(self, employee_id: int) -> WriteResult:
        try:
            await self.db.execute(delete(Employee).where(Employee.id == employee_id))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Employee delete failed for ID {employee_id}: {e}")
            return WriteResult(committed=False, error=str(e))
        return WriteResult(committed=True)

    async def _commit(self, employee: Employee, operation: str) -> WriteResult:
        try:
            await self.db.commit()
            await self.db.refresh(employee)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Employee {operation} failed: {e}")
            return WriteResult(committed=False, error=str(e))
        return WriteResult(committed=True, employee=employee)
