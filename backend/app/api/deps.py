from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import AsyncSessionLocal
from app.core.cache import get_region_cache
from app.services.employees import EmployeeRepository, EmployeeService
from app.services.messaging import KafkaProducerService, get_kafka_producer_service


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


async def get_employee_service(db: AsyncSession = Depends(get_db)) -> EmployeeService:
    """One service per request: a fresh session, the process-wide cache."""
    return EmployeeService(EmployeeRepository(db), await get_region_cache())


def get_message_producer() -> KafkaProducerService:
    return get_kafka_producer_service()
