# Services Package
# Re-exports for route and dependency modules

# Employee Services
from app.services.employees import (
    EmployeeRepository,
    EmployeeService,
    ErrorKind,
    ServiceError,
    ServiceResult,
    StoreWriteError,
    WriteResult,
)

# Messaging Services
from app.services.messaging import (
    KafkaProducerService,
    close_kafka_producer_service,
    get_kafka_producer_service,
)

__all__ = [
    "EmployeeRepository",
    "EmployeeService",
    "ErrorKind",
    "ServiceError",
    "ServiceResult",
    "StoreWriteError",
    "WriteResult",
    "KafkaProducerService",
    "get_kafka_producer_service",
    "close_kafka_producer_service",
]
