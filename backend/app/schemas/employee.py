from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class EmployeeCreate(BaseModel):
    """Payload for creating or updating an employee. `salary` is the base salary."""
    name: str = Field(..., description="Employee name; must not be blank")
    email: Optional[EmailStr] = Field(None, description="Contact email address")
    department: str = Field(..., min_length=1, description="Department, decides the bonus tier")
    salary: float = Field(..., allow_inf_nan=False, description="Base salary before bonus and tax; must be positive")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "department": "Engineering",
                "salary": 1000.0,
            }
        }
    )


class EmployeeResponse(BaseModel):
    """Stored employee; `salary` is the net salary."""
    id: int
    name: str
    email: Optional[str] = None
    department: str
    salary: float

    model_config = ConfigDict(from_attributes=True)
