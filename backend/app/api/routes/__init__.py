from fastapi import APIRouter

from app.api.routes import employees, messages

api_router = APIRouter()
api_router.include_router(employees.router, prefix="/employees", tags=["employees"])
api_router.include_router(messages.router, prefix="/messages", tags=["messages"])
