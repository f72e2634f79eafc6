from app.db.base_class import Base
from sqlalchemy import CheckConstraint, Column, Float, Integer, String


class Employee(Base):
    """
    Employee record.

    `salary` holds the net salary derived at write time (base plus department
    bonus minus tax), not the base salary the caller submitted. Nothing in the
    row tells the two apart, so feeding a returned salary back in as the base
    of an update applies bonus and tax a second time.
    """
    __tablename__ = "employees"  # type: ignore[assignment]
    __table_args__ = (
        CheckConstraint("salary > 0", name="ck_employees_salary_positive"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    department = Column(String, nullable=False)
    salary = Column(Float, nullable=False)

    def __repr__(self) -> str:
        return f"<Employee id={self.id} name={self.name!r} department={self.department!r}>"
