from __future__ import annotations
from datetime import date

from sqlalchemy.orm import Session
from sqlalchemy import select, or_

from db.models.employee import Employee


class EmployeeRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, employee_id: int) -> Employee | None:
        return self.session.get(Employee, employee_id)

    def list(
        self,
        limit: int = 100,
        offset: int = 0,
        status: str | None = None,
        q: str | None = None,
    ) -> list[Employee]:
        stmt = select(Employee)
        if status is not None:
            stmt = stmt.where(Employee.status == status)
        if q:
            pattern = f"%{q.strip()}%"
            stmt = stmt.where(or_(Employee.first_name.ilike(pattern), Employee.last_name.ilike(pattern)))
        stmt = stmt.order_by(Employee.last_name, Employee.first_name).limit(limit).offset(offset)
        return list(self.session.scalars(stmt))

    def list_all(self) -> list[Employee]:
        return list(self.session.scalars(select(Employee)))

    def create(self, **fields) -> Employee:
        employee = Employee(**fields)
        self.session.add(employee)
        self.session.flush()
        return employee

    def find_by_name_and_birth(self, first_name: str, last_name: str, birth_date: date) -> Employee | None:
        stmt = select(Employee).where(
            Employee.first_name == first_name,
            Employee.last_name == last_name,
            Employee.birth_date == birth_date,
        )
        return self.session.scalars(stmt).first()

    def upsert_by_name_and_birth(
        self,
        first_name: str,
        last_name: str,
        birth_date: date,
        start_date: date | None = None,
        email: str | None = None,
    ) -> tuple[Employee, bool]:
        """Insert or update an employee keyed by name and birth date.

        Returns the row and whether it was newly created.
        """
        employee = self.find_by_name_and_birth(first_name, last_name, birth_date)
        created = employee is None
        if employee is None:
            employee = Employee(
                first_name=first_name,
                last_name=last_name,
                start_date=start_date,
                birth_date=birth_date,
                email=email,
            )
            self.session.add(employee)
        else:
            if start_date is not None:
                employee.start_date = start_date
            if email:
                employee.email = email
        self.session.flush()
        return employee, created
