from collections.abc import Sequence
from datetime import datetime
from typing import Final

from sqlmodel import Session, select

from ..domain.exceptions import EmployeeNotFoundError
from ..infrastructure.database.models import Employee
from ..logging_config import get_logger
from ..logging_utils import log_database_operation
from ..metrics import record_employee_created

logger: Final = get_logger(__name__)


def _commit_and_refresh_employee(session: Session, employee: Employee) -> Employee:
    session.add(employee)
    session.commit()
    session.refresh(employee)
    return employee


def get_employees(session: Session) -> Sequence[Employee]:
    statement: Final = (
        select(Employee)
        .where(Employee.deleted_at.is_(None))  # type: ignore[union-attr]
        .order_by(Employee.id)  # type: ignore[arg-type]
    )
    return session.exec(statement).all()


def get_employee(session: Session, employee_id: int) -> Employee:
    """Return the non-deleted employee with the given id.

    Raises:
        EmployeeNotFoundError: If the id is unknown or soft deleted
    """
    statement: Final = select(Employee).where(
        Employee.id == employee_id,
        Employee.deleted_at.is_(None),  # type: ignore[union-attr]
    )
    employee: Final = session.exec(statement).first()
    if employee is None:
        logger.warning("Employee lookup failed - not found", employee_id=employee_id)
        raise EmployeeNotFoundError(employee_id)
    return employee


def create_employee(session: Session, employee: Employee) -> Employee:
    logger.debug("Creating employee", email=employee.email)

    # Ids are assigned by the database, never by the caller
    employee.id = None
    employee.deleted_at = None
    _commit_and_refresh_employee(session, employee)

    log_database_operation(
        operation="create",
        table="Employee",
        success=True,
        employee_id=employee.id,
    )
    record_employee_created()
    logger.info("Employee created successfully", employee_id=employee.id)
    return employee


def update_employee(session: Session, employee_id: int, changes: Employee) -> Employee:
    """Overwrite name and email of an existing employee.

    Raises:
        EmployeeNotFoundError: If the id is unknown or soft deleted
    """
    employee: Final = get_employee(session, employee_id)

    employee.first_name = changes.first_name
    employee.last_name = changes.last_name
    employee.email = changes.email
    _commit_and_refresh_employee(session, employee)

    log_database_operation(
        operation="update", table="Employee", success=True, employee_id=employee_id
    )
    logger.info("Employee updated successfully", employee_id=employee_id)
    return employee


def delete_employee(session: Session, employee_id: int) -> None:
    """Soft delete an employee.

    Raises:
        EmployeeNotFoundError: If the id is unknown or already deleted
    """
    logger.debug("Soft deleting employee", employee_id=employee_id)

    employee: Final = get_employee(session, employee_id)
    employee.deleted_at = datetime.now()
    _commit_and_refresh_employee(session, employee)

    log_database_operation(
        operation="delete", table="Employee", success=True, employee_id=employee_id
    )
    logger.info("Employee soft deleted successfully", employee_id=employee_id)
