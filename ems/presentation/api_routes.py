from typing import Final

from fastapi import APIRouter, Depends, HTTPException, Path, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlmodel import Session

from ..application.employee_service import (
    create_employee,
    delete_employee,
    get_employee,
    get_employees,
    update_employee,
)
from ..domain.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH
from ..domain.exceptions import EmployeeNotFoundError
from ..infrastructure.database.database import get_session
from ..infrastructure.database.models import Employee

api_router: Final = APIRouter(
    prefix="/api/employees",
    tags=["employees"],
    responses={
        404: {"description": "Not Found - Employee does not exist or was deleted"},
        422: {"description": "Validation Error - Request body validation failed"},
    },
)

DELETE_CONFIRMATION: Final = "Employee Deleted Successfully!"


class EmployeePayload(BaseModel):
    """Request model for creating or updating an employee (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: str = Field(
        ..., max_length=MAX_NAME_LENGTH, description="Given name", examples=["Ada"]
    )
    last_name: str = Field(
        ..., max_length=MAX_NAME_LENGTH, description="Family name", examples=["Lovelace"]
    )
    email: str = Field(
        ...,
        max_length=MAX_EMAIL_LENGTH,
        description="Contact email",
        examples=["ada@example.com"],
    )

    def to_model(self) -> Employee:
        return Employee(
            first_name=self.first_name, last_name=self.last_name, email=self.email
        )


class EmployeeResponse(EmployeePayload):
    """Employee as returned by the API."""

    id: int = Field(description="Unique employee identifier")

    @classmethod
    def from_model(cls, employee: Employee) -> "EmployeeResponse":
        return cls(
            id=employee.id,
            first_name=employee.first_name,
            last_name=employee.last_name,
            email=employee.email,
        )


def _not_found(error: EmployeeNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))


@api_router.post(
    "",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an employee",
)
def api_create_employee(
    payload: EmployeePayload, session: Session = Depends(get_session)
) -> EmployeeResponse:
    employee = create_employee(session, payload.to_model())
    return EmployeeResponse.from_model(employee)


@api_router.get(
    "",
    response_model=list[EmployeeResponse],
    summary="List all employees",
    description="Returns every employee that has not been deleted, ordered by id.",
)
def api_list_employees(
    session: Session = Depends(get_session),
) -> list[EmployeeResponse]:
    return [EmployeeResponse.from_model(e) for e in get_employees(session)]


@api_router.get(
    "/{employee_id}", response_model=EmployeeResponse, summary="Get an employee"
)
def api_get_employee(
    employee_id: int = Path(..., description="Employee identifier"),
    session: Session = Depends(get_session),
) -> EmployeeResponse:
    try:
        return EmployeeResponse.from_model(get_employee(session, employee_id))
    except EmployeeNotFoundError as e:
        raise _not_found(e) from e


@api_router.put(
    "/{employee_id}", response_model=EmployeeResponse, summary="Update an employee"
)
def api_update_employee(
    payload: EmployeePayload,
    employee_id: int = Path(..., description="Employee identifier"),
    session: Session = Depends(get_session),
) -> EmployeeResponse:
    try:
        employee = update_employee(session, employee_id, payload.to_model())
    except EmployeeNotFoundError as e:
        raise _not_found(e) from e
    return EmployeeResponse.from_model(employee)


@api_router.delete(
    "/{employee_id}",
    response_model=str,
    summary="Delete an employee",
    description="Soft deletes the employee; it disappears from all other endpoints.",
)
def api_delete_employee(
    employee_id: int = Path(..., description="Employee identifier"),
    session: Session = Depends(get_session),
) -> str:
    try:
        delete_employee(session, employee_id)
    except EmployeeNotFoundError as e:
        raise _not_found(e) from e
    return DELETE_CONFIRMATION
