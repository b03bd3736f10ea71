import pytest
from sqlmodel import Session, select

from ems.application.employee_service import (
    create_employee,
    delete_employee,
    get_employee,
    get_employees,
    update_employee,
)
from ems.domain.exceptions import EmployeeNotFoundError
from ems.infrastructure.database.models import Employee


def _employee(first_name: str = "Ada", email: str = "ada@example.com") -> Employee:
    return Employee(first_name=first_name, last_name="Lovelace", email=email)


def test_create_employee_assigns_id(session: Session):
    """Test employee creation.

    Covers:
    - Ids are assigned by the database
    """
    created = create_employee(session, _employee())

    assert created.id is not None
    assert get_employee(session, created.id).email == "ada@example.com"


def test_list_employees_ordered_by_id(session: Session):
    first = create_employee(session, _employee("Ada"))
    second = create_employee(session, _employee("Grace", "grace@example.com"))

    assert [e.id for e in get_employees(session)] == [first.id, second.id]


def test_update_employee_overwrites_fields(session: Session):
    created = create_employee(session, _employee())
    assert created.id is not None

    updated = update_employee(
        session,
        created.id,
        Employee(first_name="Augusta", last_name="King", email="augusta@example.com"),
    )

    assert updated.id == created.id
    assert updated.first_name == "Augusta"
    assert get_employee(session, created.id).last_name == "King"


def test_get_unknown_employee_raises(session: Session):
    with pytest.raises(EmployeeNotFoundError) as exc_info:
        get_employee(session, 404)

    assert str(exc_info.value) == "Employee is not exists with given Id: 404"


def test_delete_is_soft(session: Session):
    """Test soft deletion.

    Covers:
    - Deleted rows stay in the table with a deleted_at timestamp
    - Deleted rows are invisible to get, list, update and delete
    """
    kept = create_employee(session, _employee("Grace", "grace@example.com"))
    deleted = create_employee(session, _employee())
    assert deleted.id is not None

    delete_employee(session, deleted.id)

    row = session.exec(select(Employee).where(Employee.id == deleted.id)).one()
    assert row.deleted_at is not None
    assert [e.id for e in get_employees(session)] == [kept.id]
    with pytest.raises(EmployeeNotFoundError):
        get_employee(session, deleted.id)
    with pytest.raises(EmployeeNotFoundError):
        update_employee(session, deleted.id, _employee())
    with pytest.raises(EmployeeNotFoundError):
        delete_employee(session, deleted.id)


def test_model_round_trips_through_domain_entity(session: Session):
    created = create_employee(session, _employee())

    domain = created.to_domain()

    assert domain.id == created.id
    assert domain.full_name == "Ada Lovelace"
    assert Employee.from_domain(domain).email == created.email
