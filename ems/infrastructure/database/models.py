from datetime import datetime

from sqlmodel import Field, SQLModel

from ...domain.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH
from ...domain.entities import Employee as DomainEmployee


class Employee(SQLModel, table=True):  # type: ignore[call-arg]
    """An employee row. Deleting only stamps ``deleted_at``."""

    __tablename__ = "employees"

    id: int | None = Field(default=None, primary_key=True)
    first_name: str = Field(max_length=MAX_NAME_LENGTH)
    last_name: str = Field(max_length=MAX_NAME_LENGTH)
    email: str = Field(index=True, max_length=MAX_EMAIL_LENGTH)
    deleted_at: datetime | None = Field(default=None, index=True)

    @classmethod
    def from_domain(cls, domain_employee: DomainEmployee) -> "Employee":
        """Convert domain entity to persistence model."""
        return cls(
            id=domain_employee.id,
            first_name=domain_employee.first_name,
            last_name=domain_employee.last_name,
            email=domain_employee.email,
        )

    def to_domain(self) -> DomainEmployee:
        """Convert persistence model to domain entity."""
        return DomainEmployee(
            id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
        )
