"""Pure domain entities without infrastructure dependencies."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Employee:
    """Core business entity representing an employee record.

    Instances are immutable; the view only ever moves them between the visible
    list and the pending-deletion slot, identity is the id.
    """

    id: int | None
    first_name: str
    last_name: str
    email: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class PendingDeletion:
    """An employee removed from the view whose backend delete has not settled."""

    employee: Employee
    armed_at: float
