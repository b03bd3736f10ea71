"""Domain-specific exceptions."""


class DomainError(Exception):
    """Base exception for domain errors."""

    pass


class EmployeeNotFoundError(DomainError):
    """Raised when no (non-deleted) employee exists with the given id."""

    def __init__(self, employee_id: int):
        super().__init__(f"Employee is not exists with given Id: {employee_id}")
        self.employee_id = employee_id


class BackendError(DomainError):
    """Raised when the employee backend cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
