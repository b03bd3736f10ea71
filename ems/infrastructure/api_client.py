"""HTTP client for the employee REST backend.

The list view only talks to the backend through the ``EmployeeApi`` protocol,
so tests and alternative transports can stand in for ``EmployeeApiClient``.
"""

from collections.abc import Awaitable
from typing import Any, Final, Protocol

import httpx

from ..config import settings
from ..domain.entities import Employee
from ..domain.exceptions import BackendError, EmployeeNotFoundError
from ..logging_config import get_logger

logger: Final = get_logger(__name__)


class EmployeeApi(Protocol):
    """Backend resource operations consumed by the employee views."""

    def list_employees(self) -> Awaitable[list[Employee]]: ...

    def create_employee(self, employee: Employee) -> Awaitable[Employee]: ...

    def get_employee(self, employee_id: int) -> Awaitable[Employee]: ...

    def update_employee(
        self, employee_id: int, employee: Employee
    ) -> Awaitable[Employee]: ...

    def delete_employee(self, employee_id: int) -> Awaitable[None]: ...


def _to_payload(employee: Employee) -> dict[str, Any]:
    return {
        "firstName": employee.first_name,
        "lastName": employee.last_name,
        "email": employee.email,
    }


def _from_payload(data: dict[str, Any]) -> Employee:
    try:
        return Employee(
            id=int(data["id"]),
            first_name=data["firstName"],
            last_name=data["lastName"],
            email=data["email"],
        )
    except (KeyError, TypeError, ValueError) as e:
        raise BackendError(f"Malformed employee payload: {data!r}") from e


class EmployeeApiClient:
    """``EmployeeApi`` over HTTP using a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = (base_url or settings.backend_url).rstrip("/")
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout or settings.backend_timeout_seconds)
        )

    async def __aenter__(self) -> "EmployeeApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str = "",
        *,
        employee_id: int | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(method, url, json=json)
        except httpx.HTTPError as e:
            logger.warning("Backend request failed", method=method, url=url, error=str(e))
            raise BackendError(f"{method} {url} failed: {e}") from e

        if response.status_code == httpx.codes.NOT_FOUND and employee_id is not None:
            raise EmployeeNotFoundError(employee_id)
        if response.is_error:
            logger.warning(
                "Backend returned an error",
                method=method,
                url=url,
                status_code=response.status_code,
            )
            raise BackendError(
                f"{method} {url} returned {response.status_code}",
                status_code=response.status_code,
            )
        return response

    async def list_employees(self) -> list[Employee]:
        response = await self._request("GET")
        return [_from_payload(item) for item in response.json()]

    async def create_employee(self, employee: Employee) -> Employee:
        response = await self._request("POST", json=_to_payload(employee))
        return _from_payload(response.json())

    async def get_employee(self, employee_id: int) -> Employee:
        response = await self._request("GET", f"/{employee_id}", employee_id=employee_id)
        return _from_payload(response.json())

    async def update_employee(self, employee_id: int, employee: Employee) -> Employee:
        response = await self._request(
            "PUT", f"/{employee_id}", employee_id=employee_id, json=_to_payload(employee)
        )
        return _from_payload(response.json())

    async def delete_employee(self, employee_id: int) -> None:
        await self._request("DELETE", f"/{employee_id}", employee_id=employee_id)
        logger.debug("Backend delete confirmed", employee_id=employee_id)
