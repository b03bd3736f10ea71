"""Centralized error handling for the presentation layer."""

from typing import Final

from fastapi import Request, status
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from ..config import settings
from ..domain.exceptions import BackendError, DomainError, EmployeeNotFoundError
from ..request_utils import is_api_request, is_htmx_request

templates: Final = Jinja2Templates(directory="templates/")


class ErrorFormatter:
    """Formats errors for consistent user experience."""

    @staticmethod
    def format_user_friendly_message(error: Exception) -> str:
        """Convert technical errors to user-friendly messages."""
        if isinstance(error, EmployeeNotFoundError):
            return (
                f"Employee {error.employee_id} does not exist or has been deleted."
            )

        elif isinstance(error, BackendError):
            return "The employee service is not reachable right now. Please try again."

        elif isinstance(error, ValueError):
            return "Please check your input and try again."

        else:
            return "Something went wrong. Please try again."


def status_code_for(error: Exception) -> int:
    if isinstance(error, EmployeeNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, BackendError):
        return status.HTTP_502_BAD_GATEWAY
    if isinstance(error, ValueError):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def handle_domain_error(
    error: DomainError, request: Request
) -> JSONResponse | HTMLResponse:
    """Convert domain errors to appropriate HTTP responses."""
    status_code = status_code_for(error)

    if is_api_request(request):
        return JSONResponse(status_code=status_code, content={"detail": str(error)})

    return render_error_response(
        request,
        ErrorFormatter.format_user_friendly_message(error),
        status_code=status_code,
    )


def render_error_response(
    request: Request, message: str, status_code: int = 400
) -> HTMLResponse:
    """Render the error page (or just the message box for HTMX requests)."""
    template = (
        "fragments/error_message.html" if is_htmx_request(request) else "error.html"
    )
    return templates.TemplateResponse(
        request,
        template,
        {"message": message, "settings": settings},
        status_code=status_code,
    )
