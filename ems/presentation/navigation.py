"""Navigation between the employee pages."""

from typing import Final

from fastapi import Request, Response, status
from fastapi.responses import RedirectResponse

from ..logging_config import get_logger
from ..request_utils import is_htmx_request

logger: Final = get_logger(__name__)

EMPLOYEES_PATH: Final = "/employees"
ADD_EMPLOYEE_PATH: Final = "/add-employee"


def update_employee_path(employee_id: int) -> str:
    return f"/update-employee/{employee_id}"


def go_to(request: Request, path: str) -> Response:
    """Send the browser to ``path``.

    HTMX requests get an ``HX-Redirect`` header so the client does a full page
    load; plain form posts get a 303 redirect.
    """
    logger.debug("Navigating", path=path, htmx=is_htmx_request(request))
    if is_htmx_request(request):
        return Response(status_code=status.HTTP_200_OK, headers={"HX-Redirect": path})
    return RedirectResponse(url=path, status_code=status.HTTP_303_SEE_OTHER)
