from dataclasses import dataclass
from typing import Any, Final

from fastapi import APIRouter, Cookie, Depends, Form, Request, Response, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from ..application.view_registry import ViewRegistry, ViewSession
from ..config import settings
from ..constants import VIEW_COOKIE_NAME
from ..domain.entities import Employee
from ..domain.exceptions import DomainError, EmployeeNotFoundError
from ..infrastructure.api_client import EmployeeApi
from ..logging_config import get_logger
from .error_handlers import (
    ErrorFormatter,
    render_error_response,
    status_code_for,
)
from .navigation import (
    ADD_EMPLOYEE_PATH,
    EMPLOYEES_PATH,
    go_to,
    update_employee_path,
)

logger: Final = get_logger(__name__)

router: Final = APIRouter()
templates: Final = Jinja2Templates(directory="templates/")


def _progress_width(progress: float) -> str:
    """Jinja2 filter: CSS width for the undo progress bar."""
    return f"{max(0.0, min(100.0, progress)):.1f}%"


templates.env.filters["progress_width"] = _progress_width


@dataclass
class EmployeeForm:
    first_name: str
    last_name: str
    email: str

    @classmethod
    def as_form(
        cls,
        first_name: str = Form(""),
        last_name: str = Form(""),
        email: str = Form(""),
    ) -> "EmployeeForm":
        return cls(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email.strip(),
        )

    @classmethod
    def from_employee(cls, employee: Employee) -> "EmployeeForm":
        return cls(
            first_name=employee.first_name,
            last_name=employee.last_name,
            email=employee.email,
        )

    def to_employee(self, employee_id: int | None = None) -> Employee:
        return Employee(
            id=employee_id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
        )


def get_employee_api(request: Request) -> EmployeeApi:
    return request.app.state.employee_api


def get_view_registry(request: Request) -> ViewRegistry:
    return request.app.state.view_registry


def get_view(
    registry: ViewRegistry = Depends(get_view_registry),
    view_id: str | None = Cookie(default=None, alias=VIEW_COOKIE_NAME),
) -> ViewSession:
    return registry.get_or_create(view_id)


async def get_loaded_view(view: ViewSession = Depends(get_view)) -> ViewSession:
    """View for fragment routes; a fresh view loads its list before rendering."""
    if view.is_new:
        logger.info("Loading list for new view", view_id=view.view_id)
        await view.controller.load_all()
    return view


def _list_context(view: ViewSession, message: str | None = None) -> dict[str, Any]:
    controller = view.controller
    return {
        "employees": controller.employees,
        "pending": controller.pending,
        "show_undo": controller.show_undo,
        "can_undo": controller.show_undo and not controller.committing,
        "progress": controller.progress,
        "refresh_ms": settings.snackbar_refresh_ms,
        "settings": settings,
        "message": message,
    }


def _render(
    request: Request,
    view: ViewSession,
    template: str,
    context: dict[str, Any],
    status_code: int = status.HTTP_200_OK,
) -> HTMLResponse:
    response = templates.TemplateResponse(
        request, template, context, status_code=status_code
    )
    response.set_cookie(
        VIEW_COOKIE_NAME, view.view_id, httponly=True, samesite="lax"
    )
    return response


def _render_list_fragment(request: Request, view: ViewSession) -> HTMLResponse:
    return _render(
        request, view, "fragments/employee_list.html", _list_context(view)
    )


@router.get("/", response_class=HTMLResponse)
@router.get(EMPLOYEES_PATH, response_class=HTMLResponse)
async def list_employees(
    *,
    request: Request,
    view: ViewSession = Depends(get_view),
):
    message = None
    if not await view.controller.load_all():
        message = "Could not load employees. Showing the last known list."
    return _render(request, view, "employees.html", _list_context(view, message))


@router.get("/fragments/employees", response_class=HTMLResponse)
async def employee_list_fragment(
    *,
    request: Request,
    view: ViewSession = Depends(get_loaded_view),
):
    """Polled by the page while the undo notification is visible."""
    return _render_list_fragment(request, view)


@router.post("/employees/{employee_id}/delete", response_class=HTMLResponse)
async def route_delete_employee(
    *,
    employee_id: int,
    request: Request,
    view: ViewSession = Depends(get_loaded_view),
):
    view.controller.request_delete(employee_id)
    return _render_list_fragment(request, view)


@router.post("/employees/undo", response_class=HTMLResponse)
async def route_undo_delete(
    *,
    request: Request,
    view: ViewSession = Depends(get_loaded_view),
):
    if not view.controller.cancel_delete():
        logger.debug("Nothing to undo", view_id=view.view_id)
    return _render_list_fragment(request, view)


@router.get("/actions/add-employee")
async def route_add_employee_action(request: Request) -> Response:
    return go_to(request, ADD_EMPLOYEE_PATH)


@router.get("/actions/update-employee/{employee_id}")
async def route_update_employee_action(employee_id: int, request: Request) -> Response:
    return go_to(request, update_employee_path(employee_id))


def _render_form(
    request: Request,
    form: EmployeeForm | None,
    *,
    employee_id: int | None = None,
    message: str | None = None,
    status_code: int = status.HTTP_200_OK,
) -> HTMLResponse:
    action = (
        ADD_EMPLOYEE_PATH if employee_id is None else update_employee_path(employee_id)
    )
    return templates.TemplateResponse(
        request,
        "employee_form.html",
        {
            "form": form,
            "employee_id": employee_id,
            "action": action,
            "title": "Add Employee" if employee_id is None else "Update Employee",
            "message": message,
            "settings": settings,
        },
        status_code=status_code,
    )


@router.get(ADD_EMPLOYEE_PATH, response_class=HTMLResponse)
async def add_employee_page(request: Request):
    return _render_form(request, None)


@router.post(ADD_EMPLOYEE_PATH)
async def route_create_employee(
    *,
    request: Request,
    form: EmployeeForm = Depends(EmployeeForm.as_form),
    api: EmployeeApi = Depends(get_employee_api),
) -> Response:
    try:
        created = await api.create_employee(form.to_employee())
    except DomainError as e:
        logger.warning("Employee creation failed", error=str(e))
        return _render_form(
            request,
            form,
            message=ErrorFormatter.format_user_friendly_message(e),
            status_code=status_code_for(e),
        )
    logger.info("Employee created via form", employee_id=created.id)
    return go_to(request, EMPLOYEES_PATH)


@router.get("/update-employee/{employee_id}", response_class=HTMLResponse)
async def update_employee_page(
    *,
    employee_id: int,
    request: Request,
    api: EmployeeApi = Depends(get_employee_api),
):
    try:
        employee = await api.get_employee(employee_id)
    except EmployeeNotFoundError as e:
        return render_error_response(
            request,
            ErrorFormatter.format_user_friendly_message(e),
            status_code=status.HTTP_404_NOT_FOUND,
        )
    return _render_form(
        request, EmployeeForm.from_employee(employee), employee_id=employee_id
    )


@router.post("/update-employee/{employee_id}")
async def route_update_employee(
    *,
    employee_id: int,
    request: Request,
    form: EmployeeForm = Depends(EmployeeForm.as_form),
    api: EmployeeApi = Depends(get_employee_api),
) -> Response:
    try:
        await api.update_employee(employee_id, form.to_employee(employee_id))
    except DomainError as e:
        logger.warning(
            "Employee update failed", employee_id=employee_id, error=str(e)
        )
        return _render_form(
            request,
            form,
            employee_id=employee_id,
            message=ErrorFormatter.format_user_friendly_message(e),
            status_code=status_code_for(e),
        )
    logger.info("Employee updated via form", employee_id=employee_id)
    return go_to(request, EMPLOYEES_PATH)
