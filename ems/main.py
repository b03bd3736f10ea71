import socket
from contextlib import asynccontextmanager
from typing import Final

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .application.view_registry import build_view_registry
from .config import settings
from .domain.exceptions import DomainError
from .infrastructure.api_client import EmployeeApiClient
from .infrastructure.database.database import get_main_engine, init_db
from .logging_config import get_logger, setup_logging
from .logging_utils import log_system_info
from .middleware import log_requests_middleware
from .presentation.api_routes import api_router
from .presentation.error_handlers import handle_domain_error, render_error_response
from .presentation.routes import router
from .request_utils import is_api_request
from .telemetry import setup_telemetry


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger = get_logger(__name__)

    init_db(get_main_engine())
    logger.info("Database initialized successfully")

    employee_api = EmployeeApiClient()
    app.state.employee_api = employee_api
    app.state.view_registry = build_view_registry(employee_api)
    logger.info("Employee views ready", backend_url=employee_api.base_url)

    hostname = socket.gethostname()
    ip_addr = socket.gethostbyname(hostname)
    log_system_info(hostname, ip_addr, settings.debug)

    yield

    await app.state.view_registry.close()
    await employee_api.aclose()
    logger.info("Application shutdown completed")


app: Final = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
    description="""
**EMS (Employee Management System)** - list, add, update and delete employees.

## Employee view

The HTMX-powered list removes a deleted employee immediately and shows an undo
notification with a shrinking progress bar. The delete is only sent to the
backend once the undo window has passed; undoing in time never touches the
backend.

## REST API

`/api/employees` offers create, list, get, update and (soft) delete. Deleted
employees disappear from every endpoint.
    """.strip(),
    openapi_tags=[
        {
            "name": "employees",
            "description": "Manage employee records",
        },
    ],
)

setup_telemetry(app)

app.middleware("http")(log_requests_middleware)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    """Global handler for domain-specific errors."""
    logger = get_logger(__name__)
    logger.warning(
        "Domain error occurred",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method,
    )
    return handle_domain_error(exc, request)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Global handler for unexpected errors."""
    logger = get_logger(__name__)
    logger.error(
        "Unexpected error occurred",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )

    if is_api_request(request):
        return JSONResponse(
            status_code=500,
            content={"detail": "An unexpected error occurred. Please try again."},
        )
    return render_error_response(
        request, "Something went wrong. Please try again.", status_code=500
    )


app.include_router(router)
app.include_router(api_router)
