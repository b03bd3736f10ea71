"""Business metrics for the EMS application."""

from opentelemetry import metrics

from .logging_config import get_logger

logger = get_logger(__name__)

meter = metrics.get_meter(__name__)

# HTTP Request Metrics
http_request_duration = meter.create_histogram(
    name="http_request_duration_seconds",
    description="Duration of HTTP requests in seconds",
    unit="s",
)

http_requests_total = meter.create_counter(
    name="http_requests_total",
    description="Total number of HTTP requests",
)

http_request_errors = meter.create_counter(
    name="http_request_errors_total",
    description="Total number of HTTP request errors",
)

# Business Metrics
employees_created_total = meter.create_counter(
    name="employees_created_total",
    description="Total number of employees created",
)

employee_deletions_total = meter.create_counter(
    name="employee_deletions_total",
    description="Deletions in the list view by outcome "
    + "(requested, preempted, cancelled, committed, failed)",
)

pending_deletions = meter.create_up_down_counter(
    name="employee_pending_deletions",
    description="Number of deletions currently waiting in an undo window",
)


def record_http_request(method: str, endpoint: str, status_code: int, duration: float):
    """Record HTTP request metrics."""
    labels = {"method": method, "endpoint": endpoint, "status_code": str(status_code)}

    http_request_duration.record(duration, labels)
    http_requests_total.add(1, labels)

    if status_code >= 400:
        http_request_errors.add(1, labels)


def record_employee_created():
    employees_created_total.add(1)


def record_deletion(outcome: str):
    """Record a step of the delete-with-undo flow."""
    employee_deletions_total.add(1, {"outcome": outcome})


def record_undo_window(opened: bool):
    pending_deletions.add(1 if opened else -1)


logger.debug("Business metrics instruments created")
