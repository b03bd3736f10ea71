"""Infrastructure and technical constants."""

from typing import Final

# Technical configuration constants
DEFAULT_PORT: Final = 8000
DEFAULT_METRICS_PORT: Final = 9464
DEFAULT_BACKEND_URL: Final = f"http://localhost:{DEFAULT_PORT}/api/employees"
VIEW_COOKIE_NAME: Final = "ems_view_id"
