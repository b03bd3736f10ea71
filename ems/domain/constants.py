"""Domain business rules and constants."""

from typing import Final

# Undo window for a deleted employee, in milliseconds
UNDO_DURATION_MS: Final = 3000
# Progress bar refresh resolution, in milliseconds
PROGRESS_TICK_MS: Final = 50
FULL_PROGRESS: Final = 100.0

MAX_NAME_LENGTH: Final = 100
MAX_EMAIL_LENGTH: Final = 254
