"""One delete controller per browser view.

Each browser gets a view id cookie; its controller keeps the visible list and
the pending deletion between requests. Idle views are disposed lazily, like
expired undo records.
"""

import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Final

from ..config import settings
from ..infrastructure.api_client import EmployeeApi
from ..infrastructure.scheduler import AsyncioScheduler
from ..logging_config import get_logger
from .delete_controller import DeferredDeleteController

logger: Final = get_logger(__name__)

ControllerFactory = Callable[[], DeferredDeleteController]


@dataclass
class ViewSession:
    view_id: str
    controller: DeferredDeleteController
    last_seen: float = field(default=0.0)
    # only true for the request that created the view
    is_new: bool = True


class ViewRegistry:
    """Owns every live controller and disposes it when its view goes away."""

    def __init__(
        self,
        controller_factory: ControllerFactory,
        idle_timeout_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._controller_factory = controller_factory
        self._idle_timeout = (
            idle_timeout_seconds
            if idle_timeout_seconds is not None
            else settings.view_idle_timeout_seconds
        )
        self._clock = clock
        self._views: dict[str, ViewSession] = {}

    def __len__(self) -> int:
        return len(self._views)

    def __contains__(self, view_id: object) -> bool:
        return view_id in self._views

    def get_or_create(self, view_id: str | None) -> ViewSession:
        """Return the view for ``view_id``, or a fresh one if unknown or expired."""
        self._cleanup_expired_views()
        now = self._clock()

        if view_id is not None and view_id in self._views:
            view = self._views[view_id]
            view.last_seen = now
            view.is_new = False
            return view

        new_id = secrets.token_urlsafe(16)
        view = ViewSession(
            view_id=new_id, controller=self._controller_factory(), last_seen=now
        )
        self._views[new_id] = view
        logger.debug("View created", view_id=new_id, views=len(self._views))
        return view

    def dispose(self, view_id: str) -> bool:
        view = self._views.pop(view_id, None)
        if view is None:
            return False
        view.controller.dispose()
        logger.debug("View disposed", view_id=view_id)
        return True

    async def close(self) -> None:
        """Dispose all views and wait for deletes that are already in flight."""
        views = list(self._views.values())
        self._views.clear()
        for view in views:
            view.controller.dispose()
        for view in views:
            await view.controller.drain()
        logger.info("All views disposed", count=len(views))

    def _cleanup_expired_views(self) -> None:
        cutoff = self._clock() - self._idle_timeout
        expired = [
            view_id
            for view_id, view in self._views.items()
            if view.last_seen < cutoff
        ]
        for view_id in expired:
            self.dispose(view_id)

        if expired:
            logger.debug("Cleaned up idle views", views_removed=len(expired))


def build_view_registry(api: EmployeeApi) -> ViewRegistry:
    """Registry whose controllers use the real event loop and the settings."""

    def controller_factory() -> DeferredDeleteController:
        return DeferredDeleteController(
            api,
            AsyncioScheduler(),
            duration_ms=settings.undo_duration_ms,
            tick_ms=settings.progress_tick_ms,
        )

    return ViewRegistry(controller_factory)
