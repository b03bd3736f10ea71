"""Optimistic delete-with-undo for the employee list view.

A deletion is applied to the visible list right away, but the backend delete
is only issued when the undo window closes or when another deletion preempts
it. Undoing inside the window never touches the backend.

The controller runs on a single event loop. Its timers and pending slot are
private; callers only use ``load_all``, ``request_delete``, ``cancel_delete``
and ``dispose``.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Final

from ..domain.constants import FULL_PROGRESS, PROGRESS_TICK_MS, UNDO_DURATION_MS
from ..domain.entities import Employee, PendingDeletion
from ..infrastructure.api_client import EmployeeApi
from ..infrastructure.scheduler import Scheduler, TimerHandle
from ..logging_config import get_logger
from ..metrics import record_deletion, record_undo_window

logger: Final = get_logger(__name__)


class ViewError(Exception):
    """Base class for failures reported to the view's error sink."""

    def __init__(self, message: str, cause: BaseException):
        super().__init__(f"{message}: {cause}")
        self.cause = cause


class LoadFailure(ViewError):
    """The employee list could not be fetched; the visible list is unchanged."""

    def __init__(self, cause: BaseException):
        super().__init__("Failed to load employees", cause)


class CommitFailure(ViewError):
    """The deferred backend delete failed; the employee was put back."""

    def __init__(self, employee: Employee, cause: BaseException):
        super().__init__(f"Failed to delete employee {employee.id}", cause)
        self.employee = employee


ErrorSink = Callable[[ViewError], None]


def log_view_error(error: ViewError) -> None:
    """Default error sink: structured error log."""
    logger.error(
        "Employee view operation failed",
        error_type=type(error).__name__,
        error_message=str(error),
        cause_type=type(error.cause).__name__,
    )


class DeferredDeleteController:
    """State of one employee list view and its pending deletion.

    Invariants:
        - at most one deletion is pending at a time
        - a pending deletion always has its progress tick armed; its commit
          timer is armed until it fires
        - the pending employee is never part of ``employees``
    """

    def __init__(
        self,
        api: EmployeeApi,
        scheduler: Scheduler,
        *,
        duration_ms: float = UNDO_DURATION_MS,
        tick_ms: float = PROGRESS_TICK_MS,
        error_sink: ErrorSink = log_view_error,
    ):
        self._api = api
        self._scheduler = scheduler
        self._duration_ms = duration_ms
        self._tick_ms = tick_ms
        self._error_sink = error_sink

        self._employees: list[Employee] = []
        self._pending: PendingDeletion | None = None
        self._progress = FULL_PROGRESS
        self._commit_timer: TimerHandle | None = None
        self._tick_timer: TimerHandle | None = None
        # in-flight backend deletes, by employee id
        self._commits: dict[asyncio.Task[None], int | None] = {}
        # committed employee id -> loads started when the delete succeeded
        self._committed: dict[int, int] = {}
        self._loads_started = 0
        self._loads_applied = 0
        self._disposed = False

    @property
    def employees(self) -> tuple[Employee, ...]:
        return tuple(self._employees)

    @property
    def pending(self) -> PendingDeletion | None:
        return self._pending

    @property
    def progress(self) -> float:
        """Remaining share of the undo window, from 100 down to 0."""
        return self._progress

    @property
    def show_undo(self) -> bool:
        return self._pending is not None

    @property
    def committing(self) -> bool:
        """True once the undo window closed and the backend delete is in flight."""
        return self._pending is not None and self._commit_timer is None

    @property
    def disposed(self) -> bool:
        return self._disposed

    async def load_all(self) -> bool:
        """Replace the visible list with the backend's employees.

        Returns:
            True if the list was replaced, False on failure (reported to the sink)
        """
        if self._disposed:
            return False

        self._loads_started += 1
        load_seq = self._loads_started
        try:
            employees = await self._api.list_employees()
        except Exception as error:
            if not self._disposed:
                self._error_sink(LoadFailure(error))
            return False

        if self._disposed:
            return False
        if load_seq < self._loads_applied:
            logger.debug("Discarding superseded employee list", load_seq=load_seq)
            return True

        # rows whose delete is pending, in flight or settled during this fetch
        hidden = set(self._commits.values())
        hidden.update(
            employee_id
            for employee_id, committed_at in self._committed.items()
            if committed_at >= load_seq
        )
        if self._pending is not None:
            hidden.add(self._pending.employee.id)
        self._employees = [row for row in employees if row.id not in hidden]

        # this list was read after those deletes, so the backend omits them
        self._committed = {
            employee_id: committed_at
            for employee_id, committed_at in self._committed.items()
            if committed_at >= load_seq
        }
        self._loads_applied = load_seq
        logger.debug("Employees loaded", count=len(self._employees))
        return True

    def request_delete(self, employee_id: int) -> bool:
        """Remove an employee from the view and open its undo window.

        A deletion that is still pending is committed immediately first.

        Returns:
            False if the employee is not in the visible list
        """
        if self._disposed:
            return False

        target = next((e for e in self._employees if e.id == employee_id), None)
        if target is None:
            logger.debug("Delete requested for unknown employee", employee_id=employee_id)
            return False

        if self._pending is not None:
            self._preempt()

        self._employees = [e for e in self._employees if e.id != employee_id]
        self._pending = PendingDeletion(employee=target, armed_at=self._scheduler.now())
        self._progress = FULL_PROGRESS
        self._tick_timer = self._scheduler.call_every(self._tick_ms, self._tick)
        self._commit_timer = self._scheduler.call_later(
            self._duration_ms, self._fire_commit
        )

        record_deletion("requested")
        record_undo_window(opened=True)
        logger.info(
            "Employee deletion pending",
            employee_id=employee_id,
            undo_window_ms=self._duration_ms,
        )
        return True

    def cancel_delete(self) -> bool:
        """Undo the pending deletion and put the employee back at the top.

        Returns:
            False if nothing is pending or the backend delete was already issued
        """
        if self._pending is None or self._commit_timer is None:
            return False

        employee = self._pending.employee
        self._clear_pending()
        self._employees.insert(0, employee)

        record_deletion("cancelled")
        logger.info("Employee deletion undone", employee_id=employee.id)
        return True

    def dispose(self) -> None:
        """Cancel all timers. The controller ignores every later call."""
        if self._disposed:
            return
        if self._pending is not None:
            logger.info(
                "Disposing view with pending deletion",
                employee_id=self._pending.employee.id,
            )
            self._clear_pending()
        self._disposed = True

    async def drain(self) -> None:
        """Wait until all issued backend deletes have settled."""
        while self._commits:
            results = await asyncio.gather(
                *list(self._commits), return_exceptions=True
            )
            for result in results:
                if isinstance(result, Exception):
                    logger.error(
                        "Settling a backend delete raised",
                        error_type=type(result).__name__,
                        error_message=str(result),
                    )

    def _preempt(self) -> None:
        assert self._pending is not None
        previous = self._pending
        already_issued = self._commit_timer is None
        self._clear_pending()

        if already_issued:
            logger.debug(
                "Pending deletion already committing",
                employee_id=previous.employee.id,
            )
            return

        record_deletion("preempted")
        logger.info("Committing preempted deletion", employee_id=previous.employee.id)
        self._issue_commit(previous)

    def _tick(self) -> None:
        if self._pending is None:
            return
        elapsed = self._scheduler.now() - self._pending.armed_at
        remaining = FULL_PROGRESS - elapsed / self._duration_ms * FULL_PROGRESS
        # ticks arrive in order, so this only ever shrinks
        self._progress = min(self._progress, max(0.0, remaining))

    def _fire_commit(self) -> None:
        self._commit_timer = None
        if self._pending is None:
            return
        self._progress = 0.0
        self._issue_commit(self._pending)

    def _issue_commit(self, pending: PendingDeletion) -> None:
        employee = pending.employee
        assert employee.id is not None
        request = self._api.delete_employee(employee.id)
        task = asyncio.get_running_loop().create_task(
            self._settle_commit(pending, request)
        )
        self._commits[task] = employee.id
        task.add_done_callback(self._forget_commit)
        logger.debug("Backend delete issued", employee_id=employee.id)

    def _forget_commit(self, task: asyncio.Task[None]) -> None:
        self._commits.pop(task, None)

    async def _settle_commit(
        self, pending: PendingDeletion, request: Awaitable[None]
    ) -> None:
        employee = pending.employee
        try:
            await request
        except Exception as error:
            record_deletion("failed")
            if not self._disposed and all(
                row.id != employee.id for row in self._employees
            ):
                self._employees.insert(0, employee)
            self._error_sink(CommitFailure(employee, error))
        else:
            assert employee.id is not None
            self._committed[employee.id] = self._loads_started
            record_deletion("committed")
            logger.info("Employee deletion committed", employee_id=employee.id)
        finally:
            # a newer deletion may own the slot by now
            if self._pending is pending:
                self._clear_pending()

    def _clear_pending(self) -> None:
        if self._commit_timer is not None:
            self._commit_timer.cancel()
            self._commit_timer = None
        if self._tick_timer is not None:
            self._tick_timer.cancel()
            self._tick_timer = None
        if self._pending is not None:
            record_undo_window(opened=False)
        self._pending = None
        self._progress = FULL_PROGRESS
