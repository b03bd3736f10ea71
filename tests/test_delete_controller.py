"""Tests for the optimistic delete-with-undo flow of the employee list view.

Time is simulated with ManualScheduler; ``drain()`` lets issued backend
deletes settle.
"""

import asyncio

import pytest

from ems.application.delete_controller import (
    CommitFailure,
    DeferredDeleteController,
    LoadFailure,
)
from ems.domain.exceptions import BackendError
from tests.fakes import ADA, ALAN, GRACE, FakeEmployeeApi, ManualScheduler


def _ids(controller: DeferredDeleteController) -> list[int | None]:
    return [e.id for e in controller.employees]


@pytest.mark.asyncio
async def test_delete_then_commit_after_undo_window():
    """Deleting from [1, 2] leaves [2]; after 3000 ms the backend delete succeeds.

    Covers:
    - Employee moves from the list into the pending slot at full progress
    - Backend delete is issued only when the undo window closes
    - Pending slot and timers are cleared after a successful commit
    """
    api = FakeEmployeeApi([ADA, GRACE])
    scheduler = ManualScheduler()
    controller = DeferredDeleteController(api, scheduler)
    await controller.load_all()

    assert controller.request_delete(1) is True
    assert _ids(controller) == [2]
    assert controller.pending is not None
    assert controller.pending.employee.id == 1
    assert controller.progress == 100
    assert controller.show_undo

    scheduler.advance(2999)
    assert api.deleted_ids == []

    scheduler.advance(1)
    assert api.deleted_ids == [1]
    await controller.drain()

    assert controller.pending is None
    assert not controller.show_undo
    assert controller.progress == 100
    assert _ids(controller) == [2]
    assert scheduler.armed == []
    assert api.ids == [2]


@pytest.mark.asyncio
async def test_undo_restores_order_without_backend_call():
    """Undo at t=1000 restores [1, 2] and the backend never hears about it.

    Covers:
    - Cancelling inside the undo window performs no network interaction
    - Both timers are cancelled together
    """
    api = FakeEmployeeApi([ADA, GRACE])
    scheduler = ManualScheduler()
    controller = DeferredDeleteController(api, scheduler)
    await controller.load_all()

    controller.request_delete(1)
    scheduler.advance(1000)

    assert controller.cancel_delete() is True
    assert _ids(controller) == [1, 2]
    assert controller.pending is None
    assert controller.progress == 100
    assert scheduler.armed == []

    scheduler.advance(10_000)
    await controller.drain()
    assert api.deleted_ids == []


@pytest.mark.asyncio
async def test_undo_puts_employee_back_at_the_front(controller, scheduler):
    controller.request_delete(2)
    scheduler.advance(500)
    controller.cancel_delete()

    assert _ids(controller) == [2, 1, 3]


@pytest.mark.asyncio
async def test_commit_failure_restores_employee_at_front(
    controller, scheduler, fake_api, errors
):
    """A rejected backend delete brings the employee back.

    Covers:
    - Failed commit prepends the employee to the visible list
    - The failure goes to the error sink instead of the caller
    - Pending slot, tick and progress are reset regardless of outcome
    """
    fake_api.fail_delete.add(2)

    controller.request_delete(2)
    scheduler.advance(3000)
    await controller.drain()

    assert _ids(controller) == [2, 1, 3]
    assert controller.pending is None
    assert controller.progress == 100
    assert scheduler.armed == []

    assert len(errors) == 1
    failure = errors[0]
    assert isinstance(failure, CommitFailure)
    assert failure.employee == GRACE
    assert isinstance(failure.cause, BackendError)


@pytest.mark.asyncio
async def test_preemption_commits_previous_before_arming_next(
    controller, scheduler, fake_api, journal
):
    """A second delete commits the first one immediately.

    Covers:
    - The previous pending employee's backend delete is issued first
    - Only the new deletion's timers are armed afterwards
    """
    controller.request_delete(1)
    scheduler.advance(1200)
    journal.clear()

    assert controller.request_delete(2) is True

    assert journal[0] == ("delete", 1)
    armed_after = [entry for entry in journal[1:] if entry[0] == "arm"]
    assert sorted(kind for _, kind, _ in armed_after) == ["every", "once"]
    assert len(scheduler.armed) == 2
    assert controller.pending is not None
    assert controller.pending.employee.id == 2
    assert controller.progress == 100
    assert _ids(controller) == [3]

    await controller.drain()
    assert fake_api.ids == [2, 3]

    # the new deletion still gets its full window
    scheduler.advance(2999)
    assert fake_api.deleted_ids == [1]
    scheduler.advance(1)
    await controller.drain()
    assert fake_api.deleted_ids == [1, 2]
    assert fake_api.ids == [3]


@pytest.mark.asyncio
async def test_at_most_one_pending_deletion(controller, scheduler, fake_api):
    for employee_id in (1, 2, 3):
        assert controller.request_delete(employee_id)
        assert controller.pending is not None
        assert controller.pending.employee.id == employee_id
        assert len(scheduler.armed) == 2

    assert fake_api.deleted_ids == [1, 2]
    assert _ids(controller) == []

    await controller.drain()
    scheduler.advance(3000)
    await controller.drain()
    assert fake_api.deleted_ids == [1, 2, 3]
    assert controller.pending is None


@pytest.mark.asyncio
async def test_preempted_commit_failure_restores_employee(
    controller, fake_api, errors
):
    fake_api.fail_delete.add(1)

    controller.request_delete(1)
    controller.request_delete(2)
    await controller.drain()

    assert _ids(controller) == [1, 3]
    assert controller.pending is not None
    assert controller.pending.employee.id == 2
    assert [type(e) for e in errors] == [CommitFailure]


@pytest.mark.asyncio
async def test_unknown_employee_is_a_silent_noop(controller, scheduler, errors):
    assert controller.request_delete(99) is False
    assert controller.cancel_delete() is False

    assert _ids(controller) == [1, 2, 3]
    assert controller.pending is None
    assert scheduler.armed == []
    assert errors == []


@pytest.mark.asyncio
async def test_pending_employee_cannot_be_deleted_twice(
    controller, scheduler, fake_api
):
    controller.request_delete(1)

    assert controller.request_delete(1) is False
    assert fake_api.deleted_ids == []
    assert len(scheduler.armed) == 2


@pytest.mark.asyncio
async def test_progress_decreases_to_zero_within_window(controller, scheduler):
    controller.request_delete(1)

    samples = [controller.progress]
    for _ in range(60):
        scheduler.advance(50)
        samples.append(controller.progress)

    assert all(a >= b for a, b in zip(samples, samples[1:], strict=False))
    assert samples[0] == 100
    assert samples[30] == pytest.approx(50.0)
    assert samples[-1] == 0

    await controller.drain()
    assert controller.progress == 100


@pytest.mark.asyncio
async def test_progress_with_coarse_ticks():
    api = FakeEmployeeApi([ADA])
    scheduler = ManualScheduler()
    controller = DeferredDeleteController(api, scheduler, duration_ms=1000, tick_ms=300)
    await controller.load_all()

    controller.request_delete(1)
    scheduler.advance(300)
    assert controller.progress == pytest.approx(70.0)
    scheduler.advance(300)
    assert controller.progress == pytest.approx(40.0)
    scheduler.advance(400)
    assert controller.progress == 0
    await controller.drain()


@pytest.mark.asyncio
async def test_load_all_replaces_visible_list(controller, fake_api):
    fake_api.employees = [ALAN]

    assert await controller.load_all() is True
    assert _ids(controller) == [3]


@pytest.mark.asyncio
async def test_load_failure_keeps_previous_list(controller, fake_api, errors):
    fake_api.fail_list = True
    fake_api.employees = []

    assert await controller.load_all() is False

    assert _ids(controller) == [1, 2, 3]
    assert len(errors) == 1
    assert isinstance(errors[0], LoadFailure)
    assert isinstance(errors[0].cause, BackendError)


@pytest.mark.asyncio
async def test_reload_keeps_pending_employee_hidden(controller):
    controller.request_delete(1)

    await controller.load_all()

    assert _ids(controller) == [2, 3]
    assert controller.pending is not None


@pytest.mark.asyncio
async def test_in_flight_commit_is_not_undone_or_reissued(
    controller, scheduler, fake_api
):
    """Once the window closed, undo is too late and a new delete does not repeat it.

    Covers:
    - cancel_delete is refused while the backend delete is in flight
    - a new delete request does not issue a second delete for the same employee
    - the late completion leaves the newer pending deletion alone
    """
    fake_api.delete_gate = asyncio.Event()

    controller.request_delete(1)
    scheduler.advance(3000)
    await asyncio.sleep(0)

    assert controller.committing
    assert controller.cancel_delete() is False
    assert _ids(controller) == [2, 3]

    assert controller.request_delete(2) is True
    assert fake_api.deleted_ids == [1]

    fake_api.delete_gate.set()
    await controller.drain()

    assert controller.pending is not None
    assert controller.pending.employee.id == 2
    assert len(scheduler.armed) == 2
    assert fake_api.ids == [2, 3]


@pytest.mark.asyncio
async def test_dispose_cancels_timers_and_ignores_later_calls(
    controller, scheduler, fake_api
):
    controller.request_delete(1)

    controller.dispose()

    assert controller.disposed
    assert controller.pending is None
    assert scheduler.armed == []

    scheduler.advance(10_000)
    await controller.drain()
    assert fake_api.deleted_ids == []
    assert controller.request_delete(2) is False


@pytest.mark.asyncio
async def test_commit_failure_after_dispose_does_not_touch_state(
    controller, scheduler, fake_api, errors
):
    fake_api.fail_delete.add(1)
    fake_api.delete_gate = asyncio.Event()

    controller.request_delete(1)
    scheduler.advance(3000)
    await asyncio.sleep(0)
    controller.dispose()

    fake_api.delete_gate.set()
    await controller.drain()

    assert _ids(controller) == [2, 3]
    assert [type(e) for e in errors] == [CommitFailure]


@pytest.mark.asyncio
async def test_reload_started_before_commit_keeps_committed_row_hidden(
    controller, scheduler, fake_api
):
    """A list fetched before a delete settled must not bring the row back.

    Covers:
    - The stale list still contains the committed employee but it stays hidden
    - The row can be requested for deletion again only after a fresh reload
    """
    fake_api.list_gate = asyncio.Event()
    controller.request_delete(1)
    reload = asyncio.create_task(controller.load_all())
    await asyncio.sleep(0)

    scheduler.advance(3000)
    await controller.drain()
    assert fake_api.ids == [2, 3]

    fake_api.list_gate.set()
    assert await reload is True

    assert _ids(controller) == [2, 3]
    assert controller.request_delete(1) is False

    assert await controller.load_all() is True
    assert _ids(controller) == [2, 3]


@pytest.mark.asyncio
async def test_superseded_reload_is_discarded(controller, fake_api):
    gate = asyncio.Event()
    fake_api.list_gate = gate
    stale = asyncio.create_task(controller.load_all())
    await asyncio.sleep(0)

    fake_api.employees = [ALAN]
    fake_api.list_gate = None
    assert await controller.load_all() is True
    assert _ids(controller) == [3]

    gate.set()
    assert await stale is True
    assert _ids(controller) == [3]


@pytest.mark.asyncio
async def test_load_after_dispose_skips_backend(controller, fake_api, errors):
    controller.dispose()
    fake_api.journal.clear()
    fake_api.fail_list = True

    assert await controller.load_all() is False

    assert fake_api.journal == []
    assert errors == []


@pytest.mark.asyncio
async def test_drain_survives_a_raising_error_sink(fake_api, scheduler):
    def exploding_sink(error):
        raise RuntimeError("sink is broken")

    controller = DeferredDeleteController(
        fake_api, scheduler, error_sink=exploding_sink
    )
    await controller.load_all()
    fake_api.fail_delete.add(1)

    controller.request_delete(1)
    scheduler.advance(3000)
    await controller.drain()

    assert controller.pending is None
    assert _ids(controller) == [1, 2, 3]
