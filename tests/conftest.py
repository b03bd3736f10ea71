import pytest
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from ems.application.delete_controller import DeferredDeleteController
from ems.infrastructure.database import models  # noqa: F401  (registers tables)
from tests.fakes import ADA, ALAN, GRACE, FakeEmployeeApi, ManualScheduler


@pytest.fixture(name="session")
def session_fixture():
    """In-memory SQLite shared across threads, so sync routes can use it too."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture
def journal() -> list:
    """Shared record of backend calls and timer arming, in order."""
    return []


@pytest.fixture
def scheduler(journal) -> ManualScheduler:
    return ManualScheduler(journal)


@pytest.fixture
def fake_api(journal) -> FakeEmployeeApi:
    return FakeEmployeeApi([ADA, GRACE, ALAN], journal)


@pytest.fixture
def errors() -> list:
    return []


@pytest.fixture
async def controller(fake_api, scheduler, errors):
    """Controller with the three sample employees already loaded."""
    controller = DeferredDeleteController(
        fake_api, scheduler, error_sink=errors.append
    )
    assert await controller.load_all()
    yield controller
    controller.dispose()
