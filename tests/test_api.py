import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from ems.infrastructure.database.database import get_session
from ems.main import app


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


ADA_PAYLOAD = {"firstName": "Ada", "lastName": "Lovelace", "email": "ada@example.com"}


def _create(client: TestClient, payload: dict | None = None) -> dict:
    response = client.post("/api/employees", json=payload or ADA_PAYLOAD)
    assert response.status_code == 201
    return response.json()


def test_create_employee(client: TestClient):
    data = _create(client)

    assert isinstance(data["id"], int)
    assert data["firstName"] == "Ada"
    assert data["lastName"] == "Lovelace"
    assert data["email"] == "ada@example.com"


def test_list_employees(client: TestClient):
    first = _create(client)
    second = _create(
        client,
        {"firstName": "Grace", "lastName": "Hopper", "email": "grace@example.com"},
    )

    response = client.get("/api/employees")

    assert response.status_code == 200
    assert [e["id"] for e in response.json()] == [first["id"], second["id"]]


def test_get_employee(client: TestClient):
    created = _create(client)

    response = client.get(f"/api/employees/{created['id']}")

    assert response.status_code == 200
    assert response.json() == created


def test_get_unknown_employee_returns_404(client: TestClient):
    response = client.get("/api/employees/999")

    assert response.status_code == 404
    assert response.json()["detail"] == "Employee is not exists with given Id: 999"


def test_update_employee(client: TestClient):
    created = _create(client)

    response = client.put(
        f"/api/employees/{created['id']}",
        json={"firstName": "Augusta", "lastName": "King", "email": "ak@example.com"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "id": created["id"],
        "firstName": "Augusta",
        "lastName": "King",
        "email": "ak@example.com",
    }


def test_update_unknown_employee_returns_404(client: TestClient):
    response = client.put("/api/employees/999", json=ADA_PAYLOAD)

    assert response.status_code == 404


def test_delete_employee_is_soft_and_final(client: TestClient):
    """Test delete endpoint.

    Covers:
    - Delete confirms with a message
    - Deleted employees vanish from list and get
    - Deleting again is a 404
    """
    created = _create(client)

    response = client.delete(f"/api/employees/{created['id']}")
    assert response.status_code == 200
    assert response.json() == "Employee Deleted Successfully!"

    assert client.get("/api/employees").json() == []
    assert client.get(f"/api/employees/{created['id']}").status_code == 404
    assert client.delete(f"/api/employees/{created['id']}").status_code == 404


def test_missing_field_is_rejected(client: TestClient):
    response = client.post(
        "/api/employees", json={"firstName": "Ada", "email": "ada@example.com"}
    )

    assert response.status_code == 422
