"""Request helpers and fakes shared by the test modules."""

from fastapi.testclient import TestClient
from starlette.websockets import WebSocketState

from app.services.broadcast import BroadcastChannel, ChangeEvent


def register(client: TestClient, name: str, email: str, password: str = "pw123") -> str:
    response = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 200, response.text
    return response.json()["token"]


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def create_task(client: TestClient, token: str, **fields) -> dict:
    response = client.post("/api/tasks", json=fields, headers=auth(token))
    assert response.status_code == 200, response.text
    return response.json()["task"]


class FakeWebSocket:
    """Records frames sent through the broadcast channel."""

    def __init__(self, fail: bool = False):
        self.client_state = WebSocketState.CONNECTED
        self.sent: list[dict] = []
        self.fail = fail

    async def send_json(self, message: dict) -> None:
        if self.fail:
            raise RuntimeError("socket is gone")
        self.sent.append(message)


class RecordingChannel(BroadcastChannel):
    """Broadcast channel that keeps published events instead of sending them."""

    def __init__(self):
        super().__init__()
        self.events: list[ChangeEvent] = []

    def publish(self, event: ChangeEvent) -> None:
        self.events.append(event)


class ExplodingChannel(BroadcastChannel):
    def publish(self, event: ChangeEvent) -> None:
        raise RuntimeError("broadcast backend unavailable")
