import json
from typing import Any, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient


class ProviderStub:
    """
    Simulates the MiniMax API behind an httpx.MockTransport.
    Responses are queued per path; the last one repeats once the queue runs dry.
    Every outbound request is recorded so tests can assert on call counts and payloads.
    """

    def __init__(self):
        self.routes: Dict[str, List[Dict[str, Any]]] = {}
        self.requests: List[httpx.Request] = []
        self.events: List[str] = []

    def on(self, path: str, *responses: Dict[str, Any]) -> None:
        self.routes[path] = list(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.events.append(f"{request.method} {request.url.path}")

        queue = self.routes.get(request.url.path)
        if not queue:
            return httpx.Response(404, text="no stub for path")

        spec = queue.pop(0) if len(queue) > 1 else queue[0]
        if "raise" in spec:
            raise spec["raise"]
        if "json" in spec:
            return httpx.Response(spec.get("status", 200), json=spec["json"])
        return httpx.Response(spec.get("status", 200), text=spec.get("text", ""))

    def calls(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def payload(self, path: str, index: int = 0) -> Dict[str, Any]:
        return json.loads(self.calls(path)[index].content)


@pytest.fixture
def stub():
    return ProviderStub()


@pytest.fixture
def http_client(stub):
    return httpx.AsyncClient(transport=httpx.MockTransport(stub.handler))


@pytest.fixture
def sleeps(stub):
    """Fake poll delay: records the requested seconds and returns immediately."""
    recorded: List[float] = []

    async def fake_sleep(seconds: float):
        recorded.append(seconds)
        stub.events.append("sleep")

    fake_sleep.recorded = recorded  # type: ignore[attr-defined]
    return fake_sleep


@pytest.fixture
def client(http_client, sleeps):
    from core.dependencies import get_http_client, get_sleeper
    from main import app

    app.dependency_overrides[get_http_client] = lambda: http_client
    app.dependency_overrides[get_sleeper] = lambda: sleeps

    yield TestClient(app)

    app.dependency_overrides.clear()
