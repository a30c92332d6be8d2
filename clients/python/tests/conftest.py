import json
from collections.abc import Callable

import httpx
import pytest

from shopadmin import Client, MemorySessionStore

URL = "https://demo.supabase.co"
KEY = "test-service-key"

Handler = Callable[[httpx.Request], httpx.Response]


def respond(status: int = 200, json_body=None, text: str | None = None, headers: dict | None = None) -> Handler:
    """Handler returning a fresh response on every call."""

    def handler(request: httpx.Request) -> httpx.Response:
        if json_body is not None:
            return httpx.Response(status, json=json_body, headers=headers)
        return httpx.Response(status, text=text or "", headers=headers)

    return handler


def fail(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


class FakeService:
    """Routes requests by (method, path) and records every request."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], Handler] = {}

    def route(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method, path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": f"no route for {request.url.path}"})
        return handler(request)

    def find(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @staticmethod
    def body(request: httpx.Request):
        return json.loads(request.content)


@pytest.fixture
def service() -> FakeService:
    return FakeService()


@pytest.fixture
def store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def client(service, store) -> Client:
    # MockTransport holds no connections, so the AsyncClient needs no closing
    http = httpx.AsyncClient(transport=httpx.MockTransport(service))
    return Client(URL, KEY, session_store=store, http_client=http)
