"""Test helper functions."""

import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

Route = Tuple[str, str]


class RecordingBackend:
    """
    Fake backend for httpx.MockTransport.

    Routes map (method, path) to a status and JSON body or to a callable
    taking the request. Every request is recorded.
    """

    def __init__(self, routes: Optional[Dict[Route, Any]] = None):
        self.routes: Dict[Route, Any] = dict(routes or {})
        self.requests: List[httpx.Request] = []

    def route(self, method: str, path: str, status: int = 200, body: Any = None) -> None:
        self.routes[(method, path)] = (status, body)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        target = self.routes.get((request.method, request.url.path))

        if target is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        if callable(target):
            return target(request)

        status, body = target
        return httpx.Response(status, json=body)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def last(self, method: str, path: str) -> httpx.Request:
        for request in reversed(self.requests):
            if request.method == method and request.url.path == path:
                return request
        raise AssertionError(f"No {method} {path} request recorded")


def request_json(request: httpx.Request) -> Dict[str, Any]:
    return json.loads(request.content.decode("utf-8"))


def make_api_client(backend: RecordingBackend, token: Optional[str] = "test-token"):
    """StorefrontApiClient wired to a RecordingBackend."""
    from storefront.services.api_client import StorefrontApiClient

    return StorefrontApiClient(
        base_url="https://api.test.local/api",
        token_provider=lambda: token,
        transport=backend.transport(),
    )


def listener_log() -> Tuple[list, Callable[[frozenset], None]]:
    """A list and a listener that appends set snapshots to it."""
    snapshots: list = []
    return snapshots, lambda snapshot: snapshots.append(set(snapshot))
