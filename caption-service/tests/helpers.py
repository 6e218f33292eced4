"""Shared test helpers (e.g. a fake caption pipeline API)."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx

API_BASE = "https://api.test"
PRESIGNED_URL = "https://uploads.test/bucket/a.png?X-Signature=secret"
CDN_URL = "https://cdn.test/a.png"

Responder = Callable[[httpx.Request], httpx.Response]


class FakePipelineApi:
    """httpx handler that serves the four pipeline endpoints and records requests.

    Each endpoint can be overridden with a response or a callable; by default
    every step succeeds.
    """

    def __init__(self, **overrides: httpx.Response | Responder | Exception):
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, httpx.Response | Responder | Exception] = {
            "presign": httpx.Response(200, json={"presignedUrl": PRESIGNED_URL, "cdnUrl": CDN_URL}),
            "upload": httpx.Response(200),
            "register": httpx.Response(200, json={"imageId": "img_1"}),
            "captions": httpx.Response(200, json=[{"id": "c1", "caption": "nice"}]),
        }
        self.routes.update(overrides)

    def _route_for(self, request: httpx.Request) -> str:
        if request.method == "PUT":
            return "upload"
        path = request.url.path
        if path.endswith("/generate-presigned-url"):
            return "presign"
        if path.endswith("/upload-image-from-url"):
            return "register"
        if path.endswith("/generate-captions"):
            return "captions"
        raise AssertionError(f"Unexpected request: {request.method} {request.url}")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes[self._route_for(request)]
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(request)
        return route

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))

    def request_for(self, route: str) -> httpx.Request:
        return next(r for r in self.requests if self._route_for(r) == route)

    def json_body(self, route: str) -> Any:
        return json.loads(self.request_for(route).content)


def record_updates() -> tuple[list[Any], Callable[[Any], None]]:
    """Return a list and an observer that appends every update to it."""
    updates: list[Any] = []
    return updates, updates.append
