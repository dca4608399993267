from __future__ import annotations

from typing import Any

import pytest


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, reason: str = "OK") -> None:
        self.payload = payload
        self.status_code = status_code
        self.reason = reason

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, response: FakeResponse) -> None:
        self.response = response
        self.urls: list[str] = []

    def get(self, url: str, timeout: float | None = None) -> FakeResponse:
        del timeout
        self.urls.append(url)
        return self.response


@pytest.fixture
def fake_session():
    def _make(payload: Any = None, status_code: int = 200) -> FakeSession:
        return FakeSession(FakeResponse(payload, status_code=status_code))

    return _make
