"""Shared fixtures: temporary database, Supabase settings and a fake HTTP session."""

import json
from datetime import date
from pathlib import Path
from typing import Any

import pytest
import requests

from custos.config import SupabaseSettings


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, payload: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text
        self.content = text.encode()

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if not self.text:
            raise ValueError("No JSON body")
        return json.loads(self.text)


class FakeHttp:
    """Records requests and answers them from a queue of responses."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.responses: list[FakeResponse] = []
        self.error: Exception | None = None

    def queue(self, status_code: int = 200, payload: Any = None, text: str | None = None) -> None:
        self.responses.append(FakeResponse(status_code, payload, text))

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return FakeResponse(200, [])

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self.request("POST", url, **kwargs)


@pytest.fixture
def fake_http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("connection refused")


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "custos.db"


@pytest.fixture
def supabase_settings() -> SupabaseSettings:
    return SupabaseSettings(url="https://demo.supabase.co", anon_key="anon-key", table="expenses", timeout=5)


@pytest.fixture
def today() -> date:
    return date(2024, 3, 15)
