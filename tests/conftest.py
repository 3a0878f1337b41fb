from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Callable

import pytest
import requests

ROOT = Path(__file__).resolve().parents[1] / "lambda"
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

from utils import http


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error")


def make_table(headers: list[str], rows: list[tuple[str, ...]], css_class: str = "wikitable sortable") -> str:
    head = "".join(f"<th>{h}</th>" for h in headers)
    body = "".join("<tr>" + "".join(f"<td>{c}</td>" for c in row) + "</tr>" for row in rows)
    return f'<table class="{css_class}"><tbody><tr>{head}</tr>{body}</tbody></table>'


AINU_ROWS = [
    ("1", "I", "kuani"),
    ("2", "you", "eani"),
    ("3", "we", "chokai"),
    ("4", "this", "tan"),
    ("5", "that", "taan"),
    ("6", "who", "nen"),
    ("7", "what", "hemanta"),
    ("8", "not", "somo"),
    ("9", "all", "opitta"),
    ("10", "many", "poro"),
    ("11", "one", "sine"),
    ("12", "two", "tu"),
]


@pytest.fixture()
def ainu_html() -> str:
    return "<div>" + make_table(["No.", "English", "Ainu"], AINU_ROWS) + "</div>"


class FakeHttp:
    """Stands in for the shared requests session; tests set ``handler``."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict]] = []
        self.handler: Callable[[str, dict], FakeResponse] | None = None

    def get(self, url: str, params: dict | None = None, timeout: float | None = None) -> FakeResponse:
        params = params or {}
        self.calls.append((url, params))
        if self.handler is None:
            raise requests.ConnectionError("no network in tests")
        return self.handler(url, params)


@pytest.fixture()
def fake_http(monkeypatch: pytest.MonkeyPatch) -> FakeHttp:
    fake = FakeHttp()
    monkeypatch.setattr(http.session, "get", fake.get)
    return fake
