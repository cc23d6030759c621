"""Pytest configuration to make the local package importable without installation."""
import json
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import requests

# Ensure repository root is on sys.path for module resolution
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from miso_invoice.config import DEFAULT_CONFIG
from miso_invoice.domain.invoice import InvoiceRecord, IssuerProfile


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, status_code: int = 200, body: Any = None, text: Optional[str] = None) -> None:
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else json.dumps(body, ensure_ascii=False)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("No JSON object could be decoded")
        return self._body


class FakeSession:
    """Records outgoing calls and replays a canned response or error."""

    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None) -> None:
        self.response = response or FakeResponse(body={})
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


def miso_payload(results: Any) -> Dict[str, Any]:
    """Wrap a results value the way the workflow API nests it."""

    return {"data": {"outputs": {"결과": results}}}


@pytest.fixture
def credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Provide upstream credentials through the environment."""

    monkeypatch.setenv("MISO_URL", "https://miso.test/ext/v1")
    monkeypatch.setenv("MISO_KEY", "secret-key")


@pytest.fixture
def no_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISO_URL", raising=False)
    monkeypatch.delenv("MISO_KEY", raising=False)


@pytest.fixture
def issuer() -> IssuerProfile:
    return IssuerProfile()


@pytest.fixture
def sample_records() -> List[InvoiceRecord]:
    return [
        InvoiceRecord(
            id="1",
            company="가나상사",
            amount=1200000,
            contact_name="김철수",
            contact_email="kim@example.com",
            issue_date="2025.03.31",
            description="",
        ),
        InvoiceRecord(
            id="2",
            company="다라물산",
            amount=40000,
            contact_name="이영희",
            contact_email="lee@example.com",
            issue_date="",
            description="컨설팅",
        ),
    ]


@pytest.fixture
def fixed_today() -> date:
    return date(2025, 5, 20)


@pytest.fixture
def make_client(credentials):
    """Build a TestClient wired to a fake upstream session."""

    from fastapi.testclient import TestClient

    from app import create_app

    def _make(session: Optional[FakeSession] = None, cfg: Optional[Dict[str, Any]] = None) -> TestClient:
        app = create_app(cfg or json.loads(json.dumps(DEFAULT_CONFIG)), http_session=session or FakeSession())
        return TestClient(app)

    return _make


@pytest.fixture
def connection_error() -> Exception:
    return requests.ConnectionError("connection refused")
