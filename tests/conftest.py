"""Pytest configuration and fixtures for tests.

Provides a DeFactuurClient wired to an in-memory httpx transport, so no
test ever reaches the network.
"""

from typing import Any, Dict, List, Optional

import httpx
import pytest

from defactuur.services.defactuur_client import DeFactuurClient

API_TOKEN = "test-api-token"


class RecordingTransport:
    """Mock transport answering queued responses and recording requests."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._responses: List[httpx.Response] = []

    def queue(
        self,
        status_code: int = 200,
        json_body: Any = None,
        content: bytes = b"",
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        if json_body is not None:
            response = httpx.Response(status_code, json=json_body, headers=headers)
        else:
            response = httpx.Response(status_code, content=content, headers=headers)
        self._responses.append(response)

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if not self._responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        return self._responses.pop(0)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def http_client(transport):
    client = httpx.Client(transport=httpx.MockTransport(transport.handler))
    yield client
    client.close()


@pytest.fixture
def api(http_client) -> DeFactuurClient:
    """Create a DeFactuurClient talking to the recording transport."""
    return DeFactuurClient(
        http_client=http_client,
        api_token=API_TOKEN,
        api_url="https://app.defactuur.be/api",
        api_version="v1",
        timeout=10,
        user_agent="tests/1.0",
    )


@pytest.fixture
def raw_invoice() -> Dict[str, Any]:
    """Invoice as the API returns it, amounts still encoded as strings."""
    return {
        "id": 1204,
        "client_id": 42,
        "iid": "2024-0012",
        "state": "sent",
        "generated": "2024-03-01T10:15:00+01:00",
        "due_date": "2024-03-31",
        "description": "March consultancy",
        "shown_remark": "Thanks for your business",
        "total": "121.00",
        "total_without_vat": "100.00",
        "total_vat": "21.00",
        "total_with_vat": "121.00",
        "items": [
            {
                "description": "Consultancy",
                "price": "50.00",
                "amount": "2",
                "vat": 21,
                "total_without_vat": "100.00",
                "total_vat": "21.00",
                "total_with_vat": "121.00",
            },
        ],
        "payments": [
            {"id": 7, "amount": "60.50", "paid_at": 1709546400, "identifier": "+++090/9337/55493+++"},
            {"id": 8, "amount": "60.50", "paid_at": "2024-03-20", "identifier": None},
        ],
        "some_future_field": {"nested": True},
    }
