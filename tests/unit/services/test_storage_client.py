from __future__ import annotations

import pytest
import requests

from venturescope.core.exceptions import ExternalServiceError
from venturescope.services import storage
from venturescope.services.storage import StorageClient


class _Response:
    def __init__(self, status_code=200, content=b""):
        self.status_code = status_code
        self.content = content

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error", response=self)


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(storage.time, "sleep", lambda _seconds: None)
    return StorageClient(base_url="https://storage.test", service_key="service-key", bucket="documents")


def _scripted(monkeypatch, outcomes):
    calls = []

    def _request(method, url, **kwargs):
        calls.append((method, url))
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(storage.requests, "request", _request)
    return calls


def test_download_recovers_from_transient_failures(client, monkeypatch):
    calls = _scripted(
        monkeypatch,
        [requests.exceptions.ConnectionError("reset by peer"), _Response(503), _Response(content=b"deck")],
    )
    assert client.download("1/2/123-deck.pdf") == b"deck"
    assert len(calls) == 3
    assert calls[0] == ("GET", "https://storage.test/storage/v1/object/documents/1/2/123-deck.pdf")


def test_client_errors_are_not_retried(client, monkeypatch):
    calls = _scripted(monkeypatch, [_Response(404)])
    with pytest.raises(ExternalServiceError, match="Storage download failed"):
        client.download("1/2/missing.pdf")
    assert len(calls) == 1


def test_gives_up_after_max_retries(client, monkeypatch):
    calls = _scripted(monkeypatch, [requests.exceptions.Timeout("slow")] * 3)
    with pytest.raises(ExternalServiceError, match="Storage upload failed"):
        client.upload("1/2/deck.pdf", b"%PDF", "application/pdf")
    assert len(calls) == 3
