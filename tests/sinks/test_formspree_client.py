import pytest
import requests

from sinks.formspree_client import FormspreeClient
from sinks.models import SinkError


class DummyResponse:
    def __init__(self, status=200, text="ok"):
        self.status_code = status
        self.text = text

    def json(self):
        return {"ok": True}


def test_deliver_posts_entry_with_subject(monkeypatch, waitlist_entry):
    calls = {}

    import sinks.formspree_client as formspree_module

    def fake_post(url, json=None, headers=None, timeout=None):
        calls["url"] = url
        calls["json"] = json
        calls["headers"] = headers
        calls["timeout"] = timeout
        return DummyResponse()

    monkeypatch.setattr(formspree_module.requests, "post", fake_post)

    client = FormspreeClient(
        endpoint="https://formspree.io/f/abc",
        timeout_seconds=5,
    )

    client.deliver(waitlist_entry)

    assert calls["url"] == "https://formspree.io/f/abc"
    assert calls["timeout"] == 5
    assert calls["headers"]["Accept"] == "application/json"
    assert calls["json"]["email"] == "jane@example.com"
    assert calls["json"]["timestamp"] == "2026-01-05T10:00:00Z"
    assert calls["json"]["role"] == "Engineer"
    assert calls["json"]["position"] == 7
    assert calls["json"]["priorityScore"] == 2
    assert calls["json"]["_subject"] == "New Quickgage Waitlist Signup #7 (priority 2)"


def test_deliver_raises_sink_error_on_network_exception(monkeypatch, waitlist_entry):
    import sinks.formspree_client as formspree_module

    def fake_post(url, json=None, headers=None, timeout=None):
        raise requests.ConnectionError("Connection failed")

    monkeypatch.setattr(formspree_module.requests, "post", fake_post)

    client = FormspreeClient(endpoint="https://formspree.io/f/abc")

    with pytest.raises(SinkError) as exc_info:
        client.deliver(waitlist_entry)

    assert exc_info.value.sink == "formspree"
    assert "Network error" in str(exc_info.value)
    assert "Connection failed" in str(exc_info.value)


def test_deliver_raises_sink_error_on_http_error(monkeypatch, waitlist_entry):
    import sinks.formspree_client as formspree_module

    def fake_post(url, json=None, headers=None, timeout=None):
        return DummyResponse(status=422, text="Form not found")

    monkeypatch.setattr(formspree_module.requests, "post", fake_post)

    client = FormspreeClient(endpoint="https://formspree.io/f/abc")

    with pytest.raises(SinkError) as exc_info:
        client.deliver(waitlist_entry)

    assert exc_info.value.status_code == 422
    assert "Form not found" in str(exc_info.value)


def test_deliver_trims_long_response_body(monkeypatch, waitlist_entry):
    import sinks.formspree_client as formspree_module

    long_text = "x" * 1000

    def fake_post(url, json=None, headers=None, timeout=None):
        return DummyResponse(status=500, text=long_text)

    monkeypatch.setattr(formspree_module.requests, "post", fake_post)

    client = FormspreeClient(endpoint="https://formspree.io/f/abc")

    with pytest.raises(SinkError) as exc_info:
        client.deliver(waitlist_entry)

    error_message = str(exc_info.value)
    assert len(error_message) < len(long_text)
    assert "..." in error_message


def test_deliver_without_endpoint_does_not_call_requests(monkeypatch, waitlist_entry):
    import sinks.formspree_client as formspree_module

    def fake_post(url, json=None, headers=None, timeout=None):
        raise AssertionError("requests.post must not be called without an endpoint")

    monkeypatch.setattr(formspree_module.requests, "post", fake_post)

    client = FormspreeClient(endpoint="  ")

    with pytest.raises(SinkError):
        client.deliver(waitlist_entry)
