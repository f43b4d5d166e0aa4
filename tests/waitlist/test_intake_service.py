import threading

import pytest

from sinks.models import SinkError
from waitlist.intake_service import WaitlistIntakeService
from waitlist.models import MissingEmailError, WaitlistSubmission
from waitlist.position_counter import PositionCounter


class DummySink:
    def __init__(self, name, fail=False):
        self.name = name
        self.fail = fail
        self.entries = []
        self._lock = threading.Lock()

    def deliver(self, entry):
        with self._lock:
            self.entries.append(entry)
        if self.fail:
            raise SinkError(self.name, "API error 500: boom", status_code=500)


def make_service(sheets=None, formspree=None):
    return WaitlistIntakeService(
        position_counter=PositionCounter(),
        sheets_client=sheets,
        formspree_client=formspree,
        sink_timeout_seconds=5,
    )


def test_submit_delivers_entry_to_both_sinks():
    sheets = DummySink("googleSheets")
    formspree = DummySink("formspree")
    service = make_service(sheets, formspree)

    result = service.submit(
        WaitlistSubmission.from_payload(
            {"email": "jane@example.com", "role": "Engineer"}
        )
    )

    assert result.success is True
    assert result.position == 1
    assert result.priority_score == 2
    assert result.outcomes == {"googleSheets": "success", "formspree": "success"}
    assert sheets.entries[0].email == "jane@example.com"
    assert formspree.entries[0] is sheets.entries[0]


def test_submit_fails_when_no_sink_is_configured():
    service = make_service()

    result = service.submit(WaitlistSubmission.from_payload({"email": "a@b.co"}))

    assert result.success is False
    assert result.outcomes == {
        "googleSheets": "not_configured",
        "formspree": "not_configured",
    }
    body = result.to_response_body()
    assert body["success"] is False
    assert body["error"] == "Failed to save email"
    assert body["results"]["position"] == 1


def test_one_successful_sink_is_enough():
    formspree = DummySink("formspree")
    service = make_service(sheets=DummySink("googleSheets", fail=True), formspree=formspree)

    result = service.submit(WaitlistSubmission.from_payload({"email": "a@b.co"}))

    assert result.success is True
    assert result.outcomes == {"googleSheets": "error", "formspree": "success"}
    assert result.priority_score == 1


def test_both_sinks_failing_is_an_aggregate_failure():
    service = make_service(
        sheets=DummySink("googleSheets", fail=True),
        formspree=DummySink("formspree", fail=True),
    )

    result = service.submit(WaitlistSubmission.from_payload({"email": "a@b.co"}))

    assert result.success is False
    assert result.outcomes == {"googleSheets": "error", "formspree": "error"}


def test_missing_email_invokes_no_sink_and_consumes_no_position():
    sheets = DummySink("googleSheets")
    formspree = DummySink("formspree")
    service = make_service(sheets, formspree)

    with pytest.raises(MissingEmailError):
        service.submit(WaitlistSubmission.from_payload({}))

    assert sheets.entries == []
    assert formspree.entries == []
    assert service.position_counter.peek() == 1


def test_resubmitting_the_same_email_gets_a_new_position():
    formspree = DummySink("formspree")
    service = make_service(formspree=formspree)

    first = service.submit(WaitlistSubmission.from_payload({"email": "a@b.co"}))
    second = service.submit(WaitlistSubmission.from_payload({"email": "a@b.co"}))

    assert (first.position, second.position) == (1, 2)
    assert len(formspree.entries) == 2


def test_concurrent_submissions_receive_distinct_positions():
    service = make_service(formspree=DummySink("formspree"))
    positions = []
    positions_lock = threading.Lock()

    def submit(index):
        result = service.submit(
            WaitlistSubmission.from_payload({"email": f"user{index}@example.com"})
        )
        with positions_lock:
            positions.append(result.position)

    threads = [threading.Thread(target=submit, args=(i,)) for i in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(positions) == list(range(1, 21))
