import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from sinks.models import SinkName, WaitlistSink
from waitlist.fanout import any_succeeded, settle_all
from waitlist.models import WaitlistEntry, WaitlistSubmission, utc_timestamp
from waitlist.position_counter import PositionCounter


SUCCESS_MESSAGE = "Successfully added to waitlist"
FAILURE_MESSAGE = "Failed to save email"


@dataclass
class IntakeResult:
    success: bool
    position: int
    priority_score: int
    outcomes: Dict[str, str] = field(default_factory=dict)

    def to_response_body(self) -> Dict[str, Any]:
        results: Dict[str, Any] = dict(self.outcomes)
        results["position"] = self.position

        if self.success:
            return {
                "success": True,
                "message": SUCCESS_MESSAGE,
                "position": self.position,
                "priorityScore": self.priority_score,
                "results": results,
            }

        return {
            "success": False,
            "error": FAILURE_MESSAGE,
            "results": results,
        }


class WaitlistIntakeService:
    """Validates a waitlist submission and copies it to every configured sink.

    Args:
        position_counter: Source of process-local positions. Shared by all
            requests handled by this service instance.
        sheets_client: Spreadsheet sink, or None when not configured.
        formspree_client: Webhook sink, or None when not configured.
        sink_timeout_seconds: Upper bound on how long a request waits for the
            sinks. A sink still running after that is reported as an error.
    """

    def __init__(
        self,
        position_counter: PositionCounter,
        sheets_client: Optional[WaitlistSink] = None,
        formspree_client: Optional[WaitlistSink] = None,
        sink_timeout_seconds: float = 10,
    ) -> None:
        self.position_counter = position_counter
        self.sheets_client = sheets_client
        self.formspree_client = formspree_client
        self.sink_timeout_seconds = sink_timeout_seconds
        self.logger = logging.getLogger("waitlist.intake_service")

    @property
    def configured_sinks(self) -> Dict[str, bool]:
        return {
            SinkName.GOOGLE_SHEETS: self.sheets_client is not None,
            SinkName.FORMSPREE: self.formspree_client is not None,
        }

    def submit(self, submission: WaitlistSubmission) -> IntakeResult:
        """Registers one submission.

        Raises:
            MissingEmailError: If the submission has no email. No position is
                consumed and no sink is called in that case.
        """
        submission.ensure_email()

        position = self.position_counter.next()
        entry = WaitlistEntry.from_submission(
            submission,
            position=position,
            received_at=utc_timestamp(),
        )

        self.logger.info(
            "Received waitlist submission (email=%s, position=%s, priority=%s)",
            entry.email,
            entry.position,
            entry.priority_score,
        )

        outcomes = settle_all(
            {
                SinkName.GOOGLE_SHEETS: self._branch(self.sheets_client, entry),
                SinkName.FORMSPREE: self._branch(self.formspree_client, entry),
            },
            timeout_seconds=self.sink_timeout_seconds,
        )

        success = any_succeeded(outcomes)
        if success:
            self.logger.info(
                "Waitlist submission stored (email=%s, results=%s)",
                entry.email,
                outcomes,
            )
        else:
            self.logger.error(
                "Waitlist submission not stored by any sink (email=%s, results=%s)",
                entry.email,
                outcomes,
            )

        return IntakeResult(
            success=success,
            position=entry.position,
            priority_score=entry.priority_score,
            outcomes=outcomes,
        )

    def _branch(self, sink: Optional[WaitlistSink], entry: WaitlistEntry):
        if sink is None:
            return None
        return lambda: sink.deliver(entry)
