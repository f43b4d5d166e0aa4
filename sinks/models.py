from typing import Optional

from waitlist.models import WaitlistEntry


class SinkOutcome:
    SUCCESS = "success"
    ERROR = "error"
    NOT_CONFIGURED = "not_configured"


class SinkName:
    GOOGLE_SHEETS = "googleSheets"
    FORMSPREE = "formspree"


MAX_ERROR_BODY_LENGTH = 200


class SinkError(RuntimeError):
    """Raised by a sink client when a delivery cannot be completed."""

    def __init__(
        self,
        sink: str,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(f"{sink}: {message}")
        self.sink = sink
        self.status_code = status_code


def trim_response_body(text: str, limit: int = MAX_ERROR_BODY_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def http_error(sink: str, status_code: int, body: str) -> SinkError:
    return SinkError(
        sink,
        f"API error {status_code}: {trim_response_body(body)}",
        status_code=status_code,
    )


class WaitlistSink:
    """Interface shared by the sink clients.

    ``deliver`` returns on success and raises on any failure.
    """

    name = ""

    def deliver(self, entry: WaitlistEntry) -> None:
        raise NotImplementedError
