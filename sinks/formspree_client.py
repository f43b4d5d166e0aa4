import logging
from typing import Any, Dict

import requests

from sinks.models import SinkError, SinkName, WaitlistSink, http_error
from waitlist.models import WaitlistEntry


DEFAULT_SUBJECT = "New Quickgage Waitlist Signup"


class FormspreeClient(WaitlistSink):
    name = SinkName.FORMSPREE

    def __init__(
        self,
        endpoint: str,
        timeout_seconds: float = 10,
        subject: str = DEFAULT_SUBJECT,
    ) -> None:
        self.endpoint = endpoint.strip()
        self.timeout_seconds = timeout_seconds
        self.subject = subject
        self.logger = logging.getLogger("sinks.formspree_client")

    def build_subject(self, entry: WaitlistEntry) -> str:
        return (
            f"{self.subject} #{entry.position} "
            f"(priority {entry.priority_score})"
        )

    def build_payload(self, entry: WaitlistEntry) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "email": entry.email,
            "timestamp": entry.timestamp,
        }
        payload.update(entry.profile)
        payload["priorityScore"] = entry.priority_score
        payload["position"] = entry.position
        payload["_subject"] = self.build_subject(entry)
        return payload

    def deliver(self, entry: WaitlistEntry) -> None:
        if not self.endpoint:
            raise SinkError(self.name, "Formspree endpoint is not configured")

        payload = self.build_payload(entry)
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        try:
            response = requests.post(
                self.endpoint,
                json=payload,
                headers=headers,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as error:
            self.logger.error("Formspree request error: %s", error)
            raise SinkError(self.name, f"Network error: {error}") from error

        if response.status_code >= 400:
            self.logger.error(
                "Formspree API error %s: %s",
                response.status_code,
                response.text,
            )
            raise http_error(self.name, response.status_code, response.text)

        self.logger.info(
            "Sent waitlist entry to Formspree (email=%s, position=%s)",
            entry.email,
            entry.position,
        )
