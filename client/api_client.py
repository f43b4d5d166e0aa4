import logging
from typing import Any, Dict, Optional

import requests

from config.settings import DEFAULT_SINK_TIMEOUT_SECONDS, client_timeout


class WaitlistSubmissionError(RuntimeError):
    """The waitlist API could not be reached or rejected the submission."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class WaitlistApiClient:
    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = client_timeout(DEFAULT_SINK_TIMEOUT_SECONDS),
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.logger = logging.getLogger("client.api_client")

    def _build_url(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url}{path}"

    def submit(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Posts a signup and returns the decoded response body.

        Raises:
            WaitlistSubmissionError: On transport failure or a non-2xx reply.
        """
        url = self._build_url("/api/waitlist")

        try:
            response = requests.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as error:
            self.logger.error("Waitlist request error: %s", error)
            raise WaitlistSubmissionError(f"Network error: {error}") from error

        if not 200 <= response.status_code < 300:
            self.logger.error(
                "Waitlist API error %s: %s",
                response.status_code,
                response.text,
            )
            raise WaitlistSubmissionError(
                f"Waitlist API error {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError:
            return {}

        if not isinstance(body, dict):
            return {}
        return body
