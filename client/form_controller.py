"""Multi-step waitlist signup form.

The controller owns the draft, the current step and the messages a front end
shows. Front ends render from its attributes and call its operations; they
never change the step themselves.

Steps and transitions::

    EMAIL_ENTRY   --email_accepted-->     PROFILE_ENTRY
    PROFILE_ENTRY --profile_skipped-->    CONFIRMATION
    PROFILE_ENTRY --profile_submitted-->  CONFIRMATION
    PROFILE_ENTRY --submission_failed-->  EMAIL_ENTRY
    any step      --reset-->              EMAIL_ENTRY

A failed submission returns to email entry and drops the profile answers.
"""

import logging
import random
import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from client.api_client import WaitlistApiClient, WaitlistSubmissionError
from client.models import PROFILE_WIRE_NAMES, ProfileFields, SubmissionDraft, WorkflowStep


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

INVALID_EMAIL_MESSAGE = "Please enter a valid email address"
SUBMISSION_FAILED_MESSAGE = "Something went wrong. Please try again."

FALLBACK_POSITION_RANGE = (1, 200)


class FormEvent:
    EMAIL_ACCEPTED = "email_accepted"
    PROFILE_SKIPPED = "profile_skipped"
    PROFILE_SUBMITTED = "profile_submitted"
    SUBMISSION_FAILED = "submission_failed"
    RESET = "reset"


TRANSITIONS = {
    (WorkflowStep.EMAIL_ENTRY, FormEvent.EMAIL_ACCEPTED): WorkflowStep.PROFILE_ENTRY,
    (WorkflowStep.PROFILE_ENTRY, FormEvent.PROFILE_SKIPPED): WorkflowStep.CONFIRMATION,
    (WorkflowStep.PROFILE_ENTRY, FormEvent.PROFILE_SUBMITTED): WorkflowStep.CONFIRMATION,
    (WorkflowStep.PROFILE_ENTRY, FormEvent.SUBMISSION_FAILED): WorkflowStep.EMAIL_ENTRY,
    (WorkflowStep.EMAIL_ENTRY, FormEvent.RESET): WorkflowStep.EMAIL_ENTRY,
    (WorkflowStep.PROFILE_ENTRY, FormEvent.RESET): WorkflowStep.EMAIL_ENTRY,
    (WorkflowStep.CONFIRMATION, FormEvent.RESET): WorkflowStep.EMAIL_ENTRY,
}


class InvalidTransitionError(RuntimeError):
    """An operation was invoked from a step that does not allow it."""


def validate_email(candidate: str) -> bool:
    return bool(EMAIL_PATTERN.fullmatch(candidate))


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _read_position(body: Dict[str, Any]) -> Optional[int]:
    value = body.get("position")
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return None
    return value


class WaitlistFormController:
    def __init__(
        self,
        api_client: WaitlistApiClient,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.api_client = api_client
        self.rng = rng or random.Random()
        self.clock = clock
        self.logger = logging.getLogger("client.form_controller")

        self.step = WorkflowStep.EMAIL_ENTRY
        self.draft = SubmissionDraft()
        self.error = ""
        self.confirmed_email = ""
        # Assigned by the server. Only this value reflects server state.
        self.position: Optional[int] = None
        # Cosmetic stand-in shown when the server reply had no position
        self.fallback_position: Optional[int] = None

    @property
    def display_position(self) -> Optional[int]:
        if self.position is not None:
            return self.position
        return self.fallback_position

    @property
    def position_is_fallback(self) -> bool:
        return self.position is None and self.fallback_position is not None

    def _transition(self, event: str) -> None:
        next_step = TRANSITIONS.get((self.step, event))
        if next_step is None:
            raise InvalidTransitionError(
                f"Cannot handle {event} in step {self.step.value}"
            )
        self.logger.debug("Form step %s -> %s (%s)", self.step.value, next_step.value, event)
        self.step = next_step

    def _require_step(self, step: WorkflowStep, operation: str) -> None:
        if self.step is not step:
            raise InvalidTransitionError(
                f"{operation} is not allowed in step {self.step.value}"
            )

    def update_email(self, value: str) -> None:
        self.draft.email = value

    def update_profile_field(self, field_name: str, value: str) -> None:
        if field_name not in PROFILE_WIRE_NAMES:
            raise ValueError(f"Unknown profile field: {field_name}")
        setattr(self.draft.profile, field_name, value)

    def submit_email_step(self, candidate: Optional[str] = None) -> bool:
        """Validates the email and moves on to the profile step.

        Returns False and sets ``error`` when the email is malformed.
        """
        self._require_step(WorkflowStep.EMAIL_ENTRY, "submit_email_step")

        if candidate is not None:
            self.draft.email = candidate

        if not validate_email(self.draft.email):
            self.error = INVALID_EMAIL_MESSAGE
            return False

        self.error = ""
        self._transition(FormEvent.EMAIL_ACCEPTED)
        return True

    def build_payload(self, skip_profile: bool) -> Dict[str, str]:
        payload = {"email": self.draft.email}
        if not skip_profile:
            payload.update(self.draft.profile.to_payload())
        payload["timestamp"] = self.clock().isoformat().replace("+00:00", "Z")
        return payload

    def submit_final(self, skip_profile: bool = False) -> bool:
        """Sends the signup to the waitlist API.

        Returns True when the form reached the confirmation step.
        """
        self._require_step(WorkflowStep.PROFILE_ENTRY, "submit_final")

        payload = self.build_payload(skip_profile)

        try:
            body = self.api_client.submit(payload)
        except WaitlistSubmissionError as error:
            self.logger.error("Submission error: %s", error)
            self.error = SUBMISSION_FAILED_MESSAGE
            # TODO: product has not decided whether profile answers should
            # survive a failed submission; they are dropped for now
            self.draft.profile = ProfileFields()
            self._transition(FormEvent.SUBMISSION_FAILED)
            return False

        self.position = _read_position(body)
        if self.position is None:
            self.fallback_position = self.rng.randint(*FALLBACK_POSITION_RANGE)

        self.error = ""
        self.confirmed_email = self.draft.email
        self.draft = SubmissionDraft()
        self._transition(
            FormEvent.PROFILE_SKIPPED if skip_profile else FormEvent.PROFILE_SUBMITTED
        )
        return True

    def reset(self) -> None:
        self._transition(FormEvent.RESET)
        self.draft = SubmissionDraft()
        self.error = ""
        self.confirmed_email = ""
        self.position = None
        self.fallback_position = None
