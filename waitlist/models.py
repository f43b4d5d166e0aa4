from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional


# Wire names of the optional profile fields, in sheet column order
PROFILE_FIELDS = (
    "name",
    "company",
    "role",
    "useCase",
    "referralSource",
    "social",
)


class PriorityScore:
    BASE = 1
    WITH_PROFILE = 2


class MissingEmailError(ValueError):
    """Raised when a submission arrives without an email address."""


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return ""


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def compute_priority_score(profile: Mapping[str, str]) -> int:
    for name in PROFILE_FIELDS:
        if _as_text(profile.get(name)).strip():
            return PriorityScore.WITH_PROFILE
    return PriorityScore.BASE


@dataclass
class WaitlistSubmission:
    email: str
    profile: Dict[str, str] = field(default_factory=dict)
    timestamp: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "WaitlistSubmission":
        """Builds a submission from a decoded JSON body.

        Non-string values are treated as absent.
        """
        profile = {name: _as_text(payload.get(name)) for name in PROFILE_FIELDS}
        timestamp = _as_text(payload.get("timestamp")) or None
        return cls(
            email=_as_text(payload.get("email")),
            profile=profile,
            timestamp=timestamp,
        )

    def ensure_email(self) -> None:
        if not self.email.strip():
            raise MissingEmailError("Email is required")


@dataclass
class WaitlistEntry:
    email: str
    timestamp: str
    profile: Dict[str, str]
    priority_score: int
    position: int

    @classmethod
    def from_submission(
        cls,
        submission: WaitlistSubmission,
        position: int,
        received_at: Optional[str] = None,
    ) -> "WaitlistEntry":
        profile = {
            name: _as_text(submission.profile.get(name)) for name in PROFILE_FIELDS
        }
        return cls(
            email=submission.email,
            timestamp=submission.timestamp or received_at or utc_timestamp(),
            profile=profile,
            priority_score=compute_priority_score(profile),
            position=position,
        )

    def to_row(self) -> List[Any]:
        row: List[Any] = [self.email, self.timestamp]
        row.extend(self.profile.get(name, "") for name in PROFILE_FIELDS)
        row.append(self.priority_score)
        row.append(self.position)
        return row
