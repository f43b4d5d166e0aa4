from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Dict


class WorkflowStep(Enum):
    EMAIL_ENTRY = "email_entry"
    PROFILE_ENTRY = "profile_entry"
    CONFIRMATION = "confirmation"


# Python attribute name -> JSON field name
PROFILE_WIRE_NAMES = {
    "name": "name",
    "company": "company",
    "role": "role",
    "use_case": "useCase",
    "referral_source": "referralSource",
    "social": "social",
}

REFERRAL_SOURCES = ("twitter", "linkedin", "friend", "search", "other")


@dataclass
class ProfileFields:
    name: str = ""
    company: str = ""
    role: str = ""
    use_case: str = ""
    referral_source: str = ""
    social: str = ""

    def to_payload(self) -> Dict[str, str]:
        values = asdict(self)
        return {wire: values[attr] for attr, wire in PROFILE_WIRE_NAMES.items()}


@dataclass
class SubmissionDraft:
    email: str = ""
    profile: ProfileFields = field(default_factory=ProfileFields)
