import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv


DEFAULT_PORT = 3001
DEFAULT_SINK_TIMEOUT_SECONDS = 10.0
DEFAULT_API_URL = "http://localhost:3001"

# The sheets sink makes up to three HTTP calls per delivery
SINK_CALLS_PER_DELIVERY = 3
# Extra time the client waits beyond the server fan-out deadline
CLIENT_TIMEOUT_MARGIN_SECONDS = 5.0


def fanout_deadline(sink_timeout_seconds: float) -> float:
    return sink_timeout_seconds * SINK_CALLS_PER_DELIVERY


def client_timeout(sink_timeout_seconds: float) -> float:
    return fanout_deadline(sink_timeout_seconds) + CLIENT_TIMEOUT_MARGIN_SECONDS


@dataclass(frozen=True)
class GoogleSheetsSettings:
    sheet_id: str
    client_email: str
    private_key: str
    sheet_name: str = "Sheet1"

    @property
    def is_configured(self) -> bool:
        return bool(self.sheet_id and self.client_email and self.private_key)


@dataclass(frozen=True)
class FormspreeSettings:
    endpoint: str

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint)


@dataclass(frozen=True)
class ServerSettings:
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass(frozen=True)
class ApplicationSettings:
    environment: str = "development"
    log_level: str = "INFO"
    sink_timeout_seconds: float = DEFAULT_SINK_TIMEOUT_SECONDS

    @property
    def fanout_deadline_seconds(self) -> float:
        return fanout_deadline(self.sink_timeout_seconds)


@dataclass(frozen=True)
class ClientSettings:
    api_url: str = DEFAULT_API_URL
    # Must outlast the server's fan-out deadline, or a slow but successful
    # signup looks like a failure and gets resubmitted
    timeout_seconds: float = client_timeout(DEFAULT_SINK_TIMEOUT_SECONDS)


@dataclass(frozen=True)
class Settings:
    application: ApplicationSettings
    server: ServerSettings
    google_sheets: GoogleSheetsSettings
    formspree: FormspreeSettings
    client: ClientSettings


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    if parsed <= 0:
        return default
    return parsed


def _get_list(name: str, default: List[str]) -> List[str]:
    value = os.getenv(name)
    if not value:
        return list(default)
    items = [item.strip() for item in value.split(",") if item.strip()]
    return items or list(default)


def normalize_private_key(raw_key: Optional[str]) -> str:
    """Turns escaped newlines from env files back into real line breaks."""
    if not raw_key:
        return ""
    return raw_key.replace("\\n", "\n")


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Load settings from the environment.

    A ``.env`` file (or ``env_file`` when given) is read first. Variables that
    are already present in the process environment win over the file.
    """
    load_dotenv(env_file or find_dotenv(usecwd=True), override=False)

    application = ApplicationSettings(
        environment=os.getenv("APP_ENV", "development"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        sink_timeout_seconds=_get_float(
            "SINK_TIMEOUT_SECONDS", DEFAULT_SINK_TIMEOUT_SECONDS
        ),
    )

    server = ServerSettings(
        host=os.getenv("HOST", "0.0.0.0"),
        port=_get_int("PORT", DEFAULT_PORT),
        cors_allow_origins=_get_list("CORS_ALLOW_ORIGINS", ["*"]),
    )

    google_sheets = GoogleSheetsSettings(
        sheet_id=os.getenv("GOOGLE_SHEET_ID", "").strip(),
        client_email=os.getenv("GOOGLE_CLIENT_EMAIL", "").strip(),
        private_key=normalize_private_key(os.getenv("GOOGLE_PRIVATE_KEY")),
        sheet_name=os.getenv("GOOGLE_SHEET_NAME", "Sheet1") or "Sheet1",
    )

    formspree = FormspreeSettings(
        endpoint=os.getenv("FORMSPREE_ENDPOINT", "").strip(),
    )

    client = ClientSettings(
        api_url=os.getenv("WAITLIST_API_URL", DEFAULT_API_URL) or DEFAULT_API_URL,
        timeout_seconds=client_timeout(application.sink_timeout_seconds),
    )

    return Settings(
        application=application,
        server=server,
        google_sheets=google_sheets,
        formspree=formspree,
        client=client,
    )
