import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account

from sinks.models import SinkError, SinkName, WaitlistSink, http_error
from waitlist.models import WaitlistEntry


SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
SHEETS_BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"
TOKEN_URI = "https://oauth2.googleapis.com/token"

HEADER_ROW = [
    "Email",
    "Timestamp",
    "Name",
    "Company",
    "Role",
    "Use Case",
    "Referral Source",
    "Social",
    "Priority Score",
    "Position",
]

_PLAIN_SHEET_NAME = re.compile(r"^[A-Za-z0-9_]+$")


def _column_letter(index: int) -> str:
    letters = ""
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


LAST_COLUMN = _column_letter(len(HEADER_ROW))


def build_credentials(
    client_email: str,
    private_key: str,
) -> service_account.Credentials:
    info = {
        "type": "service_account",
        "client_email": client_email,
        "private_key": private_key,
        "token_uri": TOKEN_URI,
    }
    return service_account.Credentials.from_service_account_info(
        info,
        scopes=SHEETS_SCOPES,
    )


class GoogleSheetsClient(WaitlistSink):
    """Appends waitlist entries to a Google spreadsheet.

    The header row is checked before every append and written when the sheet
    is empty. The check and the append are separate API calls, so two
    concurrent first submissions may both write the header.
    """

    name = SinkName.GOOGLE_SHEETS

    def __init__(
        self,
        sheet_id: str,
        client_email: str,
        private_key: str,
        sheet_name: str = "Sheet1",
        timeout_seconds: float = 10,
        session: Optional[requests.Session] = None,
        base_url: str = SHEETS_BASE_URL,
    ) -> None:
        self.sheet_id = sheet_id.strip()
        self.client_email = client_email.strip()
        self.private_key = private_key
        self.sheet_name = sheet_name
        self.timeout_seconds = timeout_seconds
        self.base_url = base_url.rstrip("/")
        self._session = session
        self.logger = logging.getLogger("sinks.sheets_client")

    def _get_session(self) -> requests.Session:
        if self._session is None:
            try:
                credentials = build_credentials(self.client_email, self.private_key)
            except ValueError as error:
                raise SinkError(
                    self.name, f"Invalid service account credentials: {error}"
                ) from error
            self._session = AuthorizedSession(credentials)
        return self._session

    def _range(self, cells: str) -> str:
        sheet = self.sheet_name
        if not _PLAIN_SHEET_NAME.match(sheet):
            sheet = "'" + sheet.replace("'", "''") + "'"
        return f"{sheet}!{cells}"

    def _values_url(self, cells: str, suffix: str = "") -> str:
        encoded_range = quote(self._range(cells), safe="")
        return f"{self.base_url}/{self.sheet_id}/values/{encoded_range}{suffix}"

    def _request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        session = self._get_session()

        try:
            response = session.request(
                method,
                url,
                params=params,
                json=json_body,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as error:
            self.logger.error("Google Sheets request error: %s", error)
            raise SinkError(self.name, f"Network error: {error}") from error
        except GoogleAuthError as error:
            # Token refresh happens inside the request
            self.logger.error("Google Sheets auth error: %s", error)
            raise SinkError(self.name, f"Auth error: {error}") from error

        if response.status_code >= 400:
            self.logger.error(
                "Google Sheets API error %s: %s",
                response.status_code,
                response.text,
            )
            raise http_error(self.name, response.status_code, response.text)

        try:
            return response.json()
        except ValueError:
            return {}

    def has_header_row(self) -> bool:
        data = self._request("GET", self._values_url(f"A1:{LAST_COLUMN}1"))
        rows = data.get("values") or []
        if not rows:
            return False
        return any(str(cell).strip() for cell in rows[0])

    def write_header_row(self) -> None:
        self.logger.info("Writing header row to sheet %s", self.sheet_id)
        self._request(
            "PUT",
            self._values_url(f"A1:{LAST_COLUMN}1"),
            params={"valueInputOption": "USER_ENTERED"},
            json_body={"values": [HEADER_ROW]},
        )

    def append_row(self, values: List[Any]) -> Dict[str, Any]:
        return self._request(
            "POST",
            self._values_url(f"A:{LAST_COLUMN}", suffix=":append"),
            params={
                "valueInputOption": "USER_ENTERED",
                "insertDataOption": "INSERT_ROWS",
            },
            json_body={"values": [values]},
        )

    def deliver(self, entry: WaitlistEntry) -> None:
        if not self.has_header_row():
            self.write_header_row()

        self.append_row(entry.to_row())

        self.logger.info(
            "Saved waitlist entry to Google Sheets (email=%s, position=%s)",
            entry.email,
            entry.position,
        )
