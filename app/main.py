import logging
from argparse import ArgumentParser
from typing import Optional

import uvicorn
from fastapi import FastAPI

from app.server import create_app
from config.settings import Settings, load_settings
from logging_config.logger import configure_logging
from sinks.formspree_client import FormspreeClient
from sinks.sheets_client import GoogleSheetsClient
from waitlist.intake_service import WaitlistIntakeService
from waitlist.position_counter import PositionCounter


def build_intake_service(settings: Settings) -> WaitlistIntakeService:
    timeout = settings.application.sink_timeout_seconds

    sheets_client: Optional[GoogleSheetsClient] = None
    if settings.google_sheets.is_configured:
        sheets_client = GoogleSheetsClient(
            sheet_id=settings.google_sheets.sheet_id,
            client_email=settings.google_sheets.client_email,
            private_key=settings.google_sheets.private_key,
            sheet_name=settings.google_sheets.sheet_name,
            timeout_seconds=timeout,
        )

    formspree_client: Optional[FormspreeClient] = None
    if settings.formspree.is_configured:
        formspree_client = FormspreeClient(
            endpoint=settings.formspree.endpoint,
            timeout_seconds=timeout,
        )

    return WaitlistIntakeService(
        position_counter=PositionCounter(start=1),
        sheets_client=sheets_client,
        formspree_client=formspree_client,
        sink_timeout_seconds=settings.application.fanout_deadline_seconds,
    )


def build_app(settings: Optional[Settings] = None) -> FastAPI:
    if settings is None:
        settings = load_settings()

    service = build_intake_service(settings)
    return create_app(service, cors_allow_origins=settings.server.cors_allow_origins)


def main() -> None:
    """Entry point for the waitlist relay server."""
    parser = ArgumentParser(description="Quickgage waitlist relay server")
    parser.add_argument("--host", dest="host", required=False)
    parser.add_argument("--port", dest="port", type=int, required=False)
    args = parser.parse_args()

    settings = load_settings()
    configure_logging(settings.application.log_level)

    logger = logging.getLogger("app.main")

    host = args.host or settings.server.host
    port = args.port or settings.server.port

    logger.info("Application environment: %s", settings.application.environment)
    logger.info(
        "Google Sheets: %s",
        "configured" if settings.google_sheets.is_configured else "not configured",
    )
    logger.info(
        "Formspree: %s",
        "configured" if settings.formspree.is_configured else "not configured",
    )

    app = build_app(settings)

    logger.info("Starting waitlist server on %s:%s", host, port)
    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
