"""
Waitlist relay HTTP API.

Endpoints:
- GET  /api/health    -> liveness check
- POST /api/waitlist  -> register an email and copy it to the sinks

Usage:
    uvicorn app.main:build_app --factory
"""
import logging
from typing import Any, List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from waitlist.intake_service import WaitlistIntakeService
from waitlist.models import MissingEmailError, WaitlistSubmission, utc_timestamp


logger = logging.getLogger("app.server")


class WaitlistRequest(BaseModel):
    """Body of POST /api/waitlist.

    Fields accept any JSON type; non-string values are treated as absent
    further down, so a numeric email is rejected as missing.
    """

    email: Optional[Any] = None
    name: Optional[Any] = None
    company: Optional[Any] = None
    role: Optional[Any] = None
    useCase: Optional[Any] = None
    referralSource: Optional[Any] = None
    social: Optional[Any] = None
    timestamp: Optional[Any] = None


def create_app(
    service: WaitlistIntakeService,
    cors_allow_origins: Optional[List[str]] = None,
) -> FastAPI:
    app = FastAPI(
        title="Quickgage Waitlist API",
        version="0.1.0",
        description="Relays waitlist signups to Google Sheets and Formspree",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_allow_origins or ["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.state.intake_service = service

    @app.get("/api/health")
    def health_check():
        return {"status": "ok", "timestamp": utc_timestamp()}

    # Sync handler: FastAPI runs it on its thread pool, so concurrent
    # submissions share the service and its position counter
    @app.post("/api/waitlist")
    def join_waitlist(request: WaitlistRequest):
        submission = WaitlistSubmission.from_payload(
            request.model_dump(exclude_none=True)
        )

        try:
            result = service.submit(submission)
        except MissingEmailError as error:
            logger.info("Rejected waitlist submission: %s", error)
            return JSONResponse(status_code=400, content={"error": str(error)})

        status_code = 200 if result.success else 500
        return JSONResponse(
            status_code=status_code,
            content=result.to_response_body(),
        )

    return app
