"""Pytest configuration and fixtures.

Settings are read from the process environment, so every variable the
application understands is removed before a test that loads settings.
"""

import pytest

from waitlist.models import WaitlistEntry


SETTINGS_ENV_VARS = (
    "APP_ENV",
    "LOG_LEVEL",
    "SINK_TIMEOUT_SECONDS",
    "HOST",
    "PORT",
    "CORS_ALLOW_ORIGINS",
    "GOOGLE_SHEET_ID",
    "GOOGLE_CLIENT_EMAIL",
    "GOOGLE_PRIVATE_KEY",
    "GOOGLE_SHEET_NAME",
    "FORMSPREE_ENDPOINT",
    "WAITLIST_API_URL",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in SETTINGS_ENV_VARS:
        # setenv first so monkeypatch restores the original state even when a
        # test loads the variable from a .env file
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    # Keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def waitlist_entry():
    return WaitlistEntry(
        email="jane@example.com",
        timestamp="2026-01-05T10:00:00Z",
        profile={
            "name": "Jane",
            "company": "Acme",
            "role": "Engineer",
            "useCase": "",
            "referralSource": "friend",
            "social": "",
        },
        priority_score=2,
        position=7,
    )
