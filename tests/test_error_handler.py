from __future__ import annotations

import asyncio

from services.castr_client import CastrAPIError, CastrAuthError, CastrTransportError
from services.error_handler import ErrorHandler


class _RecordingLog:
    def __init__(self):
        self.errors = []

    async def log_error(self, error, context=""):
        self.errors.append((error, context))


class _Context:
    def __init__(self):
        self.sent = []

    async def send(self, content):
        self.sent.append(content)


def test_castr_errors_have_specific_messages() -> None:
    handler = ErrorHandler(_RecordingLog())

    assert "credentials" in handler.get_error_message(CastrAuthError(401, "Unauthorized"))
    assert handler.get_error_message(CastrAPIError(500, "Internal Server Error")) == (
        "❌ Castr API error: 500 Internal Server Error"
    )
    assert "Could not reach" in handler.get_error_message(CastrTransportError("timeout"))
    assert handler.get_error_message(ValueError("Unknown on/off value: maybe")) == (
        "❌ Invalid input: Unknown on/off value: maybe"
    )
    assert "unexpected" in handler.get_error_message(RuntimeError("boom"))


def test_command_error_is_logged_and_reported() -> None:
    log = _RecordingLog()
    ctx = _Context()
    error = CastrTransportError("connection reset")

    asyncio.run(ErrorHandler(log).handle_command_error(ctx, error))

    assert log.errors == [(error, "Command error")]
    assert ctx.sent == ["❌ Could not reach the Castr API: connection reset"]
