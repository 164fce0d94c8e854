"""Parsing of inbound "new session" webhooks."""

from __future__ import annotations

from pydantic import ValidationError

from omniresolve.domain.errors import WebhookValidationError

from .schema import NewSessionWebhook


def parse_new_session_webhook(raw: str | bytes) -> str:
    """Return the external room id carried by a new-session webhook body."""

    try:
        webhook = NewSessionWebhook.model_validate_json(raw)
    except ValidationError as exc:
        msg = f"Invalid new-session webhook: {exc.error_count()} error(s)"
        raise WebhookValidationError(msg) from exc

    room_id = webhook.payload.room.id_str.strip()
    if not room_id:
        raise WebhookValidationError("New-session webhook carries an empty room id")
    return room_id
