"""Qiscus omnichannel adapter package."""

from __future__ import annotations

from .client import MARK_AS_RESOLVED_PATH, ROOM_TAG_PATH, QiscusOmnichannel
from .schema import NewSessionWebhook, ResolveRoomRequest, RoomTagRequest
from .webhook import parse_new_session_webhook

__all__ = [
    "MARK_AS_RESOLVED_PATH",
    "ROOM_TAG_PATH",
    "NewSessionWebhook",
    "QiscusOmnichannel",
    "ResolveRoomRequest",
    "RoomTagRequest",
    "parse_new_session_webhook",
]
