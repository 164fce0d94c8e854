"""Pydantic models for the Qiscus omnichannel API and its webhooks."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class OmnichannelBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class RoomTagRequest(OmnichannelBaseModel):
    room_id: str
    tag: str


class ResolveRoomRequest(OmnichannelBaseModel):
    room_id: str


class WebhookParticipant(OmnichannelBaseModel):
    email: str | None = None


class WebhookRoom(OmnichannelBaseModel):
    id: str | None = None
    id_str: str
    is_public_channel: bool = False
    name: str | None = None
    options: str | None = None
    participants: list[WebhookParticipant] = Field(default_factory=list["WebhookParticipant"])
    room_avatar: str | None = None
    topic_id: str | None = None
    topic_id_str: str | None = None
    type: str | None = None


class NewSessionPayload(OmnichannelBaseModel):
    room: WebhookRoom


class NewSessionWebhook(OmnichannelBaseModel):
    is_new_session: bool = False
    webhook_type: str | None = None
    payload: NewSessionPayload
