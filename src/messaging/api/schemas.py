"""Pydantic request/response schemas for the Messaging API."""

from datetime import datetime

from pydantic import BaseModel, Field


class SendMessageRequest(BaseModel):
    receiver_id: str
    content: str = Field(min_length=1, max_length=2000)


class MessageResponse(BaseModel):
    message_id: str
    conversation_id: str
    sender_id: str
    receiver_id: str
    content: str
    read: bool
    sent_at: datetime
    read_at: datetime | None = None


class ConversationResponse(BaseModel):
    conversation_id: str
    other_user_id: str
    last_message: MessageResponse
    unread_count: int


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class MessageListResponse(BaseModel):
    messages: list[MessageResponse]
    pagination: PaginationMeta


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkReadResponse(BaseModel):
    status: str = "ok"
    updated: int


class StatusResponse(BaseModel):
    status: str = "ok"


class PresenceResponse(BaseModel):
    user_id: str
    is_online: bool
    last_seen: datetime | None = None
