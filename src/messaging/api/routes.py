"""FastAPI endpoints for the Messaging domain, REST and WebSocket."""

import json

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from messaging.api.schemas import (
    ConversationResponse,
    MarkReadResponse,
    MessageListResponse,
    MessageResponse,
    PaginationMeta,
    PresenceResponse,
    SendMessageRequest,
    StatusResponse,
    UnreadCountResponse,
)
from messaging.domain import logger, messaging
from messaging.member.blocking import BlockUser, UnblockUser
from messaging.member.member import get_member
from messaging.member.presence import SetPresence
from messaging.message.message import Message
from messaging.message.reading import MarkConversationRead
from messaging.message.sending import SendMessage
from messaging.queries import conversation_messages, conversations, unread_count
from messaging.realtime import manager
from shared.auth import Principal, decode_token, get_current_principal
from shared.errors import AuthenticationFailed, PermissionDenied


def _message(message: Message) -> MessageResponse:
    return MessageResponse(
        message_id=str(message.id),
        conversation_id=message.conversation_id,
        sender_id=str(message.sender_id),
        receiver_id=str(message.receiver_id),
        content=message.content,
        read=message.read,
        sent_at=message.sent_at,
        read_at=message.read_at,
    )


async def _push_new_message(message: Message) -> None:
    payload = {"type": "new_message", "message": _message(message).model_dump(mode="json")}
    await manager.send_to_user(message.receiver_id, payload)


# ---------------------------------------------------------------------------
# Message Router
# ---------------------------------------------------------------------------
message_router = APIRouter(prefix="/messages", tags=["messages"])


@message_router.post("", status_code=201, response_model=MessageResponse)
async def send_message(
    body: SendMessageRequest,
    principal: Principal = Depends(get_current_principal),
) -> MessageResponse:
    command = SendMessage(sender_id=principal.user_id, receiver_id=body.receiver_id, content=body.content)
    message = current_domain.process(command, asynchronous=False)
    await _push_new_message(message)
    return _message(message)


@message_router.get("/conversations", response_model=list[ConversationResponse])
async def list_conversations(principal: Principal = Depends(get_current_principal)) -> list[ConversationResponse]:
    return [
        ConversationResponse(
            conversation_id=row["conversation_id"],
            other_user_id=row["other_user_id"],
            last_message=_message(row["last_message"]),
            unread_count=row["unread_count"],
        )
        for row in conversations(principal.user_id)
    ]


@message_router.get("/conversations/{other_user_id}", response_model=MessageListResponse)
async def get_conversation(
    other_user_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=100),
    principal: Principal = Depends(get_current_principal),
) -> MessageListResponse:
    result = conversation_messages(principal.user_id, other_user_id, page=page, limit=limit)
    return MessageListResponse(
        messages=[_message(message) for message in result.items],
        pagination=PaginationMeta(**result.meta()),
    )


@message_router.put("/conversations/{other_user_id}/read", response_model=MarkReadResponse)
async def mark_conversation_read(
    other_user_id: str,
    principal: Principal = Depends(get_current_principal),
) -> MarkReadResponse:
    command = MarkConversationRead(reader_id=principal.user_id, other_user_id=other_user_id)
    updated = current_domain.process(command, asynchronous=False)
    return MarkReadResponse(updated=updated)


@message_router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(principal: Principal = Depends(get_current_principal)) -> UnreadCountResponse:
    return UnreadCountResponse(unread_count=unread_count(principal.user_id))


@message_router.post("/blocks/{user_id}", response_model=StatusResponse)
async def block_user(user_id: str, principal: Principal = Depends(get_current_principal)) -> StatusResponse:
    current_domain.process(BlockUser(user_id=principal.user_id, blocked_user_id=user_id), asynchronous=False)
    return StatusResponse(status="blocked")


@message_router.delete("/blocks/{user_id}", response_model=StatusResponse)
async def unblock_user(user_id: str, principal: Principal = Depends(get_current_principal)) -> StatusResponse:
    current_domain.process(UnblockUser(user_id=principal.user_id, blocked_user_id=user_id), asynchronous=False)
    return StatusResponse(status="unblocked")


@message_router.get("/presence/{user_id}", response_model=PresenceResponse)
async def get_presence(user_id: str, _principal: Principal = Depends(get_current_principal)) -> PresenceResponse:
    member = get_member(user_id)
    return PresenceResponse(user_id=str(member.user_id), is_online=member.is_online, last_seen=member.last_seen)


# ---------------------------------------------------------------------------
# WebSocket
# ---------------------------------------------------------------------------
ws_router = APIRouter(tags=["messages"])


def _set_presence(user_id: str, is_online: bool) -> None:
    with messaging.domain_context():
        try:
            current_domain.process(SetPresence(user_id=user_id, is_online=is_online), asynchronous=False)
        except ObjectNotFoundError:
            logger.warning("Presence change for unknown member", user_id=user_id)


def _may_signal(sender_id: str, receiver_id: str) -> bool:
    """Typing indicators follow the same block rules as messages."""
    with messaging.domain_context():
        sender = get_member(sender_id)
        receiver = get_member(receiver_id)
    if receiver.has_blocked(sender_id) or sender.has_blocked(receiver_id):
        logger.debug("Typing indicator dropped between blocked members", sender_id=sender_id, receiver_id=receiver_id)
        return False
    return True


async def _handle_frame(principal: Principal, frame: dict, websocket: WebSocket) -> None:
    frame_type = frame.get("type")

    if frame_type == "message":
        command = SendMessage(
            sender_id=principal.user_id,
            receiver_id=frame.get("receiver_id"),
            content=frame.get("content"),
        )
        with messaging.domain_context():
            message = current_domain.process(command, asynchronous=False)
        await _push_new_message(message)
        await websocket.send_json({"type": "message_sent", "message": _message(message).model_dump(mode="json")})

    elif frame_type == "typing":
        receiver_id = frame.get("receiver_id")
        if receiver_id and _may_signal(principal.user_id, receiver_id):
            await manager.send_to_user(
                receiver_id,
                {"type": "typing", "sender_id": principal.user_id, "is_typing": bool(frame.get("is_typing", True))},
            )

    else:
        await websocket.send_json({"type": "error", "error": f"Unknown frame type: {frame_type}"})


@ws_router.websocket("/ws")
async def messaging_socket(websocket: WebSocket, token: str = "") -> None:
    """Real-time channel. Authenticate with ``/ws?token=<access token>``."""
    try:
        principal = decode_token(token)
    except AuthenticationFailed as exc:
        logger.info("WebSocket rejected", reason=str(exc))
        await websocket.close(code=1008)
        return

    await manager.connect(principal.user_id, websocket)
    _set_presence(principal.user_id, True)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
            except ValueError:
                await websocket.send_json({"type": "error", "error": "Frames must be JSON objects"})
                continue
            if not isinstance(frame, dict):
                await websocket.send_json({"type": "error", "error": "Frames must be JSON objects"})
                continue

            try:
                await _handle_frame(principal, frame, websocket)
            except ValidationError as exc:
                await websocket.send_json({"type": "error", "error": "Validation failed", "details": exc.messages})
            except (PermissionDenied, ObjectNotFoundError) as exc:
                await websocket.send_json({"type": "error", "error": str(exc)})
    except WebSocketDisconnect:
        logger.debug("WebSocket closed by client", user_id=principal.user_id)
    finally:
        if manager.disconnect(principal.user_id, websocket):
            _set_presence(principal.user_id, False)
