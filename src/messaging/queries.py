"""Read-side queries over messages: conversations, threads and unread counts."""

from protean.utils.globals import current_domain

from messaging.message.message import Message, conversation_id_for
from shared.paging import Page, iterate, paginate


def _query():
    return current_domain.repository_for(Message)._dao.query


def conversations(user_id) -> list[dict]:
    """The user's conversations, most recently active first."""
    user_id = str(user_id)
    latest = {}
    unread = {}

    for message in iterate(_query().filter(conversation_id__contains=user_id)):
        participants = message.conversation_id.split("_")
        if user_id not in participants:
            continue

        current = latest.get(message.conversation_id)
        if current is None or message.sent_at > current.sent_at:
            latest[message.conversation_id] = message
        if str(message.receiver_id) == user_id and not message.read:
            unread[message.conversation_id] = unread.get(message.conversation_id, 0) + 1

    rows = []
    for conversation_id, message in latest.items():
        other = next(participant for participant in conversation_id.split("_") if participant != user_id)
        rows.append(
            {
                "conversation_id": conversation_id,
                "other_user_id": other,
                "last_message": message,
                "unread_count": unread.get(conversation_id, 0),
            }
        )
    rows.sort(key=lambda row: row["last_message"].sent_at, reverse=True)
    return rows


def conversation_messages(user_id, other_user_id, page=1, limit=50) -> Page:
    """One conversation, oldest message first."""
    query = _query().filter(conversation_id=conversation_id_for(user_id, other_user_id)).order_by("sent_at")
    return paginate(query, page=page, limit=limit)


def unread_count(user_id) -> int:
    return _query().filter(receiver_id=user_id, read=False).all().total
