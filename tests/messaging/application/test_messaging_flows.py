"""Application tests for sending, reading, blocking and presence."""

from datetime import UTC, datetime

import pytest
from messaging.member.blocking import BlockUser, UnblockUser
from messaging.member.identity_events import IdentityMemberEventHandler
from messaging.member.member import ChatMember
from messaging.member.presence import SetPresence
from messaging.message.message import Message
from messaging.message.reading import MarkConversationRead
from messaging.message.sending import SendMessage
from messaging.queries import conversation_messages, conversations, unread_count
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from shared.errors import PermissionDenied
from shared.events.identity import UserRegistered


def _register(*user_ids):
    handler = IdentityMemberEventHandler()
    for user_id in user_ids:
        handler.on_user_registered(
            UserRegistered(
                user_id=user_id,
                username=user_id,
                email=f"{user_id}@example.com",
                role="buyer",
                registered_at=datetime.now(UTC),
            )
        )


def _send(sender, receiver, content="Hello"):
    return current_domain.process(
        SendMessage(sender_id=sender, receiver_id=receiver, content=content),
        asynchronous=False,
    )


@pytest.fixture(autouse=True)
def members():
    _register("alice", "bob", "carol")


class TestMembers:
    def test_registration_creates_member(self):
        member = current_domain.repository_for(ChatMember).get("alice")
        assert member.username == "alice"
        assert member.total_sent == 0

    def test_redelivered_registration_ignored(self):
        _register("alice")
        assert current_domain.repository_for(ChatMember)._dao.query.all().total == 3


class TestSendMessage:
    def test_send(self):
        message = _send("alice", "bob", "Is it framed?")

        stored = current_domain.repository_for(Message).get(message.id)
        assert stored.content == "Is it framed?"
        assert stored.conversation_id == "alice_bob"

    def test_counters_updated(self):
        _send("alice", "bob")
        _send("alice", "bob")

        repo = current_domain.repository_for(ChatMember)
        assert repo.get("alice").total_sent == 2
        assert repo.get("bob").total_received == 2
        assert repo.get("bob").last_message_at is not None

    def test_unknown_receiver(self):
        with pytest.raises(ObjectNotFoundError):
            _send("alice", "ghost")

    def test_unknown_sender(self):
        with pytest.raises(ObjectNotFoundError):
            _send("ghost", "alice")

    def test_message_to_self(self):
        with pytest.raises(ValidationError):
            _send("alice", "alice")


class TestBlocking:
    def _block(self, user_id, blocked_user_id):
        current_domain.process(BlockUser(user_id=user_id, blocked_user_id=blocked_user_id), asynchronous=False)

    def test_blocked_sender_cannot_message(self):
        self._block("bob", "alice")
        with pytest.raises(PermissionDenied):
            _send("alice", "bob")

    def test_block_works_both_ways(self):
        self._block("bob", "alice")
        with pytest.raises(PermissionDenied):
            _send("bob", "alice")

    def test_others_unaffected(self):
        self._block("bob", "alice")
        _send("carol", "bob")

    def test_unblock(self):
        self._block("bob", "alice")
        current_domain.process(UnblockUser(user_id="bob", blocked_user_id="alice"), asynchronous=False)
        _send("alice", "bob")

    def test_block_unknown_user(self):
        with pytest.raises(ObjectNotFoundError):
            self._block("bob", "ghost")


class TestReading:
    def test_mark_conversation_read(self):
        _send("alice", "bob", "one")
        _send("alice", "bob", "two")
        _send("bob", "alice", "reply")

        updated = current_domain.process(
            MarkConversationRead(reader_id="bob", other_user_id="alice"),
            asynchronous=False,
        )
        assert updated == 2
        assert unread_count("bob") == 0
        assert unread_count("alice") == 1

    def test_mark_read_again_updates_nothing(self):
        _send("alice", "bob")
        command = MarkConversationRead(reader_id="bob", other_user_id="alice")
        current_domain.process(command, asynchronous=False)
        assert current_domain.process(command, asynchronous=False) == 0


class TestQueries:
    def test_conversations_most_recent_first(self):
        _send("alice", "bob", "first")
        _send("carol", "alice", "second")

        rows = conversations("alice")
        assert [row["other_user_id"] for row in rows] == ["carol", "bob"]
        assert rows[0]["last_message"].content == "second"
        assert rows[0]["unread_count"] == 1
        assert rows[1]["unread_count"] == 0

    def test_conversations_exclude_others(self):
        _send("bob", "carol")
        assert conversations("alice") == []

    def test_conversation_messages_oldest_first(self):
        for text in ("one", "two", "three"):
            _send("alice", "bob", text)

        page = conversation_messages("bob", "alice", page=1, limit=2)
        assert [message.content for message in page.items] == ["one", "two"]
        assert page.total == 3
        assert page.meta()["has_next_page"] is True


class TestPresence:
    def test_set_presence(self):
        current_domain.process(SetPresence(user_id="alice", is_online=True), asynchronous=False)
        assert current_domain.repository_for(ChatMember).get("alice").is_online is True

    def test_unknown_member(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(SetPresence(user_id="ghost", is_online=True), asynchronous=False)
