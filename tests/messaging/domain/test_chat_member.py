"""Domain tests for the ChatMember aggregate."""

from datetime import UTC, datetime

import pytest
from messaging.member.events import PresenceChanged, UserBlocked, UserUnblocked
from messaging.member.member import ChatMember
from protean.exceptions import ValidationError


def _member(user_id="alice"):
    return ChatMember(user_id=user_id, username=user_id)


class TestBlocking:
    def test_block(self):
        member = _member()
        member.block("bob")

        assert member.has_blocked("bob")
        assert member.blocked() == ["bob"]
        assert isinstance(member._events[-1], UserBlocked)

    def test_block_twice_is_noop(self):
        member = _member()
        member.block("bob")
        member.block("bob")

        assert member.blocked() == ["bob"]
        assert len(member._events) == 1

    def test_cannot_block_yourself(self):
        with pytest.raises(ValidationError):
            _member().block("alice")

    def test_unblock(self):
        member = _member()
        member.block("bob")
        member.block("carol")
        member.unblock("bob")

        assert member.blocked() == ["carol"]
        assert isinstance(member._events[-1], UserUnblocked)

    def test_unblock_unknown_is_noop(self):
        member = _member()
        member.unblock("bob")
        assert member._events == []


class TestCounters:
    def test_sent_and_received(self):
        member = _member()
        sent_at = datetime.now(UTC)
        member.record_sent(sent_at)
        member.record_received(sent_at)
        member.record_received(sent_at)

        assert member.total_sent == 1
        assert member.total_received == 2
        assert member.last_message_at == sent_at


class TestPresence:
    def test_online_then_offline(self):
        member = _member()
        member.set_presence(True)
        assert member.is_online is True

        member.set_presence(False)
        assert member.is_online is False
        assert member.last_seen is not None

        event = member._events[-1]
        assert isinstance(event, PresenceChanged)
        assert event.is_online is False
