"""Tests for the email channel adapters and the channel registry."""

import pytest
import resend
from notifications.channel import get_channel, reset_channels
from notifications.channel.email_port import SendResult
from notifications.channel.fake_email import FakeEmailAdapter
from notifications.channel.resend_email import DEFAULT_SENDER, ResendEmailAdapter


class TestFakeEmailAdapter:
    def setup_method(self):
        self.adapter = FakeEmailAdapter()

    def test_records_email(self):
        result = self.adapter.send(to="mara@example.com", subject="Hi", body="Hello")
        assert result.ok
        assert result.message_id.startswith("email-")
        assert self.adapter.emails_to("mara@example.com")[0]["subject"] == "Hi"

    def test_configured_failure(self):
        self.adapter.configure(should_succeed=False, failure_reason="SMTP error")
        result = self.adapter.send(to="mara@example.com", subject="Hi", body="Hello")
        assert result == SendResult.failed("SMTP error")
        assert not result.ok
        assert self.adapter.sent_emails == []

    def test_reset(self):
        self.adapter.send(to="mara@example.com", subject="Hi", body="Hello")
        self.adapter.configure(should_succeed=False)
        self.adapter.reset()
        assert self.adapter.sent_emails == []
        assert self.adapter.should_succeed is True


class TestResendEmailAdapter:
    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            ResendEmailAdapter(api_key="")

    def test_default_sender(self):
        assert ResendEmailAdapter(api_key="re_test").sender == DEFAULT_SENDER

    def test_send(self, monkeypatch):
        sent = []

        def fake_send(params):
            sent.append(params)
            return {"id": "re_123"}

        monkeypatch.setattr(resend.Emails, "send", fake_send)
        result = ResendEmailAdapter(api_key="re_test", sender="Gallery <hi@example.com>").send(
            to="mara@example.com", subject="Hi", body="Hello"
        )

        assert result == SendResult.sent("re_123")
        assert sent[0]["from"] == "Gallery <hi@example.com>"
        assert sent[0]["to"] == ["mara@example.com"]
        assert "html" not in sent[0]

    def test_unexpected_response(self, monkeypatch):
        monkeypatch.setattr(resend.Emails, "send", lambda params: {})
        result = ResendEmailAdapter(api_key="re_test").send(to="mara@example.com", subject="Hi", body="Hello")
        assert not result.ok
        assert result.error.startswith("Unexpected Resend response")


class TestChannelRegistry:
    def setup_method(self):
        reset_channels()

    def teardown_method(self):
        reset_channels()

    def test_fake_by_default(self, monkeypatch):
        monkeypatch.delenv("EMAIL_CHANNEL", raising=False)
        assert isinstance(get_channel(), FakeEmailAdapter)

    def test_singleton(self):
        assert get_channel() is get_channel()

    def test_resend_from_environment(self, monkeypatch):
        monkeypatch.setenv("EMAIL_CHANNEL", "resend")
        monkeypatch.setenv("RESEND_API_KEY", "re_test")
        assert isinstance(get_channel(), ResendEmailAdapter)

    def test_unknown_channel(self):
        with pytest.raises(ValueError):
            get_channel("Carrier Pigeon")
