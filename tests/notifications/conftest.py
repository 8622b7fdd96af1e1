import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def notifications_bed():
    from notifications.domain import notifications

    bed = DomainFixture(notifications)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(notifications_bed):
    with notifications_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        for _, broker in current_domain.brokers.items():
            broker._data_reset()

        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def email():
    from notifications.channel import reset_channels, set_channel
    from notifications.channel.fake_email import FakeEmailAdapter
    from notifications.notification.notification import NotificationChannel

    adapter = FakeEmailAdapter()
    set_channel(NotificationChannel.EMAIL.value, adapter)
    yield adapter
    reset_channels()
