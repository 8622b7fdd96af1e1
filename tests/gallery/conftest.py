import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def gallery_bed():
    from gallery.domain import gallery

    bed = DomainFixture(gallery)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(gallery_bed):
    with gallery_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        for _, broker in current_domain.brokers.items():
            broker._data_reset()

        current_domain.event_store.store._data_reset()
