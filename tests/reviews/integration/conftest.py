import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def reviews_bed():
    from reviews.domain import reviews

    bed = DomainFixture(reviews)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture()
def protean_store(reviews_bed):
    """ProteanEntityStore over the session's reviews domain, emptied after each test."""
    from reviews.domain import reviews
    from reviews.store.protean_adapter import ProteanEntityStore

    yield ProteanEntityStore(reviews)

    with reviews.domain_context():
        for _, provider in reviews.providers.items():
            provider._data_reset()
