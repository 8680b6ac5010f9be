import pytest

from tests.stubs import HashEmbeddingProvider, RecordingSleep


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def hash_provider(recording_sleep: RecordingSleep) -> HashEmbeddingProvider:
    return HashEmbeddingProvider(sleep=recording_sleep)
