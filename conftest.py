import pytest

from infrastructure.container import container
from infrastructure.storage import MockStorageAdapter


@pytest.fixture(autouse=True)
def fresh_container():
    """Every test starts with freshly built services and an empty mock bucket."""
    container.reset()
    MockStorageAdapter.clear()
    yield
    container.reset()
