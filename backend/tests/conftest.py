import os, sys
import pytest
from fastapi.testclient import TestClient

# Ensure the local calendar_hub package and test helpers are importable without installation
tests_root = os.path.abspath(os.path.dirname(__file__))
backend_root = os.path.abspath(os.path.join(tests_root, '..'))
for path in (backend_root, tests_root):
    if path not in sys.path:
        sys.path.insert(0, path)

from calendar_hub.config import Settings  # noqa: E402
from calendar_hub.main import create_app  # noqa: E402
from calendar_hub.services.cache import MemoryCache  # noqa: E402
from fakes import FakeProvider, record, SOURCE_A, SOURCE_B  # noqa: E402


@pytest.fixture
def sources():
    return (SOURCE_A, SOURCE_B)


@pytest.fixture
def settings(sources):
    return Settings(sources=sources)


@pytest.fixture
def provider():
    # A returns two events out of order, B always fails
    return FakeProvider(
        events_by_cal={
            SOURCE_A.id: [
                record("Standup", "2030-03-02T09:00:00Z", "2030-03-02T09:15:00Z"),
                record("Review", "2030-03-01T10:00:00Z", "2030-03-01T11:00:00Z"),
            ],
        },
        failing=[SOURCE_B.id],
    )


@pytest.fixture
def cache():
    return MemoryCache(ttl_seconds=300)


@pytest.fixture
def client(settings, provider, cache):
    app = create_app(settings=settings, provider=provider, cache=cache)
    with TestClient(app) as c:
        yield c
