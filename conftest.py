import pytest
from fastapi.testclient import TestClient

from api import create_app
from library import Library


@pytest.fixture
def lib():
    # Each test gets its own seeded store so mutations never leak between tests
    return Library.with_seed_data()


@pytest.fixture
def client(lib):
    app = create_app(library=lib)
    with TestClient(app) as test_client:
        yield test_client
