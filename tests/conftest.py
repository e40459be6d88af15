"""Shared pytest fixtures: an app on the in-memory backend, its client and store."""

import pytest

from plantpal import create_app
from plantpal.services.persistence import MemoryBackend
from plantpal.services.storage import EXTENSION_KEY


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def app(backend):
    app = create_app("plantpal.config.TestConfig", backend=backend)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return app.extensions[EXTENSION_KEY]


@pytest.fixture
def ajax_headers():
    return {"X-Requested-With": "XMLHttpRequest"}


def make_plant(**overrides):
    """A complete plant record with sensible test defaults."""
    plant = {
        "id": "p1",
        "name": "Rosie",
        "type": "fern",
        "wateringFrequency": 7,
        "sunlight": "Low light",
        "lastWatered": "2024-01-01",
        "image": "https://example.com/rosie.jpg",
        "createdAt": "2024-01-01T09:00:00+00:00",
    }
    plant.update(overrides)
    return plant
