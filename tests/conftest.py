"""Pytest fixtures for lead validation, encoding and the HTTP endpoints."""

import copy

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.database.postgres import InMemoryLeadSink
from src.integrations.clients.mocks.checkout import MockCheckoutClient
from src.utils.config_loader import Settings


_VALID_SUBMISSION = {
    "contactDetails": {"name": "Jane Doe", "email": "jane@example.com", "phone": "555-0100"},
    "stopsData": [
        {"address": "123 Main St", "stairs": False},
        {"address": "456 Oak Ave", "stairs": False},
    ],
    "packagesData": [
        {"qty": 1, "desc": "Box", "weight": 10, "length": 1, "width": 1, "height": 1, "unit": "ft"},
    ],
    "serviceDetails": {"vehicleType": "Van", "pickupDate": "2024-05-02", "pickupTime": "09:00"},
    "totalMiles": 12.34,
    "calculatedQuote": 25.00,
}


@pytest.fixture
def submission():
    """A fresh copy of a valid two-stop, one-package submission."""
    return copy.deepcopy(_VALID_SUBMISSION)


@pytest.fixture
def settings():
    return Settings(site_url="https://quotes.example.com")


@pytest.fixture
def sink():
    return InMemoryLeadSink()


@pytest.fixture
def checkout():
    return MockCheckoutClient(base_url="https://checkout.example.com")


@pytest.fixture
def client(settings, sink, checkout):
    app = create_app(settings=settings, sink=sink, checkout=checkout)
    return TestClient(app)
