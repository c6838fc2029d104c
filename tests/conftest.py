import pytest
from rest_framework.test import APIClient

from locations import geocoding

DEFAULT_COORDS = (-37.8136, 144.9631)


class FakeGeocoder:
    def __init__(self):
        self.results = {}
        self.failing = set()
        self.calls = []

    def __call__(self, query):
        self.calls.append(query)
        if query in self.failing:
            raise geocoding.GeocodingError(f"no result for {query!r}")
        return self.results.get(query, DEFAULT_COORDS)


@pytest.fixture()
def geocoder(monkeypatch):
    fake = FakeGeocoder()
    monkeypatch.setattr(geocoding, "geocode", fake)
    return fake


@pytest.fixture()
def user(django_user_model):
    return django_user_model.objects.create_user(username="alice", password="secret-pass-1")


@pytest.fixture()
def other_user(django_user_model):
    return django_user_model.objects.create_user(username="bob", password="secret-pass-2")


@pytest.fixture()
def client():
    return APIClient()


@pytest.fixture()
def auth_client(user):
    c = APIClient()
    c.force_login(user)
    return c


@pytest.fixture()
def other_client(other_user):
    c = APIClient()
    c.force_login(other_user)
    return c


def cafe_fields(**overrides):
    fields = {
        "name": "Brew Co",
        "address": "1 Main St, Springfield",
        "description": "Single origin pour-overs",
        "city": "Springfield",
        "state": "IL",
        "country": "USA",
    }
    fields.update(overrides)
    return fields
