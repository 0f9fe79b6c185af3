import os

os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017/lms_test")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-long-enough-123")
os.environ.setdefault("PAYMENT_CURRENCY", "usd")

import itertools

import fakeredis
import mongomock
import pytest
from fastapi.testclient import TestClient

from lms import main
from lms.errors import UpstreamError
from lms.services.stripe_gateway import to_minor_units


class FakeMediaHost:
    """Stands in for CloudinaryMediaHost."""

    def __init__(self):
        self.objects = {}
        self.fail_with = None
        self._ids = itertools.count(1)

    def upload(self, data, filename=None, resource_type="auto"):
        if self.fail_with:
            raise UpstreamError("cloudinary", self.fail_with)
        public_id = f"lms/{next(self._ids)}"
        self.objects[public_id] = data
        return {"url": f"https://media.test/{public_id}", "public_id": public_id, "resource_type": "video"}

    def delete(self, public_id, resource_type="video"):
        if self.fail_with:
            raise UpstreamError("cloudinary", self.fail_with)
        return self.objects.pop(public_id, None) is not None


class FakePaymentGateway:
    """Stands in for StripePaymentGateway."""

    def __init__(self):
        self.payments = {}
        self.retrievals = 0
        self._ids = itertools.count(1)

    def create_payment(self, amount, currency, metadata=None, description=None):
        payment_id = f"pi_test_{next(self._ids)}"
        self.payments[payment_id] = {
            "id": payment_id,
            "status": "requires_payment_method",
            "amount": to_minor_units(amount, currency),
            "currency": currency,
            "client_secret": f"{payment_id}_secret",
        }
        return dict(self.payments[payment_id])

    def retrieve_payment(self, payment_id):
        self.retrievals += 1
        if payment_id not in self.payments:
            raise UpstreamError("stripe", f"No such payment_intent: '{payment_id}'")
        return dict(self.payments[payment_id])

    def set_status(self, payment_id, status, amount=None):
        self.payments[payment_id]["status"] = status
        if amount is not None:
            self.payments[payment_id]["amount"] = amount


@pytest.fixture
def media_host():
    return FakeMediaHost()


@pytest.fixture
def gateway():
    return FakePaymentGateway()


@pytest.fixture
def client(monkeypatch, media_host, gateway):
    monkeypatch.setattr(main, "create_mongo_client", lambda uri: mongomock.MongoClient(uri))
    monkeypatch.setattr(main, "create_redis_client", lambda url: fakeredis.FakeAsyncRedis(decode_responses=True))
    monkeypatch.setattr(main, "create_media_host", lambda settings: media_host)
    monkeypatch.setattr(main, "create_payment_gateway", lambda settings: gateway)
    with TestClient(main.app) as c:
        yield c


@pytest.fixture
def db(client):
    return main.app.state.db


def register(client, user_name, role="student", password="secret123"):
    email = f"{user_name}@example.com"
    resp = client.post("/auth/signup", json={
        "user_name": user_name, "user_email": email, "password": password, "role": role,
    })
    assert resp.status_code == 201, resp.text
    resp = client.post("/auth/signin", json={"user_email": email, "password": password})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    return {"Authorization": f"Bearer {body['access_token']}"}, body["user"]


@pytest.fixture
def instructor(client):
    return register(client, "ada", role="instructor")


@pytest.fixture
def student(client):
    return register(client, "sam")


def course_payload(**overrides):
    payload = {
        "title": "Intro to Python",
        "category": "programming",
        "level": "beginner",
        "primary_language": "english",
        "subtitle": "From zero",
        "description": "Learn the basics",
        "pricing": 49.99,
        "objectives": "variables,loops",
        "curriculum": [
            {"title": "Welcome", "video_url": "https://media.test/a", "public_id": "lms/a", "free_preview": True},
            {"title": "Variables"},
            {"title": "Loops"},
        ],
        "is_published": True,
    }
    payload.update(overrides)
    return payload


def create_course(client, headers, **overrides):
    resp = client.post("/instructor/course", json=course_payload(**overrides), headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def buy_course(client, gateway, headers, course_id):
    """Open an order and confirm it with a succeeded payment."""
    resp = client.post("/student/order", json={"course_id": course_id}, headers=headers)
    assert resp.status_code == 201, resp.text
    order = resp.json()["order"]
    gateway.set_status(order["external_payment_id"], "succeeded")
    resp = client.post("/student/order/capture", json={
        "order_id": order["_id"], "payment_id": order["external_payment_id"],
    }, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()
