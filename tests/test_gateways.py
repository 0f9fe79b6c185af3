from types import SimpleNamespace
from unittest import mock

import pytest
import stripe
from cloudinary.exceptions import Error as CloudinaryError

from lms.errors import UpstreamError
from lms.services.cloudinary_host import CloudinaryMediaHost
from lms.services.stripe_gateway import StripePaymentGateway, to_minor_units


def _intent(**overrides):
    fields = {"id": "pi_1", "status": "requires_payment_method", "amount": 4999, "currency": "usd",
              "client_secret": "pi_1_secret"}
    fields.update(overrides)
    return SimpleNamespace(**fields)


@pytest.mark.parametrize("amount,currency,expected", [
    (49.99, "usd", 4999),
    (0.1, "usd", 10),
    (19.995, "eur", 2000),
    (1500, "jpy", 1500),
    (0, "usd", 0),
])
def test_to_minor_units(amount, currency, expected):
    assert to_minor_units(amount, currency) == expected


def test_create_payment_passes_key_and_minor_units():
    gateway = StripePaymentGateway(api_key="sk_test_123")
    with mock.patch.object(stripe.PaymentIntent, "create", return_value=_intent()) as create:
        result = gateway.create_payment(49.99, "usd", {"course_id": "c1"}, "Intro")

    kwargs = create.call_args.kwargs
    assert kwargs["api_key"] == "sk_test_123"
    assert kwargs["amount"] == 4999
    assert kwargs["currency"] == "usd"
    assert kwargs["metadata"] == {"course_id": "c1"}
    assert kwargs["description"] == "Intro"
    assert result == {"id": "pi_1", "status": "requires_payment_method", "amount": 4999,
                      "currency": "usd", "client_secret": "pi_1_secret"}


def test_retrieve_payment():
    gateway = StripePaymentGateway(api_key="sk_test_123")
    with mock.patch.object(stripe.PaymentIntent, "retrieve", return_value=_intent(status="succeeded")) as retrieve:
        result = gateway.retrieve_payment("pi_1")
    retrieve.assert_called_once_with("pi_1", api_key="sk_test_123")
    assert result["status"] == "succeeded"


def test_stripe_errors_become_upstream_errors():
    gateway = StripePaymentGateway(api_key="sk_test_123")
    error = stripe.InvalidRequestError("No such payment_intent: 'pi_x'", "id")
    with mock.patch.object(stripe.PaymentIntent, "retrieve", side_effect=error):
        with pytest.raises(UpstreamError) as exc:
            gateway.retrieve_payment("pi_x")
    assert exc.value.provider == "stripe"
    assert "No such payment_intent" in exc.value.message


def test_cloudinary_upload_uses_instance_credentials():
    host = CloudinaryMediaHost("demo", "key", "secret")
    result = {"secure_url": "https://res.cloudinary.com/demo/v1/x.mp4", "public_id": "x", "resource_type": "video"}
    with mock.patch("cloudinary.uploader.upload", return_value=result) as upload:
        media = host.upload(b"bytes", "x.mp4")

    args, kwargs = upload.call_args
    assert args == (b"bytes",)
    assert kwargs["cloud_name"] == "demo"
    assert kwargs["api_key"] == "key"
    assert kwargs["api_secret"] == "secret"
    assert kwargs["resource_type"] == "auto"
    assert media == {"url": "https://res.cloudinary.com/demo/v1/x.mp4", "public_id": "x", "resource_type": "video"}


def test_cloudinary_failure_is_surfaced_verbatim():
    host = CloudinaryMediaHost("demo", "key", "secret")
    with mock.patch("cloudinary.uploader.upload", side_effect=CloudinaryError("Invalid api_key key")):
        with pytest.raises(UpstreamError) as exc:
            host.upload(b"bytes")
    assert exc.value.message == "Invalid api_key key"


@pytest.mark.parametrize("outcome,found", [("ok", True), ("not found", False)])
def test_cloudinary_delete(outcome, found):
    host = CloudinaryMediaHost("demo", "key", "secret")
    with mock.patch("cloudinary.uploader.destroy", return_value={"result": outcome}) as destroy:
        assert host.delete("x") is found
    assert destroy.call_args.kwargs["resource_type"] == "video"


def test_cloudinary_delete_unexpected_result():
    host = CloudinaryMediaHost("demo", "key", "secret")
    with mock.patch("cloudinary.uploader.destroy", return_value={"result": "error"}):
        with pytest.raises(UpstreamError):
            host.delete("x")
