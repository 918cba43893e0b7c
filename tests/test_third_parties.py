from types import SimpleNamespace

import requests

from app.third_parties.email import EmailService
from app.third_parties.payment_gateway import PaymentGatewayClient


class FakeHttpResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


def make_order():
    return SimpleNamespace(id=7, order_number="ORD-20240101-ABC123", total=12.5)


def test_unconfigured_email_is_skipped():
    service = EmailService(host="smtp.example.com", username="", password="")
    assert service.is_configured is False
    assert service.send_email("a@example.com", "Hi", "cart_abandonment.html", {}) is False


def test_cart_abandonment_template_renders_coupon():
    html = EmailService().render(
        "cart_abandonment.html",
        {
            "customer_name": "Ada",
            "product_name": "Course",
            "checkout_url": "https://shop.example.com/checkout/1",
            "coupon_code": "COMEBACK10",
            "discount_percent": 10,
        },
    )
    assert "COMEBACK10" in html
    assert "https://shop.example.com/checkout/1" in html


def test_webhook_signature_round_trip():
    client = PaymentGatewayClient(webhook_secret="whsec_1")
    body = b'{"status": "COMPLETED"}'

    assert client.verify_webhook_signature(body, client.sign(body)) is True
    assert client.verify_webhook_signature(body, "0" * 64) is False
    assert client.verify_webhook_signature(body, None) is False


def test_webhook_signature_skipped_without_secret():
    assert PaymentGatewayClient().verify_webhook_signature(b"{}", None) is True


def test_create_charge_unconfigured():
    result = PaymentGatewayClient().create_charge(
        make_order(), "a@example.com", "Ada", "https://r", "https://c", "https://w"
    )
    assert result["success"] is False


def test_create_charge_success(monkeypatch):
    calls = []

    def fake_post(url, json, headers, timeout):
        calls.append((url, json, headers))
        return FakeHttpResponse(200, {"payment_url": "https://pay/1", "invoice_id": "inv_1"})

    monkeypatch.setattr(requests, "post", fake_post)
    client = PaymentGatewayClient(api_url="https://pay.example.com/", api_key="k")

    result = client.create_charge(
        make_order(), "a@example.com", "Ada", "https://r", "https://c", "https://w"
    )

    assert result == {"success": True, "payment_url": "https://pay/1", "invoice_id": "inv_1"}
    url, payload, headers = calls[0]
    assert url == "https://pay.example.com/checkout"
    assert payload["amount"] == "12.50"
    assert payload["metadata"]["order_id"] == 7
    assert headers["X-Api-Key"] == "k"


def test_create_charge_network_error(monkeypatch):
    def fake_post(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(requests, "post", fake_post)
    client = PaymentGatewayClient(api_url="https://pay.example.com", api_key="k")

    result = client.create_charge(
        make_order(), "a@example.com", "Ada", "https://r", "https://c", "https://w"
    )
    assert result == {"success": False, "message": "Payment gateway request failed"}
