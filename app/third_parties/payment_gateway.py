import hashlib
import hmac

import requests

from app.lib.logger import logger


class PaymentGatewayClient:
    """Hosted-checkout payment gateway.

    `create_charge` asks the gateway for a payment page and returns its url;
    the gateway later calls the payment webhook with the outcome.
    """

    def __init__(self, api_url="", api_key="", webhook_secret="", timeout=15):
        self.api_url = (api_url or "").rstrip("/")
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            api_url=config.get("PAYMENT_API_URL"),
            api_key=config.get("PAYMENT_API_KEY"),
            webhook_secret=config.get("PAYMENT_WEBHOOK_SECRET"),
        )

    @property
    def is_configured(self):
        return bool(self.api_url and self.api_key)

    def create_charge(
        self, order, customer_email, customer_name, redirect_url, cancel_url, webhook_url
    ):
        if not self.is_configured:
            logger.warning(f"Payment gateway not configured, order {order.id} unpaid")
            return {"success": False, "message": "Payment gateway not configured"}

        payload = {
            "full_name": customer_name or customer_email,
            "email": customer_email,
            "amount": f"{order.total:.2f}",
            "metadata": {"order_id": order.id, "order_number": order.order_number},
            "redirect_url": redirect_url,
            "cancel_url": cancel_url,
            "webhook_url": webhook_url,
        }
        try:
            response = requests.post(
                f"{self.api_url}/checkout",
                json=payload,
                headers={"Accept": "application/json", "X-Api-Key": self.api_key},
                timeout=self.timeout,
            )
            result = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Payment gateway request failed for order {order.id}: {e}")
            return {"success": False, "message": "Payment gateway request failed"}

        if response.status_code != 200 or not result.get("payment_url"):
            logger.warning(
                f"Payment gateway rejected order {order.id}: {response.status_code} {result}"
            )
            return {
                "success": False,
                "message": result.get("message") or "Payment gateway rejected the charge",
            }

        return {
            "success": True,
            "payment_url": result["payment_url"],
            "invoice_id": result.get("invoice_id"),
        }

    def sign(self, payload):
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        return hmac.new(
            self.webhook_secret.encode("utf-8"), payload, hashlib.sha256
        ).hexdigest()

    def verify_webhook_signature(self, payload, signature):
        if not self.webhook_secret:
            logger.warning("No webhook secret configured, skipping signature verification")
            return True
        if not signature:
            return False
        return hmac.compare_digest(self.sign(payload), signature)
