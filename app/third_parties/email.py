import os
import smtplib
import traceback
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import formataddr

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.lib.logger import logger

EMAIL_TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")
jinja_env = Environment(
    loader=FileSystemLoader(EMAIL_TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
)


class EmailService:
    """SMTP sender. Unconfigured or failing deliveries are logged and reported as False."""

    def __init__(
        self,
        host="",
        port=587,
        username="",
        password="",
        from_name="DigitalCart",
        encryption="tls",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_name = from_name
        self.encryption = encryption

    @classmethod
    def from_config(cls, config):
        return cls(
            host=config.get("EMAIL_HOST"),
            port=config.get("EMAIL_PORT", 587),
            username=config.get("EMAIL_HOST_USER"),
            password=config.get("EMAIL_HOST_PASSWORD"),
            from_name=config.get("EMAIL_FROM_NAME", "DigitalCart"),
            encryption=config.get("EMAIL_ENCRYPTION", "tls"),
        )

    @property
    def is_configured(self):
        return bool(self.host and self.username and self.password)

    def render(self, template_name, context):
        template = jinja_env.get_template(template_name)
        return template.render(**context)

    def send_email(self, to_email, subject, template_name, context=None):
        if not self.is_configured:
            logger.warning(f"Email not configured, skipped {subject!r} to {to_email}")
            return False

        try:
            html_content = self.render(template_name, context or {})

            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = formataddr((self.from_name, self.username))
            msg["To"] = to_email
            msg.attach(MIMEText(html_content, "html"))

            if self.encryption == "ssl":
                server = smtplib.SMTP_SSL(self.host, self.port)
            else:
                server = smtplib.SMTP(self.host, self.port)
                if self.encryption == "tls":
                    server.starttls()

            try:
                server.login(self.username, self.password)
                server.sendmail(self.username, to_email, msg.as_string())
            finally:
                server.quit()

            logger.info(f"Email sent to {to_email}: {subject}")
            return True

        except Exception as ex:
            logger.error(
                f"Failed to send email to {to_email}: {ex}\n{traceback.format_exc()}"
            )
            return False

    def send_cart_abandonment(self, cart, step):
        context = {
            "customer_name": cart.customer_name or "there",
            "product_name": cart.product_name,
            "product_image": cart.product_image,
            "price": cart.price,
            "checkout_url": cart.checkout_url,
            "coupon_code": step.get("coupon_code") if step.get("include_coupon") else None,
            "discount_percent": (
                step.get("discount_percent") if step.get("include_coupon") else None
            ),
        }
        return self.send_email(
            cart.email, step["subject"], "cart_abandonment.html", context
        )

    def send_order_confirmation(self, order, items, confirmation_url):
        context = {
            "customer_name": order.customer.first_name or "there",
            "order_number": order.order_number,
            "total": order.total,
            "items": items,
            "confirmation_url": confirmation_url,
        }
        return self.send_email(
            order.customer.email,
            f"Order Confirmation - {order.order_number}",
            "order_confirmation.html",
            context,
        )
