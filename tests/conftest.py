from datetime import datetime

import pytest

import const
from app import create_app
from app.config import TestingConfig
from app.extensions import db
from app.models.customer import Customer
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.product import Product
from app.models.product_file import ProductFile
from app.models.user import User
from app.services.auth import AuthService
from app.third_parties.payment_gateway import PaymentGatewayClient


class FakeEmailService:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send_cart_abandonment(self, cart, step):
        self.sent.append(
            {"kind": "cart", "to": cart.email, "cart": cart.cart_key, "subject": step["subject"]}
        )
        return not self.fail

    def send_order_confirmation(self, order, items, confirmation_url):
        self.sent.append(
            {
                "kind": "order",
                "to": order.customer.email,
                "order": order.order_number,
                "url": confirmation_url,
            }
        )
        return not self.fail

    def cart_emails(self, cart_key=None):
        return [
            mail
            for mail in self.sent
            if mail["kind"] == "cart" and (cart_key is None or mail["cart"] == cart_key)
        ]


class FakeStorage:
    def __init__(self):
        self.signed = []
        self.fail = False

    def generate_presigned_url(self, s3_key, expires_in=3600, file_name=None):
        if self.fail:
            return None
        self.signed.append((s3_key, expires_in, file_name))
        return f"https://files.example.com/{s3_key}?expires={expires_in}"


class FakePaymentGateway(PaymentGatewayClient):
    """Real signature handling, canned charge results."""

    def __init__(self, webhook_secret):
        super().__init__(
            api_url="https://pay.example.com", api_key="key", webhook_secret=webhook_secret
        )
        self.charges = []
        self.result = None

    def create_charge(
        self, order, customer_email, customer_name, redirect_url, cancel_url, webhook_url
    ):
        self.charges.append({"order_id": order.id, "email": customer_email, "amount": order.total})
        if self.result is not None:
            return self.result
        return {
            "success": True,
            "payment_url": f"https://pay.example.com/invoice/{order.id}",
            "invoice_id": f"inv_{order.id}",
        }


@pytest.fixture
def email_service():
    return FakeEmailService()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway(TestingConfig.PAYMENT_WEBHOOK_SECRET)


@pytest.fixture
def app(email_service, storage, payment_gateway):
    app = create_app(
        TestingConfig,
        services={
            "email_service": email_service,
            "file_storage": storage,
            "payment_gateway": payment_gateway,
        },
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def download_service(app):
    return app.extensions["download_service"]


@pytest.fixture
def cart_abandonment(app):
    return app.extensions["cart_abandonment"]


@pytest.fixture
def order_service(app):
    return app.extensions["order_service"]


@pytest.fixture
def make_seller(app):
    def _make(email="seller@example.com", password="secret123", name="Seller"):
        user = User(email=email, name=name)
        user.set_password(password)
        return user.save()

    return _make


@pytest.fixture
def seller(make_seller):
    return make_seller()


@pytest.fixture
def seller_headers(seller):
    token = AuthService.generate_token(seller, const.TOKEN_TYPE_SELLER)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_product(app):
    def _make(seller, name="E-book", price=20.0, files=1, download_limit=5, download_expiry=30):
        product = Product(
            user_id=seller.id,
            name=name,
            price=price,
            download_limit=download_limit,
            download_expiry=download_expiry,
        ).save()
        for index in range(files):
            ProductFile(
                product_id=product.id,
                name=f"Part {index + 1}",
                file_name=f"part-{index + 1}.pdf",
                file_url=f"products/{product.id}/part-{index + 1}.pdf",
                file_size=1024,
                sort_order=index,
            ).save()
        return product

    return _make


@pytest.fixture
def make_order(app):
    def _make(seller, product, status=const.ORDER_COMPLETED, email="buyer@example.com"):
        customer = Customer.query.filter_by(user_id=seller.id, email=email).first()
        if not customer:
            customer = Customer(user_id=seller.id, email=email, first_name="Buyer").save()
        order = Order(
            user_id=seller.id,
            customer_id=customer.id,
            order_number=f"ORD-TEST-{Order.query.count() + 1}",
            confirmation_token=f"confirm-{Order.query.count() + 1}",
            status=status,
            subtotal=product.price,
            total=product.price,
            completed_at=datetime.utcnow() if status == const.ORDER_COMPLETED else None,
        ).save()
        item = OrderItem(
            order_id=order.id,
            product_id=product.id,
            product_name=product.name,
            quantity=1,
            price=product.price,
        ).save()
        return order, item

    return _make
