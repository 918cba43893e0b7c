# coding: utf8
from flask import Blueprint
from flask_restx import Api

from app.errors.handler import api_error_handler
from app.api.auth import ns as auth_ns
from app.api.customer import ns as customer_ns
from app.api.customers import ns as customers_ns
from app.api.product import ns as product_ns
from app.api.coupon import ns as coupon_ns
from app.api.order import ns as order_ns
from app.api.checkout import ns as checkout_ns
from app.api.checkout_page import ns as checkout_page_ns
from app.api.order_confirmation import ns as order_confirmation_ns
from app.api.download import ns as download_ns
from app.api.cart import ns as cart_ns
from app.api.webhook import ns as webhook_ns

bp = Blueprint("api", __name__, url_prefix="/api")

api = Api(
    bp,
    version="1.0",
    title="DigitalCart API",
    description="Digital product checkout API",
    doc="/docs/",
)


@api.errorhandler(Exception)
def handle_error(error):
    return api_error_handler(error)


api.add_namespace(ns=auth_ns)
api.add_namespace(ns=customer_ns)
api.add_namespace(ns=customers_ns)
api.add_namespace(ns=product_ns)
api.add_namespace(ns=coupon_ns)
api.add_namespace(ns=order_ns)
api.add_namespace(ns=checkout_ns)
api.add_namespace(ns=checkout_page_ns)
api.add_namespace(ns=order_confirmation_ns)
api.add_namespace(ns=download_ns)
api.add_namespace(ns=cart_ns)
api.add_namespace(ns=webhook_ns)
