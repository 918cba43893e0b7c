# coding: utf8
import os

from werkzeug.exceptions import default_exceptions

from flask import Flask
from flask_cors import CORS

from .errors.handler import api_error_handler
from .extensions import redis_client, db, bcrypt, jwt
from app.lib.logger import logger


def create_app(config_app, services=None):
    """Build the Flask app.

    `services` overrides entries of `app.extensions` (email sender, file
    storage, payment gateway) before the dependent services are wired.
    """
    app = Flask(__name__)

    cors_scheme = os.environ.get("CORS_SCHEME") or "*"

    CORS(app, resources={r"/*": {"origins": cors_scheme}})
    app.config.from_object(config_app)
    __init_app(app)
    __init_services(app, services or {})
    __register_blueprint(app)
    __config_error_handlers(app)

    return app


def __register_blueprint(app):
    from app.api import bp as api_bp

    app.register_blueprint(api_bp)


def __init_app(app):
    from . import models  # noqa: F401

    db.init_app(app)
    redis_client.init_app(app)
    bcrypt.init_app(app)
    jwt.init_app(app)

    logger.info("Initial app...")


def __init_services(app, overrides):
    from app.lib.s3util import S3Utils
    from app.services.cart_abandonment import CartAbandonmentService
    from app.services.download import DownloadService
    from app.services.order import OrderService
    from app.third_parties.email import EmailService
    from app.third_parties.payment_gateway import PaymentGatewayClient

    email_service = overrides.get("email_service") or EmailService.from_config(app.config)
    file_storage = overrides.get("file_storage") or S3Utils.from_config(app.config)
    payment_gateway = overrides.get("payment_gateway") or PaymentGatewayClient.from_config(
        app.config
    )

    cart_abandonment = CartAbandonmentService(email_service)
    download_service = DownloadService(
        file_storage, url_expires_in=app.config["DOWNLOAD_URL_EXPIRES_IN"]
    )
    order_service = OrderService(
        payment_gateway,
        email_service,
        download_service,
        cart_abandonment,
        frontend_url=app.config["FRONTEND_URL"],
        api_url=app.config["API_URL"],
    )

    app.extensions["email_service"] = email_service
    app.extensions["file_storage"] = file_storage
    app.extensions["payment_gateway"] = payment_gateway
    app.extensions["cart_abandonment"] = cart_abandonment
    app.extensions["download_service"] = download_service
    app.extensions["order_service"] = order_service


def __config_error_handlers(app):
    for exp in default_exceptions:
        app.register_error_handler(exp, api_error_handler)
    app.register_error_handler(Exception, api_error_handler)
