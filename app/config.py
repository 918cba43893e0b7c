# coding: utf8
import os


class Config(object):
    SECRET_KEY = os.environ.get("SECRET_KEY") or "<your secret key>"
    API_URL = os.environ.get("API_URL") or "http://localhost:5000"
    FRONTEND_URL = os.environ.get("FRONTEND_URL") or "http://localhost:3000"

    REDIS_URL = os.environ.get("REDIS_URL") or "redis://localhost:6379/0"

    SQLALCHEMY_DATABASE_URI = "{engine}://{user}:{password}@{host}:{port}/{db}".format(
        engine=os.environ.get("SQLALCHEMY_ENGINE") or "mysql+pymysql",
        user=os.environ.get("SQLALCHEMY_USER") or "root",
        password=os.environ.get("SQLALCHEMY_PASSWORD") or "",
        host=os.environ.get("SQLALCHEMY_HOST") or "127.0.0.1",
        port=int(os.environ.get("SQLALCHEMY_PORT", 3306)),
        db=os.environ.get("SQLALCHEMY_DATABASE") or "digitalcart",
    )

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_size": 20,
        "max_overflow": 50,
        "pool_timeout": 10,
        "pool_recycle": 900,
        "pool_pre_ping": True,
    }

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY") or "secret"
    JWT_ACCESS_TOKEN_EXPIRES = False

    RESTX_ERROR_404_HELP = False

    EMAIL_HOST = os.environ.get("EMAIL_HOST") or "smtp.gmail.com"
    EMAIL_PORT = int(os.environ.get("EMAIL_PORT") or 587)
    EMAIL_HOST_USER = os.environ.get("EMAIL_HOST_USER") or ""
    EMAIL_HOST_PASSWORD = os.environ.get("EMAIL_HOST_PASSWORD") or ""
    EMAIL_FROM_NAME = os.environ.get("EMAIL_FROM_NAME") or "DigitalCart"
    EMAIL_ENCRYPTION = (os.environ.get("EMAIL_ENCRYPTION") or "tls").lower()

    AWS_ACCESS_KEY_ID = os.environ.get("AWS_ACCESS_KEY_ID") or ""
    AWS_SECRET_ACCESS_KEY = os.environ.get("AWS_SECRET_ACCESS_KEY") or ""
    AWS_DEFAULT_REGION = os.environ.get("AWS_DEFAULT_REGION") or "ap-northeast-2"
    AWS_PRODUCT_BUCKET = os.environ.get("AWS_PRODUCT_BUCKET") or "product-files"
    DOWNLOAD_URL_EXPIRES_IN = int(os.environ.get("DOWNLOAD_URL_EXPIRES_IN") or 3600)

    PAYMENT_API_URL = os.environ.get("PAYMENT_API_URL") or ""
    PAYMENT_API_KEY = os.environ.get("PAYMENT_API_KEY") or ""
    PAYMENT_WEBHOOK_SECRET = os.environ.get("PAYMENT_WEBHOOK_SECRET") or ""

    CART_ABANDONMENT_INTERVAL_MINUTES = int(
        os.environ.get("CART_ABANDONMENT_INTERVAL_MINUTES") or 5
    )

    PROPAGATE_EXCEPTIONS = os.environ.get("FLASK_CONFIG") == "production"


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    JWT_SECRET_KEY = "testing-secret-key-with-enough-length"
    PAYMENT_WEBHOOK_SECRET = "whsec_testing"
    BCRYPT_LOG_ROUNDS = 4


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False
    TESTING = False


configs = {
    "develop": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
