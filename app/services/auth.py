from datetime import datetime

from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity

import const
from app.errors.exceptions import BadRequest, NotFound
from app.extensions import db
from app.lib.logger import logger
from app.models.customer import Customer
from app.models.order import Order
from app.models.user import User


class AuthService:

    @staticmethod
    def register(email, password, name=""):
        email = (email or "").strip().lower()
        user = User.query.filter_by(email=email).first()
        if user:
            raise BadRequest(message="Email already exists")
        user = User(email=email, name=name)
        user.set_password(password)
        user.save()
        logger.info(f"Seller registered: {user.id} {email}")
        return user

    @staticmethod
    def login(email, password):
        email = (email or "").strip().lower()
        user = User.query.filter_by(email=email).first()
        if not user or user.status != const.ACTIVE or not user.check_password(password):
            return None
        return user

    @staticmethod
    def customer_login(seller_id, email, password):
        email = (email or "").strip().lower()
        customer = Customer.query.filter_by(user_id=seller_id, email=email).first()
        if not customer or not customer.is_active or not customer.check_password(password):
            return None
        customer.update(last_login_at=datetime.utcnow())
        return customer

    @staticmethod
    def customer_set_password(confirmation_token, password):
        """First password for the customer behind a completed order."""
        order = Order.query.filter(Order.confirmation_token == confirmation_token).first()
        if not order or order.status != const.ORDER_COMPLETED or not order.customer:
            raise NotFound(message="Order not found")

        customer = order.customer
        if customer.password:
            raise BadRequest(message="Password already set")
        customer.set_password(password)
        customer.save()
        logger.info(f"Customer {customer.id} set a password from order {order.id}")
        return customer

    @staticmethod
    def generate_token(entity, token_type=const.TOKEN_TYPE_SELLER):
        return create_access_token(
            identity=str(entity.id), additional_claims={"type": token_type}
        )

    @staticmethod
    def get_token_type():
        return get_jwt().get("type", const.TOKEN_TYPE_SELLER)

    @staticmethod
    def get_user_id():
        subject = get_jwt_identity()
        if subject is None:
            return None
        return int(subject)

    @staticmethod
    def get_current_identity():
        """Seller behind the current access token, or None."""
        subject = get_jwt_identity()
        if subject is None or AuthService.get_token_type() != const.TOKEN_TYPE_SELLER:
            return None
        return db.session.get(User, int(subject))

    @staticmethod
    def get_current_customer():
        subject = get_jwt_identity()
        if subject is None or AuthService.get_token_type() != const.TOKEN_TYPE_CUSTOMER:
            return None
        return db.session.get(Customer, int(subject))
