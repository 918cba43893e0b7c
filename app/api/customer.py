# coding: utf8
from flask import current_app
from flask_restx import Namespace, Resource

from app.decorators import customer_required, parameters
from app.errors.exceptions import Unauthorized
from app.lib.response import Response
from app.services.auth import AuthService
import const

ns = Namespace(name="customer", description="Customer portal API")


@ns.route("/login")
class APICustomerLogin(Resource):

    @parameters(
        type="object",
        properties={
            "seller_id": {"type": "integer"},
            "email": {"type": "string"},
            "password": {"type": "string"},
        },
        required=["seller_id", "email", "password"],
    )
    def post(self, args):
        customer = AuthService.customer_login(
            args["seller_id"], args["email"], args["password"]
        )
        if not customer:
            raise Unauthorized(message="Invalid email or password")

        return Response(
            data={
                "access_token": AuthService.generate_token(
                    customer, const.TOKEN_TYPE_CUSTOMER
                ),
                "type": "Bearer",
                "customer": customer.to_dict(),
            },
            message="Logged in successfully",
        ).to_dict()


@ns.route("/set-password")
class APICustomerSetPassword(Resource):

    @parameters(
        type="object",
        properties={
            "confirmation_token": {"type": "string", "minLength": 1},
            "password": {"type": "string", "minLength": 6},
        },
        required=["confirmation_token", "password"],
    )
    def post(self, args):
        customer = AuthService.customer_set_password(
            args["confirmation_token"], args["password"]
        )
        return Response(
            data={
                "access_token": AuthService.generate_token(
                    customer, const.TOKEN_TYPE_CUSTOMER
                ),
                "type": "Bearer",
                "customer": customer.to_dict(),
            },
            message="Password set",
        ).to_dict()


@ns.route("/downloads")
class APICustomerDownloads(Resource):

    @customer_required
    def get(self):
        customer = AuthService.get_current_customer()
        download_service = current_app.extensions["download_service"]
        tokens = download_service.get_tokens_by_customer(customer.id)
        return Response(data=[token.to_dict() for token in tokens]).to_dict()


@ns.route("/purchases")
class APICustomerPurchases(Resource):

    @customer_required
    def get(self):
        customer = AuthService.get_current_customer()
        order_service = current_app.extensions["order_service"]
        orders = order_service.get_orders_by_customer(customer.id)
        return Response(
            data=[order.to_dict(with_items=True) for order in orders]
        ).to_dict()
