# coding: utf8
from flask import current_app, request
from flask_restx import Namespace, Resource

from app.decorators import parameters
from app.lib.response import Response

ns = Namespace(name="checkout", description="Public checkout API")


@ns.route("/orders")
class APICheckoutOrder(Resource):

    @parameters(
        type="object",
        properties={
            "seller_id": {"type": "integer"},
            "email": {"type": "string", "format": "email"},
            "first_name": {"type": ["string", "null"]},
            "last_name": {"type": ["string", "null"]},
            "items": {
                "type": "array",
                "minItems": 1,
                "items": {
                    "type": "object",
                    "properties": {
                        "product_id": {"type": "integer"},
                        "quantity": {"type": "integer", "minimum": 1},
                    },
                    "required": ["product_id"],
                },
            },
            "coupon_code": {"type": ["string", "null"]},
            "cart_id": {"type": ["string", "null"]},
            "checkout_page_id": {"type": ["integer", "null"]},
        },
        required=["seller_id", "email", "items"],
    )
    def post(self, args):
        order_service = current_app.extensions["order_service"]
        order, payment = order_service.create_checkout_order(
            args["seller_id"],
            args["email"],
            args["items"],
            first_name=args.get("first_name"),
            last_name=args.get("last_name"),
            coupon_code=args.get("coupon_code"),
            cart_id=args.get("cart_id"),
            checkout_page_id=args.get("checkout_page_id"),
            ip_address=request.remote_addr,
            user_agent=request.headers.get("User-Agent"),
        )

        data = order.to_dict(with_items=True)
        data["confirmation_token"] = order.confirmation_token
        data["confirmation_url"] = order_service.confirmation_url(order)
        data["payment_url"] = payment.get("payment_url") if payment.get("success") else None
        if not payment.get("success"):
            data["payment_error"] = payment.get("message")

        return Response(
            data=data,
            message="Order created",
            code=201,
            status=201,
        ).to_dict()
