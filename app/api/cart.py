# coding: utf8
from flask import current_app
from flask_restx import Namespace, Resource

from app.decorators import parameters, seller_required
from app.errors.exceptions import NotFound
from app.lib.response import Response
from app.services.auth import AuthService
from app.services.product import ProductService

ns = Namespace(name="cart", description="Cart abandonment API")


@ns.route("/track")
class APITrackCart(Resource):

    @parameters(
        type="object",
        properties={
            "cart_id": {"type": "string", "minLength": 1, "maxLength": 100},
            "seller_id": {"type": ["integer", "null"]},
            "email": {"type": ["string", "null"]},
            "customer_name": {"type": ["string", "null"]},
            "product_id": {"type": ["integer", "null"]},
            "product_name": {"type": ["string", "null"]},
            "product_image": {"type": ["string", "null"]},
            "price": {"type": ["string", "number", "null"]},
            "checkout_page_id": {"type": ["integer", "null"]},
            "checkout_url": {"type": ["string", "null"]},
        },
        required=["cart_id"],
    )
    def post(self, args):
        fields = {key: value for key, value in args.items() if key != "cart_id"}
        user_id = fields.pop("seller_id", None)
        if user_id is None and fields.get("product_id"):
            product = ProductService.find_product(fields["product_id"])
            user_id = product.user_id if product else None
        if user_id is not None:
            fields["user_id"] = user_id
        if fields.get("price") is not None:
            fields["price"] = str(fields["price"])

        cart_abandonment = current_app.extensions["cart_abandonment"]
        cart = cart_abandonment.track_cart(args["cart_id"], **fields)
        return Response(data=cart.to_dict(), success=True).to_dict()


@ns.route("/recover/<string:cart_id>")
class APIRecoverCart(Resource):

    def post(self, cart_id):
        cart_abandonment = current_app.extensions["cart_abandonment"]
        cart = cart_abandonment.mark_recovered(cart_id)
        if not cart:
            raise NotFound(message="Cart not found")
        return Response(data=cart.to_dict(), success=True).to_dict()


@ns.route("/abandoned")
class APIAbandonedCarts(Resource):

    @seller_required
    def get(self):
        user_id = AuthService.get_user_id()
        cart_abandonment = current_app.extensions["cart_abandonment"]
        carts = cart_abandonment.get_abandoned_carts(user_id=user_id)
        return Response(
            data={
                "carts": [cart.to_dict() for cart in carts],
                "stats": cart_abandonment.get_stats(user_id=user_id),
            }
        ).to_dict()


@ns.route("/sequence")
class APIAbandonmentSequence(Resource):

    @seller_required
    def get(self):
        cart_abandonment = current_app.extensions["cart_abandonment"]
        return Response(
            data=cart_abandonment.get_sequence(AuthService.get_user_id())
        ).to_dict()

    @seller_required
    @parameters(
        type="object",
        properties={
            "name": {"type": "string", "minLength": 1},
            "is_active": {"type": "boolean"},
            "emails": {
                "type": "array",
                "minItems": 1,
                "items": {
                    "type": "object",
                    "properties": {
                        "delay_minutes": {"type": "integer", "minimum": 0},
                        "subject": {"type": "string", "minLength": 1},
                        "include_coupon": {"type": "boolean"},
                        "coupon_code": {"type": ["string", "null"]},
                        "discount_percent": {
                            "type": ["number", "null"],
                            "minimum": 0,
                            "maximum": 100,
                        },
                    },
                    "required": ["delay_minutes", "subject"],
                },
            },
        },
        required=["name", "emails"],
    )
    def put(self, args):
        user_id = AuthService.get_user_id()
        cart_abandonment = current_app.extensions["cart_abandonment"]
        cart_abandonment.update_sequence(
            user_id, args["name"], args["emails"], is_active=args.get("is_active", True)
        )
        return Response(
            data=cart_abandonment.get_sequence(user_id),
            message="Sequence updated",
        ).to_dict()
