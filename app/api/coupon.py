# coding: utf8
from flask_restx import Namespace, Resource

from app.decorators import jwt_optional, parameters, seller_required
from app.errors.exceptions import BadRequest, NotFound
from app.lib.logger import logger
from app.lib.response import Response
from app.lib.string import parse_datetime
from app.services.auth import AuthService
from app.services.coupon import CouponService
import const

ns = Namespace(name="coupons", description="Coupon API")

COUPON_PROPERTIES = {
    "code": {"type": "string", "minLength": 1, "maxLength": 50},
    "discount_type": {"type": "string", "enum": const.DISCOUNT_TYPES},
    "discount_value": {"type": "number", "minimum": 0},
    "usage_limit": {"type": ["integer", "null"], "minimum": 0},
    "expires_at": {"type": ["string", "null"]},
    "is_active": {"type": "boolean"},
}


def _coupon_values(args):
    values = dict(args)
    if "expires_at" in values:
        try:
            values["expires_at"] = parse_datetime(values["expires_at"])
        except ValueError:
            raise BadRequest(message="expires_at must be an ISO 8601 datetime")
    if (
        values.get("discount_type") == const.DISCOUNT_PERCENTAGE
        and values.get("discount_value", 0) > 100
    ):
        raise BadRequest(message="Percentage discount cannot exceed 100")
    return values


@ns.route("")
class APICoupons(Resource):

    @seller_required
    def get(self):
        coupons = CouponService.get_coupons(AuthService.get_user_id())
        return Response(data=[coupon.to_dict() for coupon in coupons]).to_dict()

    @seller_required
    @parameters(
        type="object",
        properties=COUPON_PROPERTIES,
        required=["code", "discount_type", "discount_value"],
    )
    def post(self, args):
        user_id = AuthService.get_user_id()
        values = _coupon_values(args)
        if CouponService.find_coupon_by_code(values["code"], user_id):
            raise BadRequest(message="Coupon code already exists")

        coupon = CouponService.create_coupon(user_id=user_id, **values)
        logger.info(f"Coupon {coupon.code} created by seller {user_id}")
        return Response(
            data=coupon.to_dict(),
            message="Coupon created",
            code=201,
            status=201,
        ).to_dict()


@ns.route("/<int:id>")
class APICouponDetail(Resource):

    @seller_required
    def get(self, id):
        coupon = CouponService.find_coupon(id, AuthService.get_user_id())
        if not coupon:
            raise NotFound(message="Coupon not found")
        return Response(data=coupon.to_dict()).to_dict()

    @seller_required
    @parameters(type="object", properties=COUPON_PROPERTIES, required=[])
    def patch(self, args, id):
        user_id = AuthService.get_user_id()
        values = _coupon_values(args)
        if "code" in values:
            existing = CouponService.find_coupon_by_code(values["code"], user_id)
            if existing and existing.id != id:
                raise BadRequest(message="Coupon code already exists")

        coupon = CouponService.update_coupon(id, user_id, **values)
        if not coupon:
            raise NotFound(message="Coupon not found")
        return Response(data=coupon.to_dict(), message="Coupon updated").to_dict()

    @seller_required
    def delete(self, id):
        if not CouponService.delete_coupon(id, AuthService.get_user_id()):
            raise NotFound(message="Coupon not found")
        return Response(message="Coupon deleted").to_dict()


@ns.route("/validate")
class APIValidateCoupon(Resource):

    @jwt_optional
    @parameters(
        type="object",
        properties={
            "code": {"type": "string", "minLength": 1},
            "seller_id": {"type": "integer"},
            "subtotal": {"type": "number", "minimum": 0},
        },
        required=["code"],
    )
    def post(self, args):
        seller_id = args.get("seller_id")
        if seller_id is None:
            seller = AuthService.get_current_identity()
            seller_id = seller.id if seller else None
        if seller_id is None:
            raise BadRequest(message="seller_id is required")

        coupon = CouponService.validate_coupon(args["code"], seller_id)
        data = coupon.to_dict()
        if "subtotal" in args:
            data["discount_amount"] = coupon.discount_for(args["subtotal"])
        return Response(data=data, message="Coupon is valid").to_dict()
