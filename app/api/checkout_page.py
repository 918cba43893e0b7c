# coding: utf8
from flask_restx import Namespace, Resource

from app.decorators import jwt_optional, parameters, seller_required
from app.errors.exceptions import NotFound
from app.lib.response import Response
from app.services.auth import AuthService
from app.services.checkout_page import CheckoutPageService
import const

ns = Namespace(name="checkout-pages", description="Checkout page API")

CHECKOUT_PAGE_PROPERTIES = {
    "product_id": {"type": "integer"},
    "name": {"type": "string", "minLength": 1, "maxLength": 255},
    "slug": {"type": "string", "minLength": 1, "maxLength": 255},
    "checkout_mode": {"type": "string", "enum": const.CHECKOUT_MODES},
    "template": {"type": "string", "minLength": 1, "maxLength": 50},
    "blocks": {"type": "array"},
    "custom_styles": {"type": "object"},
    "header_text": {"type": ["string", "null"]},
    "footer_text": {"type": ["string", "null"]},
    "success_url": {"type": ["string", "null"]},
    "cancel_url": {"type": ["string", "null"]},
    "collect_phone": {"type": "boolean"},
    "collect_address": {"type": "boolean"},
    "is_published": {"type": "boolean"},
}


@ns.route("")
class APICheckoutPages(Resource):

    @seller_required
    def get(self):
        pages = CheckoutPageService.get_pages(AuthService.get_user_id())
        return Response(data=[page.to_dict() for page in pages]).to_dict()

    @seller_required
    @parameters(
        type="object",
        properties=CHECKOUT_PAGE_PROPERTIES,
        required=["product_id", "name"],
    )
    def post(self, args):
        page = CheckoutPageService.create_page(AuthService.get_user_id(), **args)
        return Response(
            data=page.to_dict(),
            message="Checkout page created",
            code=201,
            status=201,
        ).to_dict()


@ns.route("/<int:id>")
class APICheckoutPageDetail(Resource):

    @seller_required
    def get(self, id):
        page = CheckoutPageService.find_page(id, AuthService.get_user_id())
        if not page:
            raise NotFound(message="Checkout page not found")
        return Response(data=page.to_dict()).to_dict()

    @seller_required
    @parameters(type="object", properties=CHECKOUT_PAGE_PROPERTIES, required=[])
    def patch(self, args, id):
        page = CheckoutPageService.update_page(id, AuthService.get_user_id(), **args)
        if not page:
            raise NotFound(message="Checkout page not found")
        return Response(data=page.to_dict(), message="Checkout page updated").to_dict()

    @seller_required
    def delete(self, id):
        if not CheckoutPageService.delete_page(id, AuthService.get_user_id()):
            raise NotFound(message="Checkout page not found")
        return Response(message="Checkout page deleted").to_dict()


@ns.route("/slug/<string:slug>")
class APICheckoutPageBySlug(Resource):

    @jwt_optional
    def get(self, slug):
        page = CheckoutPageService.find_by_slug(slug)
        # drafts are only visible to their owner
        if page and not page.is_published:
            seller = AuthService.get_current_identity()
            if not seller or seller.id != page.user_id:
                page = None
        if not page:
            raise NotFound(message="Checkout page not found")
        return Response(data=page.to_dict()).to_dict()
