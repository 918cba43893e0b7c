# coding: utf8
from flask import request
from flask_restx import Namespace, Resource

from app.decorators import parameters, seller_required
from app.errors.exceptions import NotFound
from app.lib.logger import logger
from app.lib.response import Response
from app.services.auth import AuthService
from app.services.product import ProductService
import const

ns = Namespace(name="products", description="Seller product API")

PRODUCT_PROPERTIES = {
    "name": {"type": "string", "minLength": 1},
    "description": {"type": ["string", "null"]},
    "short_description": {"type": ["string", "null"]},
    "product_type": {"type": "string"},
    "price": {"type": "number", "minimum": 0},
    "compare_at_price": {"type": ["number", "null"], "minimum": 0},
    "image_url": {"type": ["string", "null"]},
    "download_limit": {"type": ["integer", "null"], "minimum": 0},
    "download_expiry": {"type": "integer", "minimum": 1},
    "is_active": {"type": "boolean"},
}


def _find_own_product(id):
    product = ProductService.find_product(id, AuthService.get_user_id())
    if not product:
        raise NotFound(message="Product not found")
    return product


@ns.route("")
class APIProducts(Resource):

    @seller_required
    def get(self):
        data_search = {
            "user_id": AuthService.get_user_id(),
            "page": request.args.get("page", const.DEFAULT_PAGE, type=int),
            "per_page": request.args.get("per_page", const.DEFAULT_PER_PAGE, type=int),
            "search_key": request.args.get("search_key", "", type=str),
            "type_order": request.args.get("type_order", "", type=str),
        }
        products = ProductService.get_products(data_search)
        return Response(
            data=[product.to_dict() for product in products.items],
            total=products.total,
            page=products.page,
            per_page=products.per_page,
            total_pages=products.pages,
        ).to_dict()

    @seller_required
    @parameters(
        type="object",
        properties=PRODUCT_PROPERTIES,
        required=["name", "price"],
    )
    def post(self, args):
        product = ProductService.create_product(user_id=AuthService.get_user_id(), **args)
        logger.info(f"Product {product.id} created by seller {product.user_id}")
        return Response(
            data=product.to_dict(),
            message="Product created",
            code=201,
            status=201,
        ).to_dict()


@ns.route("/<int:id>")
class APIProductDetail(Resource):

    @seller_required
    def get(self, id):
        return Response(data=_find_own_product(id).to_dict()).to_dict()

    @seller_required
    @parameters(type="object", properties=PRODUCT_PROPERTIES, required=[])
    def patch(self, args, id):
        product = ProductService.update_product(id, AuthService.get_user_id(), **args)
        if not product:
            raise NotFound(message="Product not found")
        return Response(data=product.to_dict(), message="Product updated").to_dict()

    @seller_required
    def delete(self, id):
        if not ProductService.delete_product(id, AuthService.get_user_id()):
            raise NotFound(message="Product not found")
        logger.info(f"Product {id} deleted")
        return Response(message="Product deleted").to_dict()


@ns.route("/<int:id>/files")
class APIProductFiles(Resource):

    @seller_required
    @parameters(
        type="object",
        properties={
            "name": {"type": "string", "minLength": 1},
            "file_name": {"type": "string", "minLength": 1},
            "file_url": {"type": "string", "minLength": 1},
            "file_size": {"type": ["integer", "null"], "minimum": 0},
            "sort_order": {"type": "integer"},
        },
        required=["name", "file_name", "file_url"],
    )
    def post(self, args, id):
        product = _find_own_product(id)
        product_file = ProductService.add_file(product, **args)
        return Response(
            data=product_file.to_dict(),
            message="File added",
            code=201,
            status=201,
        ).to_dict()


@ns.route("/<int:id>/files/<int:file_id>")
class APIProductFileDetail(Resource):

    @seller_required
    def delete(self, id, file_id):
        product = _find_own_product(id)
        if not ProductService.delete_file(product, file_id):
            raise NotFound(message="File not found")
        return Response(message="File deleted").to_dict()
