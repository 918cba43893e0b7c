from sqlalchemy import or_

import const
from app.errors.exceptions import BadRequest
from app.extensions import db
from app.models.checkout_page import CheckoutPage
from app.models.product import Product
from app.models.product_file import ProductFile


class ProductService:

    @staticmethod
    def create_product(*args, **kwargs):
        # an explicit None keeps the product unlimited
        kwargs.setdefault("download_limit", const.DEFAULT_DOWNLOAD_LIMIT)
        kwargs.setdefault("download_expiry", const.DEFAULT_DOWNLOAD_EXPIRY_DAYS)
        product = Product(*args, **kwargs)
        product.save()
        return product

    @staticmethod
    def find_product(id, user_id=None):
        product = db.session.get(Product, id)
        if product and user_id is not None and product.user_id != user_id:
            return None
        return product

    @staticmethod
    def update_product(id, user_id, **kwargs):
        product = ProductService.find_product(id, user_id)
        if not product:
            return None
        product.update(**kwargs)
        return product

    @staticmethod
    def delete_product(id, user_id):
        product = ProductService.find_product(id, user_id)
        if not product:
            return False
        if CheckoutPage.query.filter(CheckoutPage.product_id == product.id).first():
            raise BadRequest(message="Product is used by a checkout page")
        product.delete()
        return True

    @staticmethod
    def get_products(data_search):
        query = Product.query.filter(Product.user_id == data_search["user_id"])

        search_key = data_search.get("search_key", "")
        if search_key:
            search_pattern = f"%{search_key}%"
            query = query.filter(
                or_(
                    Product.name.ilike(search_pattern),
                    Product.description.ilike(search_pattern),
                )
            )

        if data_search.get("type_order") == "id_asc":
            query = query.order_by(Product.id.asc())
        else:
            query = query.order_by(Product.id.desc())

        per_page = min(
            data_search.get("per_page") or const.DEFAULT_PER_PAGE, const.MAX_PER_PAGE
        )
        return query.paginate(
            page=data_search.get("page") or const.DEFAULT_PAGE,
            per_page=per_page,
            error_out=False,
        )

    @staticmethod
    def add_file(product, **kwargs):
        product_file = ProductFile(product_id=product.id, **kwargs)
        product_file.save()
        return product_file

    @staticmethod
    def delete_file(product, file_id):
        product_file = ProductFile.query.filter(
            ProductFile.id == file_id, ProductFile.product_id == product.id
        ).first()
        if not product_file:
            return False
        product_file.delete()
        return True
