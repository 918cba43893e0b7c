from sqlalchemy.exc import IntegrityError

from app.errors.exceptions import BadRequest, NotFound
from app.extensions import db
from app.lib.logger import logger
from app.lib.string import slugify
from app.models.checkout_page import CheckoutPage
from app.models.order import Order
from app.services.product import ProductService


class CheckoutPageService:

    @staticmethod
    def _check_product(product_id, user_id):
        if not ProductService.find_product(product_id, user_id):
            raise NotFound(message="Product not found")

    @staticmethod
    def _unique_slug(base):
        slug = base
        suffix = 2
        while CheckoutPage.query.filter(CheckoutPage.slug == slug).first():
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    @staticmethod
    def create_page(user_id, **kwargs):
        CheckoutPageService._check_product(kwargs.get("product_id"), user_id)

        if kwargs.get("slug"):
            slug = slugify(kwargs["slug"])
            if not slug:
                raise BadRequest(message="Slug is not valid")
            if CheckoutPageService.find_by_slug(slug):
                raise BadRequest(message="Slug already exists")
        else:
            slug = CheckoutPageService._unique_slug(slugify(kwargs.get("name")) or "checkout")
        kwargs["slug"] = slug

        page = CheckoutPage(user_id=user_id, **kwargs)
        try:
            page.save()
        except IntegrityError:
            db.session.rollback()
            raise BadRequest(message="Slug already exists")
        logger.info(f"Checkout page {page.slug} created by seller {user_id}")
        return page

    @staticmethod
    def find_page(id, user_id=None):
        page = db.session.get(CheckoutPage, id)
        if page and user_id is not None and page.user_id != user_id:
            return None
        return page

    @staticmethod
    def find_by_slug(slug):
        return CheckoutPage.query.filter(CheckoutPage.slug == slug).first()

    @staticmethod
    def get_pages(user_id):
        return (
            CheckoutPage.query.filter(CheckoutPage.user_id == user_id)
            .order_by(CheckoutPage.created_at.desc(), CheckoutPage.id.desc())
            .all()
        )

    @staticmethod
    def update_page(id, user_id, **kwargs):
        page = CheckoutPageService.find_page(id, user_id)
        if not page:
            return None
        if "product_id" in kwargs:
            CheckoutPageService._check_product(kwargs["product_id"], user_id)
        if "slug" in kwargs:
            slug = slugify(kwargs["slug"])
            if not slug:
                raise BadRequest(message="Slug is not valid")
            existing = CheckoutPageService.find_by_slug(slug)
            if existing and existing.id != page.id:
                raise BadRequest(message="Slug already exists")
            kwargs["slug"] = slug
        page.update(**kwargs)
        return page

    @staticmethod
    def delete_page(id, user_id):
        page = CheckoutPageService.find_page(id, user_id)
        if not page:
            return False
        # orders keep their history without the page
        db.session.query(Order).filter(Order.checkout_page_id == page.id).update(
            {Order.checkout_page_id: None}, synchronize_session=False
        )
        page.delete()
        logger.info(f"Checkout page {id} deleted")
        return True
