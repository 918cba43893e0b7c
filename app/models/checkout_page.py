from app.extensions import db
from app.models.base import BaseModel, format_datetime

import const


class CheckoutPage(db.Model, BaseModel):
    """A seller's hosted checkout for one product, addressed publicly by slug."""

    __tablename__ = "checkout_pages"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), nullable=False, unique=True)
    checkout_mode = db.Column(db.String(20), default=const.CHECKOUT_MODE_FULL)
    template = db.Column(db.String(50), default=const.CHECKOUT_TEMPLATE_DEFAULT)
    blocks = db.Column(db.JSON, nullable=False, default=list)
    custom_styles = db.Column(db.JSON, nullable=False, default=dict)
    header_text = db.Column(db.Text, nullable=True)
    footer_text = db.Column(db.Text, nullable=True)
    success_url = db.Column(db.String(1000), nullable=True)
    cancel_url = db.Column(db.String(1000), nullable=True)
    collect_phone = db.Column(db.Boolean, default=False)
    collect_address = db.Column(db.Boolean, default=False)
    is_published = db.Column(db.Boolean, default=False)

    product = db.relationship("Product", lazy="joined")

    def to_dict(self, with_product=True):
        result = {
            "id": self.id,
            "user_id": self.user_id,
            "product_id": self.product_id,
            "name": self.name,
            "slug": self.slug,
            "checkout_mode": self.checkout_mode,
            "template": self.template,
            "blocks": self.blocks or [],
            "custom_styles": self.custom_styles or {},
            "header_text": self.header_text,
            "footer_text": self.footer_text,
            "success_url": self.success_url,
            "cancel_url": self.cancel_url,
            "collect_phone": self.collect_phone,
            "collect_address": self.collect_address,
            "is_published": self.is_published,
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }
        if with_product:
            # buyers see the product, never its storage keys
            result["product"] = (
                self.product.to_dict(with_files=False) if self.product else None
            )
        return result
