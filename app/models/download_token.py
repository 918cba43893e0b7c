from app.extensions import db
from app.models.base import BaseModel, format_datetime


class DownloadToken(db.Model, BaseModel):
    """Access record for a purchased download.

    A token is valid while ``now < expires_at`` and ``downloads_remaining`` is
    either NULL (unlimited) or positive. Rows are never deleted so they double
    as the download audit trail.
    """

    __tablename__ = "download_tokens"

    id = db.Column(db.Integer, primary_key=True)
    order_item_id = db.Column(
        db.Integer, db.ForeignKey("order_items.id"), nullable=False, unique=True
    )
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    token = db.Column(db.String(64), nullable=False, unique=True, index=True)
    downloads_remaining = db.Column(db.Integer, nullable=True)
    expires_at = db.Column(db.DateTime, nullable=False)
    last_download_at = db.Column(db.DateTime, nullable=True)
    ip_address = db.Column(db.String(64), nullable=True)

    product = db.relationship("Product", lazy="joined")

    def is_valid(self, now):
        if now >= self.expires_at:
            return False
        return self.downloads_remaining is None or self.downloads_remaining > 0

    def to_dict(self):
        return {
            "id": self.id,
            "order_item_id": self.order_item_id,
            "customer_id": self.customer_id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "product_image": self.product.image_url if self.product else None,
            "token": self.token,
            "downloads_remaining": self.downloads_remaining,
            "expires_at": format_datetime(self.expires_at),
            "last_download_at": format_datetime(self.last_download_at),
            "created_at": format_datetime(self.created_at),
        }
