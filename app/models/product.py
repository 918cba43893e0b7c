from app.extensions import db
from app.models.base import BaseModel, format_datetime

import const


class Product(db.Model, BaseModel):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    name = db.Column(db.String(500), nullable=False, default="")
    description = db.Column(db.Text, default="")
    short_description = db.Column(db.String(500), default="")
    product_type = db.Column(db.String(20), default="digital")
    price = db.Column(db.Float, nullable=False, default=0)
    compare_at_price = db.Column(db.Float, nullable=True)
    image_url = db.Column(db.String(500), nullable=True)
    # None or 0 means unlimited downloads
    download_limit = db.Column(db.Integer, nullable=True)
    download_expiry = db.Column(db.Integer, default=const.DEFAULT_DOWNLOAD_EXPIRY_DAYS)
    is_active = db.Column(db.Boolean, default=True)

    files = db.relationship(
        "ProductFile",
        lazy="select",
        order_by="[ProductFile.sort_order, ProductFile.id]",
        cascade="all, delete-orphan",
    )

    def to_dict(self, with_files=True):
        result = {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "description": self.description,
            "short_description": self.short_description,
            "product_type": self.product_type,
            "price": self.price,
            "compare_at_price": self.compare_at_price,
            "image_url": self.image_url,
            "download_limit": self.download_limit,
            "download_expiry": self.download_expiry,
            "is_active": self.is_active,
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }
        if with_files:
            result["files"] = [file.to_dict() for file in self.files]
        return result
