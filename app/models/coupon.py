from app.extensions import db
from app.models.base import BaseModel, format_datetime

import const


class Coupon(db.Model, BaseModel):
    __tablename__ = "coupons"
    __table_args__ = (db.UniqueConstraint("user_id", "code"),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    code = db.Column(db.String(50), nullable=False)
    discount_type = db.Column(
        db.String(20), nullable=False, default=const.DISCOUNT_PERCENTAGE
    )
    discount_value = db.Column(db.Float, nullable=False, default=0)
    usage_limit = db.Column(db.Integer, nullable=True)
    used_count = db.Column(db.Integer, default=0)
    expires_at = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, default=True)

    def discount_for(self, subtotal):
        if self.discount_type == const.DISCOUNT_FIXED:
            return round(min(self.discount_value, subtotal), 2)
        return round(subtotal * self.discount_value / 100, 2)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "code": self.code,
            "discount_type": self.discount_type,
            "discount_value": self.discount_value,
            "usage_limit": self.usage_limit,
            "used_count": self.used_count,
            "expires_at": format_datetime(self.expires_at),
            "is_active": self.is_active,
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }
