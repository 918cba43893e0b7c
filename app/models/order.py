from app.extensions import db
from app.models.base import BaseModel, format_datetime

import const


class Order(db.Model, BaseModel):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False)
    checkout_page_id = db.Column(db.Integer, db.ForeignKey("checkout_pages.id"), nullable=True)
    order_number = db.Column(db.String(50), nullable=False)
    confirmation_token = db.Column(db.String(100), nullable=False, unique=True)
    status = db.Column(db.String(20), nullable=False, default=const.ORDER_PENDING)
    subtotal = db.Column(db.Float, nullable=False, default=0)
    discount = db.Column(db.Float, default=0)
    total = db.Column(db.Float, nullable=False, default=0)
    coupon_id = db.Column(db.Integer, db.ForeignKey("coupons.id"), nullable=True)
    payment_method = db.Column(db.String(50), nullable=True)
    transaction_id = db.Column(db.String(255), nullable=True)
    invoice_id = db.Column(db.String(255), nullable=True)
    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(500), nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)

    customer = db.relationship("Customer", lazy="joined")
    items = db.relationship("OrderItem", back_populates="order", order_by="OrderItem.id")

    def to_dict(self, with_items=False):
        result = {
            "id": self.id,
            "user_id": self.user_id,
            "customer_id": self.customer_id,
            "customer_email": self.customer.email if self.customer else None,
            "order_number": self.order_number,
            "status": self.status,
            "subtotal": self.subtotal,
            "discount": self.discount,
            "total": self.total,
            "checkout_page_id": self.checkout_page_id,
            "coupon_id": self.coupon_id,
            "payment_method": self.payment_method,
            "transaction_id": self.transaction_id,
            "invoice_id": self.invoice_id,
            "completed_at": format_datetime(self.completed_at),
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }
        if with_items:
            result["items"] = [item.to_dict() for item in self.items]
        return result
