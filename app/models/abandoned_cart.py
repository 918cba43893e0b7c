from app.extensions import db
from app.models.base import BaseModel, format_datetime


class AbandonedCart(db.Model, BaseModel):
    __tablename__ = "abandoned_carts"

    id = db.Column(db.Integer, primary_key=True)
    cart_key = db.Column(db.String(100), nullable=False, unique=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    email = db.Column(db.String(150), nullable=True)
    customer_name = db.Column(db.String(255), nullable=True)
    product_id = db.Column(db.Integer, nullable=True)
    product_name = db.Column(db.String(500), nullable=True)
    product_image = db.Column(db.String(500), nullable=True)
    price = db.Column(db.String(50), nullable=True)
    checkout_page_id = db.Column(db.Integer, nullable=True)
    checkout_url = db.Column(db.String(1000), nullable=True)
    emails_sent = db.Column(db.Integer, nullable=False, default=0)
    last_email_sent_at = db.Column(db.DateTime, nullable=True)
    recovered = db.Column(db.Boolean, nullable=False, default=False, index=True)
    recovered_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self):
        return {
            "id": self.cart_key,
            "user_id": self.user_id,
            "email": self.email,
            "customer_name": self.customer_name,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "product_image": self.product_image,
            "price": self.price,
            "checkout_page_id": self.checkout_page_id,
            "checkout_url": self.checkout_url,
            "emails_sent": self.emails_sent,
            "last_email_sent_at": format_datetime(self.last_email_sent_at),
            "recovered": self.recovered,
            "recovered_at": format_datetime(self.recovered_at),
            "created_at": format_datetime(self.created_at),
        }
