from app.extensions import db
from app.models.base import BaseModel


class OrderItem(db.Model, BaseModel):
    __tablename__ = "order_items"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    product_name = db.Column(db.String(500), nullable=True)
    quantity = db.Column(db.Integer, default=1)
    item_type = db.Column(db.String(20), default="main")
    price = db.Column(db.Float, nullable=False, default=0)

    order = db.relationship("Order", back_populates="items", lazy="joined")

    def to_dict(self):
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "item_type": self.item_type,
            "price": self.price,
        }
