from app.extensions import db
from app.models.base import BaseModel, format_datetime


class ProductFile(db.Model, BaseModel):
    __tablename__ = "product_files"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    file_name = db.Column(db.String(255), nullable=False)
    # object key inside the product bucket, never a public url
    file_url = db.Column(db.String(1000), nullable=False)
    file_size = db.Column(db.Integer, nullable=True)
    sort_order = db.Column(db.Integer, default=0)

    def to_dict(self):
        return {
            "id": self.id,
            "product_id": self.product_id,
            "name": self.name,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "sort_order": self.sort_order,
            "created_at": format_datetime(self.created_at),
        }
