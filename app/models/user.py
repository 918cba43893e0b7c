from app.extensions import db, bcrypt
from app.models.base import BaseModel, format_datetime

import const


class User(db.Model, BaseModel):
    """A seller account (tenant)."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(150), nullable=False, unique=True)
    name = db.Column(db.String(255), nullable=True, default="")
    password = db.Column(db.String(200), nullable=True)
    status = db.Column(db.Integer, default=const.ACTIVE)
    user_type = db.Column(db.Integer, default=const.USER)
    company_name = db.Column(db.String(255), nullable=True)

    print_filter = ("password",)
    to_json_filter = ("password",)

    def set_password(self, password):
        self.password = bcrypt.generate_password_hash(password).decode("utf-8")

    def check_password(self, password):
        if not self.password:
            return False
        return bcrypt.check_password_hash(self.password, password)

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "status": self.status,
            "user_type": self.user_type,
            "company_name": self.company_name,
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }
