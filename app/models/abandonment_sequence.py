from app.extensions import db
from app.models.base import BaseModel, format_datetime


class AbandonmentSequence(db.Model, BaseModel):
    """A seller's recovery email sequence; `emails` is a list of steps sorted by delay."""

    __tablename__ = "abandonment_sequences"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True)
    name = db.Column(db.String(255), nullable=False, default="")
    emails = db.Column(db.JSON, nullable=False, default=list)
    is_active = db.Column(db.Boolean, default=True)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "emails": self.emails or [],
            "is_active": self.is_active,
            "updated_at": format_datetime(self.updated_at),
        }
