from datetime import datetime

from app.errors.exceptions import (
    CouponExpired,
    CouponInactive,
    CouponNotFound,
    CouponUsageLimitReached,
)
from app.extensions import db
from app.lib.logger import logger
from app.lib.string import normalize_code
from app.models.coupon import Coupon


class CouponService:

    @staticmethod
    def create_coupon(*args, **kwargs):
        kwargs["code"] = normalize_code(kwargs.get("code"))
        coupon = Coupon(*args, **kwargs)
        coupon.save()
        return coupon

    @staticmethod
    def find_coupon(id, user_id=None):
        coupon = db.session.get(Coupon, id)
        if coupon and user_id is not None and coupon.user_id != user_id:
            return None
        return coupon

    @staticmethod
    def find_coupon_by_code(code, user_id):
        return Coupon.query.filter(
            Coupon.user_id == user_id, Coupon.code == normalize_code(code)
        ).first()

    @staticmethod
    def get_coupons(user_id):
        return (
            Coupon.query.filter(Coupon.user_id == user_id)
            .order_by(Coupon.created_at.desc(), Coupon.id.desc())
            .all()
        )

    @staticmethod
    def update_coupon(id, user_id, **kwargs):
        coupon = CouponService.find_coupon(id, user_id)
        if not coupon:
            return None
        if "code" in kwargs:
            kwargs["code"] = normalize_code(kwargs["code"])
        coupon.update(**kwargs)
        return coupon

    @staticmethod
    def delete_coupon(id, user_id):
        coupon = CouponService.find_coupon(id, user_id)
        if not coupon:
            return False
        coupon.delete()
        return True

    @staticmethod
    def check_coupon(coupon, now=None):
        """Fail closed: inactive, then usage limit, then expiry."""
        now = now or datetime.utcnow()
        if not coupon:
            raise CouponNotFound()
        if not coupon.is_active:
            raise CouponInactive()
        if coupon.usage_limit and (coupon.used_count or 0) >= coupon.usage_limit:
            raise CouponUsageLimitReached()
        if coupon.expires_at and coupon.expires_at < now:
            raise CouponExpired()
        return coupon

    @staticmethod
    def validate_coupon(code, user_id, now=None):
        coupon = CouponService.find_coupon_by_code(code, user_id)
        return CouponService.check_coupon(coupon, now=now)

    @staticmethod
    def increment_usage(coupon_id):
        updated = (
            db.session.query(Coupon)
            .filter(Coupon.id == coupon_id)
            .update(
                {Coupon.used_count: db.func.coalesce(Coupon.used_count, 0) + 1},
                synchronize_session=False,
            )
        )
        db.session.commit()
        if updated:
            logger.info(f"Coupon {coupon_id} usage incremented")
        return updated == 1
