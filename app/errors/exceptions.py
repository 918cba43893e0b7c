# coding: utf8


class BaseError(Exception):
    status = 500
    message = "Internal Server Error"

    def __init__(self, message=None, status=None):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        if status is not None:
            self.status = status

    def to_dict(self):
        return {
            "code": self.status,
            "message": self.message,
            "error": self.message,
        }


class BadRequest(BaseError):
    status = 400
    message = "Bad request"


class Unauthorized(BaseError):
    status = 401
    message = "Unauthorized"


class Forbidden(BaseError):
    status = 403
    message = "Forbidden"


class NotFound(BaseError):
    status = 404
    message = "Not found"


class Gone(BaseError):
    status = 410
    message = "Gone"


class InternalError(BaseError):
    status = 500
    message = "Internal Server Error"


# Downloads
class DownloadTokenNotFound(NotFound):
    message = "Invalid download token"


class DownloadExpired(Gone):
    message = "Download link has expired"


class DownloadLimitReached(Gone):
    message = "Download limit reached"


# Coupons
class CouponNotFound(NotFound):
    message = "Coupon not found"


class CouponInactive(BadRequest):
    message = "Coupon is inactive"


class CouponUsageLimitReached(BadRequest):
    message = "Coupon usage limit reached"


class CouponExpired(BadRequest):
    message = "Coupon has expired"
