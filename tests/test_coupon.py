from datetime import datetime, timedelta

import pytest

import const
from app.errors.exceptions import (
    CouponExpired,
    CouponInactive,
    CouponNotFound,
    CouponUsageLimitReached,
)
from app.extensions import db
from app.services.coupon import CouponService

NOW = datetime(2024, 5, 1, 9, 0, 0)


@pytest.fixture
def make_coupon(seller):
    def _make(code="SAVE10", **kwargs):
        values = {
            "discount_type": const.DISCOUNT_PERCENTAGE,
            "discount_value": 10,
            "is_active": True,
        }
        values.update(kwargs)
        return CouponService.create_coupon(user_id=seller.id, code=code, **values)

    return _make


def test_code_lookup_is_case_insensitive(seller, make_coupon):
    make_coupon(code=" save10 ")

    coupon = CouponService.validate_coupon("Save10", seller.id, now=NOW)
    assert coupon.code == "SAVE10"


def test_unknown_code(seller):
    with pytest.raises(CouponNotFound):
        CouponService.validate_coupon("MISSING", seller.id, now=NOW)


def test_code_is_scoped_to_seller(make_seller, make_coupon):
    make_coupon()
    other = make_seller(email="other@example.com")

    with pytest.raises(CouponNotFound):
        CouponService.validate_coupon("SAVE10", other.id, now=NOW)


def test_inactive_and_expired_reports_inactive(seller, make_coupon):
    make_coupon(is_active=False, expires_at=NOW - timedelta(days=1))

    with pytest.raises(CouponInactive):
        CouponService.validate_coupon("SAVE10", seller.id, now=NOW)


def test_usage_limit_checked_before_expiry(seller, make_coupon):
    make_coupon(usage_limit=2, used_count=2, expires_at=NOW - timedelta(days=1))

    with pytest.raises(CouponUsageLimitReached):
        CouponService.validate_coupon("SAVE10", seller.id, now=NOW)


def test_expired(seller, make_coupon):
    make_coupon(expires_at=NOW - timedelta(seconds=1))

    with pytest.raises(CouponExpired):
        CouponService.validate_coupon("SAVE10", seller.id, now=NOW)


def test_zero_usage_limit_is_unlimited(seller, make_coupon):
    make_coupon(usage_limit=0, used_count=40)

    assert CouponService.validate_coupon("SAVE10", seller.id, now=NOW)


def test_increment_usage(seller, make_coupon):
    coupon = make_coupon(usage_limit=1, used_count=0)

    assert CouponService.increment_usage(coupon.id) is True
    db.session.refresh(coupon)
    assert coupon.used_count == 1
    with pytest.raises(CouponUsageLimitReached):
        CouponService.validate_coupon("SAVE10", seller.id, now=NOW)


def test_discount_amounts(make_coupon):
    percentage = make_coupon(code="PCT", discount_value=15)
    fixed = make_coupon(code="FIX", discount_type=const.DISCOUNT_FIXED, discount_value=30)

    assert percentage.discount_for(19.99) == 3.0
    assert fixed.discount_for(50) == 30
    assert fixed.discount_for(20) == 20


def test_validate_endpoint_with_seller_id(client, seller, make_coupon):
    make_coupon()

    response = client.post(
        "/api/coupons/validate", json={"code": "save10", "seller_id": seller.id, "subtotal": 40}
    )

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["code"] == "SAVE10"
    assert data["discount_amount"] == 4.0


def test_validate_endpoint_uses_seller_token(client, seller_headers, make_coupon):
    make_coupon()

    response = client.post(
        "/api/coupons/validate", json={"code": "SAVE10"}, headers=seller_headers
    )
    assert response.status_code == 200


def test_validate_endpoint_errors(client, seller, make_coupon):
    make_coupon(is_active=False)

    response = client.post("/api/coupons/validate", json={"code": "NOPE", "seller_id": seller.id})
    assert response.status_code == 404
    assert response.get_json()["error"] == "Coupon not found"

    response = client.post("/api/coupons/validate", json={"code": "SAVE10", "seller_id": seller.id})
    assert response.status_code == 400
    assert response.get_json()["error"] == "Coupon is inactive"

    response = client.post("/api/coupons/validate", json={"code": "SAVE10"})
    assert response.status_code == 400


def test_coupon_crud(client, seller_headers):
    response = client.post(
        "/api/coupons",
        json={
            "code": "launch",
            "discount_type": "fixed",
            "discount_value": 5,
            "usage_limit": 100,
            "expires_at": "2030-01-01T00:00:00Z",
        },
        headers=seller_headers,
    )
    assert response.status_code == 201
    coupon = response.get_json()["data"]
    assert coupon["code"] == "LAUNCH"
    assert coupon["expires_at"] == "2030-01-01T00:00:00Z"

    duplicate = client.post(
        "/api/coupons",
        json={"code": "LAUNCH", "discount_type": "fixed", "discount_value": 5},
        headers=seller_headers,
    )
    assert duplicate.status_code == 400

    response = client.patch(
        f"/api/coupons/{coupon['id']}", json={"is_active": False}, headers=seller_headers
    )
    assert response.status_code == 200
    assert response.get_json()["data"]["is_active"] is False

    listing = client.get("/api/coupons", headers=seller_headers).get_json()["data"]
    assert [item["code"] for item in listing] == ["LAUNCH"]

    assert client.delete(f"/api/coupons/{coupon['id']}", headers=seller_headers).status_code == 200
    assert client.get(f"/api/coupons/{coupon['id']}", headers=seller_headers).status_code == 404


def test_coupon_create_rejects_percentage_over_100(client, seller_headers):
    response = client.post(
        "/api/coupons",
        json={"code": "TOOMUCH", "discount_type": "percentage", "discount_value": 150},
        headers=seller_headers,
    )
    assert response.status_code == 400


def test_coupons_require_seller_token(client):
    assert client.get("/api/coupons").status_code == 401
