from datetime import datetime, timedelta

import const
from app.extensions import db
from app.models.abandoned_cart import AbandonedCart
from app.services.cart_abandonment import select_due_step, sort_steps

T0 = datetime(2024, 6, 1, 8, 0, 0)
STEPS = sort_steps(const.DEFAULT_ABANDONMENT_SEQUENCE["emails"])


def minutes(value):
    return T0 + timedelta(minutes=value)


def reload_cart(cart_key):
    db.session.expire_all()
    return AbandonedCart.query.filter_by(cart_key=cart_key).one()


def test_sort_steps_orders_by_delay():
    steps = [{"delay_minutes": 300}, {"delay_minutes": 5}, {"delay_minutes": 60}]
    assert [step["delay_minutes"] for step in sort_steps(steps)] == [5, 60, 300]


def test_select_due_step_thresholds():
    assert select_due_step(STEPS, 0, 59, now=minutes(59)) is None
    assert select_due_step(STEPS, 0, 60, now=minutes(60)) == 0
    assert select_due_step(STEPS, 1, 61, now=minutes(61)) is None
    assert select_due_step(STEPS, 1, 24 * 60, now=minutes(24 * 60)) == 1
    assert select_due_step(STEPS, 3, 10 * 24 * 60, now=minutes(10 * 24 * 60)) is None


def test_select_due_step_picks_lowest_unsent_step():
    # a cart first seen after three days still starts with the first step
    assert select_due_step(STEPS, 0, 80 * 60, now=minutes(80 * 60)) == 0


def test_select_due_step_respects_min_gap():
    last = minutes(24 * 60 - 30)
    assert select_due_step(STEPS, 1, 24 * 60, last_email_sent_at=last, now=minutes(24 * 60)) is None
    assert (
        select_due_step(STEPS, 1, 24 * 60 + 30, last_email_sent_at=last, now=minutes(24 * 60 + 30))
        == 1
    )


def test_track_cart_creates_entry(cart_abandonment, seller):
    cart = cart_abandonment.track_cart(
        "cart-1", now=T0, user_id=seller.id, email="a@example.com", product_name="Course"
    )

    assert cart.emails_sent == 0
    assert cart.recovered is False
    assert cart.created_at == T0
    assert cart.to_dict()["id"] == "cart-1"


def test_reminder_sent_once_between_steps(cart_abandonment, email_service, seller):
    cart_abandonment.track_cart("cart-1", now=T0, user_id=seller.id, email="a@example.com")

    summary = cart_abandonment.process_abandoned_carts(now=minutes(61))
    assert summary["sent"] == 1
    assert email_service.cart_emails("cart-1")[0]["subject"] == STEPS[0]["subject"]

    tick = 66
    while tick < 24 * 60:
        cart_abandonment.process_abandoned_carts(now=minutes(tick))
        tick += 5

    assert len(email_service.cart_emails("cart-1")) == 1
    cart = reload_cart("cart-1")
    assert cart.emails_sent == 1
    assert cart.last_email_sent_at == minutes(61)


def test_full_sequence(cart_abandonment, email_service, seller):
    cart_abandonment.track_cart("cart-1", now=T0, user_id=seller.id, email="a@example.com")

    for at in (61, 24 * 60 + 1, 72 * 60 + 1, 100 * 60):
        cart_abandonment.process_abandoned_carts(now=minutes(at))

    subjects = [mail["subject"] for mail in email_service.cart_emails("cart-1")]
    assert subjects == [step["subject"] for step in STEPS]
    assert reload_cart("cart-1").emails_sent == 3


def test_late_cart_gets_one_email_per_gap(cart_abandonment, email_service, seller):
    cart_abandonment.track_cart("cart-1", now=T0, user_id=seller.id, email="a@example.com")

    cart_abandonment.process_abandoned_carts(now=minutes(80 * 60))
    cart_abandonment.process_abandoned_carts(now=minutes(80 * 60 + 5))
    assert len(email_service.cart_emails("cart-1")) == 1

    cart_abandonment.process_abandoned_carts(now=minutes(81 * 60))
    assert len(email_service.cart_emails("cart-1")) == 2


def test_retracking_keeps_progress(cart_abandonment, email_service, seller):
    cart_abandonment.track_cart("cart-1", now=T0, user_id=seller.id, email="a@example.com")
    cart_abandonment.process_abandoned_carts(now=minutes(61))

    cart_abandonment.track_cart(
        "cart-1", now=minutes(90), email="a@example.com", product_name="Bundle"
    )

    cart = reload_cart("cart-1")
    assert cart.emails_sent == 1
    assert cart.created_at == T0
    assert cart.product_name == "Bundle"


def test_recovered_and_emailless_carts_are_skipped(cart_abandonment, email_service, seller):
    cart_abandonment.track_cart("cart-1", now=T0, user_id=seller.id, email="a@example.com")
    cart_abandonment.track_cart("cart-2", now=T0, user_id=seller.id, email="")
    cart_abandonment.mark_recovered("cart-1", now=minutes(10))

    summary = cart_abandonment.process_abandoned_carts(now=minutes(61))

    assert summary["scanned"] == 0
    assert email_service.sent == []


def test_retracking_clears_recovered(cart_abandonment, email_service, seller):
    cart_abandonment.track_cart("cart-1", now=T0, user_id=seller.id, email="a@example.com")
    cart_abandonment.mark_recovered("cart-1", now=minutes(10))
    cart_abandonment.track_cart("cart-1", now=minutes(20), email="a@example.com")

    cart_abandonment.process_abandoned_carts(now=minutes(61))
    assert len(email_service.cart_emails("cart-1")) == 1


def test_failed_send_is_not_retried(cart_abandonment, email_service, seller):
    cart_abandonment.track_cart("cart-1", now=T0, user_id=seller.id, email="a@example.com")
    email_service.fail = True

    summary = cart_abandonment.process_abandoned_carts(now=minutes(61))
    assert summary["failed"] == 1
    assert reload_cart("cart-1").emails_sent == 1

    email_service.fail = False
    cart_abandonment.process_abandoned_carts(now=minutes(200))
    assert len(email_service.cart_emails("cart-1")) == 1


def test_overlapping_scan_is_skipped(cart_abandonment, email_service, seller):
    cart_abandonment.track_cart("cart-1", now=T0, user_id=seller.id, email="a@example.com")

    cart_abandonment._lock.acquire()
    try:
        summary = cart_abandonment.process_abandoned_carts(now=minutes(61))
    finally:
        cart_abandonment._lock.release()

    assert summary["skipped"] is True
    assert email_service.sent == []


def test_scan_walks_all_batches(app, email_service, seller):
    from app.services.cart_abandonment import CartAbandonmentService

    service = CartAbandonmentService(email_service, batch_size=2)
    for index in range(5):
        service.track_cart(f"cart-{index}", now=T0, user_id=seller.id, email=f"{index}@example.com")

    summary = service.process_abandoned_carts(now=minutes(61))

    assert summary["scanned"] == 5
    assert summary["sent"] == 5


def test_seller_sequence_overrides_default(cart_abandonment, email_service, make_seller):
    custom = make_seller(email="custom@example.com")
    plain = make_seller(email="plain@example.com")
    cart_abandonment.update_sequence(
        custom.id,
        "Fast",
        [
            {"delay_minutes": 120, "subject": "Second"},
            {"delay_minutes": 10, "subject": "First"},
        ],
    )
    cart_abandonment.track_cart("custom-cart", now=T0, user_id=custom.id, email="c@example.com")
    cart_abandonment.track_cart("plain-cart", now=T0, user_id=plain.id, email="p@example.com")

    cart_abandonment.process_abandoned_carts(now=minutes(15))

    assert [mail["subject"] for mail in email_service.cart_emails("custom-cart")] == ["First"]
    assert email_service.cart_emails("plain-cart") == []


def test_inactive_seller_sequence_sends_nothing(cart_abandonment, email_service, seller):
    cart_abandonment.update_sequence(
        seller.id, "Off", [{"delay_minutes": 10, "subject": "Hi"}], is_active=False
    )
    cart_abandonment.track_cart("cart-1", now=T0, user_id=seller.id, email="a@example.com")

    cart_abandonment.process_abandoned_carts(now=minutes(120))
    assert email_service.sent == []


def test_stats(cart_abandonment, seller, make_seller):
    other = make_seller(email="other@example.com")
    cart_abandonment.track_cart("a", now=T0, user_id=seller.id, email="a@example.com")
    cart_abandonment.track_cart("b", now=T0, user_id=seller.id, email="b@example.com")
    cart_abandonment.track_cart("c", now=T0, user_id=seller.id, email="c@example.com")
    cart_abandonment.track_cart("d", now=T0, user_id=other.id, email="d@example.com")
    cart_abandonment.mark_recovered("a", now=minutes(5))
    cart_abandonment.process_abandoned_carts(now=minutes(61))

    stats = cart_abandonment.get_stats(user_id=seller.id)

    assert stats == {
        "total_carts": 3,
        "recovered_carts": 1,
        "pending_carts": 2,
        "emails_sent": 2,
        "recovery_rate": 33.3,
    }
    assert [cart.cart_key for cart in cart_abandonment.get_abandoned_carts(seller.id)] == [
        "c",
        "b",
    ]
