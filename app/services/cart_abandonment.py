import copy
import threading
from datetime import datetime, timedelta

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError

import const
from app.extensions import db
from app.lib.logger import logger
from app.models.abandoned_cart import AbandonedCart
from app.models.abandonment_sequence import AbandonmentSequence

TRACKED_FIELDS = (
    "user_id",
    "email",
    "customer_name",
    "product_id",
    "product_name",
    "product_image",
    "price",
    "checkout_page_id",
    "checkout_url",
)


def sort_steps(steps):
    return sorted(steps or [], key=lambda step: int(step.get("delay_minutes", 0)))


def select_due_step(
    steps,
    emails_sent,
    cart_age_minutes,
    last_email_sent_at=None,
    now=None,
    min_gap_minutes=const.CART_ABANDONMENT_MIN_GAP_MINUTES,
):
    """Index of the step to send now, or None.

    The first unsent step whose delay has elapsed wins, unless an email went
    out less than `min_gap_minutes` ago.
    """
    now = now or datetime.utcnow()
    if last_email_sent_at and now - last_email_sent_at < timedelta(
        minutes=min_gap_minutes
    ):
        return None

    for index in range(emails_sent or 0, len(steps)):
        if cart_age_minutes >= steps[index]["delay_minutes"]:
            return index
    return None


class CartAbandonmentService:
    """Tracks checkout carts and walks them through a recovery email sequence.

    State lives in `abandoned_carts`, so a restart resumes from the persisted
    counters. A step is claimed with a conditional update before the email is
    sent: a failed delivery is logged and never retried.
    """

    def __init__(
        self,
        email_service,
        batch_size=const.CART_ABANDONMENT_BATCH_SIZE,
        min_gap_minutes=const.CART_ABANDONMENT_MIN_GAP_MINUTES,
    ):
        self.email_service = email_service
        self.batch_size = batch_size
        self.min_gap_minutes = min_gap_minutes
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ carts

    @staticmethod
    def find_cart(cart_key):
        return AbandonedCart.query.filter(AbandonedCart.cart_key == cart_key).first()

    def track_cart(self, cart_key, now=None, **fields):
        """Upsert a cart snapshot; sequence progress and start time survive re-tracking."""
        now = now or datetime.utcnow()
        values = {key: fields.get(key) for key in TRACKED_FIELDS if key in fields}

        cart = self.find_cart(cart_key)
        if not cart:
            cart = AbandonedCart(
                cart_key=cart_key, emails_sent=0, recovered=False, created_at=now, **values
            )
            try:
                cart.save()
                logger.info(f"Cart tracked: {cart_key} for {cart.email}")
                return cart
            except IntegrityError:
                db.session.rollback()
                cart = self.find_cart(cart_key)

        values["recovered"] = False
        values["recovered_at"] = None
        cart.update(**values)
        logger.info(f"Cart re-tracked: {cart_key} for {cart.email}")
        return cart

    def mark_recovered(self, cart_key, now=None):
        cart = self.find_cart(cart_key)
        if not cart:
            return None
        if not cart.recovered:
            cart.update(recovered=True, recovered_at=now or datetime.utcnow())
            logger.info(f"Cart recovered: {cart_key}")
        return cart

    @staticmethod
    def get_abandoned_carts(user_id=None, limit=const.CART_ABANDONMENT_LIST_LIMIT):
        query = AbandonedCart.query.filter(AbandonedCart.recovered.is_(False))
        if user_id is not None:
            query = query.filter(AbandonedCart.user_id == user_id)
        return (
            query.order_by(AbandonedCart.created_at.desc(), AbandonedCart.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_stats(user_id=None):
        query = db.session.query(
            func.count(AbandonedCart.id),
            func.sum(case((AbandonedCart.recovered.is_(True), 1), else_=0)),
            func.sum(AbandonedCart.emails_sent),
        )
        if user_id is not None:
            query = query.filter(AbandonedCart.user_id == user_id)
        total_carts, recovered_carts, emails_sent = query.one()

        total_carts = int(total_carts or 0)
        recovered_carts = int(recovered_carts or 0)
        recovery_rate = (recovered_carts / total_carts) * 100 if total_carts else 0
        return {
            "total_carts": total_carts,
            "recovered_carts": recovered_carts,
            "pending_carts": total_carts - recovered_carts,
            "emails_sent": int(emails_sent or 0),
            "recovery_rate": round(recovery_rate, 1),
        }

    # -------------------------------------------------------------- sequences

    @staticmethod
    def default_sequence():
        sequence = copy.deepcopy(const.DEFAULT_ABANDONMENT_SEQUENCE)
        sequence["emails"] = sort_steps(sequence["emails"])
        sequence["is_default"] = True
        return sequence

    @staticmethod
    def get_sequence(user_id):
        """The seller's own sequence, falling back to the shared default.

        A seller sequence that is switched off is returned as is, so its carts
        receive nothing rather than the default emails.
        """
        if user_id is not None:
            custom = AbandonmentSequence.query.filter(
                AbandonmentSequence.user_id == user_id
            ).first()
            if custom and custom.emails:
                return {
                    "name": custom.name,
                    "emails": sort_steps(custom.emails),
                    "is_active": bool(custom.is_active),
                    "is_default": False,
                }
        return CartAbandonmentService.default_sequence()

    @staticmethod
    def update_sequence(user_id, name, emails, is_active=True):
        """Replace the seller's sequence; only the latest one is kept."""
        emails = sort_steps(emails)
        sequence = AbandonmentSequence.query.filter(
            AbandonmentSequence.user_id == user_id
        ).first()
        if sequence:
            sequence.update(name=name, emails=emails, is_active=is_active)
        else:
            sequence = AbandonmentSequence(
                user_id=user_id, name=name, emails=emails, is_active=is_active
            ).save()
        logger.info(f"Abandonment sequence updated for seller {user_id}")
        return sequence

    # ------------------------------------------------------------- processing

    def process_abandoned_carts(self, now=None):
        """One scan over every pending cart. Overlapping calls are skipped."""
        if not self._lock.acquire(blocking=False):
            logger.warning("Cart abandonment scan already running, tick skipped")
            return {"skipped": True, "scanned": 0, "sent": 0, "failed": 0}

        try:
            return self._process(now or datetime.utcnow())
        finally:
            self._lock.release()

    def _process(self, now):
        summary = {"skipped": False, "scanned": 0, "sent": 0, "failed": 0}
        sequences = {}
        last_id = 0

        while True:
            carts = (
                AbandonedCart.query.filter(
                    AbandonedCart.id > last_id,
                    AbandonedCart.recovered.is_(False),
                    AbandonedCart.email.isnot(None),
                    AbandonedCart.email != "",
                )
                .order_by(AbandonedCart.id.asc())
                .limit(self.batch_size)
                .all()
            )
            if not carts:
                break

            for cart in carts:
                last_id = cart.id
                summary["scanned"] += 1

                if cart.user_id not in sequences:
                    sequences[cart.user_id] = self.get_sequence(cart.user_id)
                sequence = sequences[cart.user_id]
                if not sequence["is_active"]:
                    continue

                try:
                    sent = self._process_cart(cart, sequence["emails"], now)
                except Exception as e:
                    db.session.rollback()
                    logger.error(f"Cart {cart.cart_key} abandonment step failed: {e}")
                    summary["failed"] += 1
                    continue

                if sent is True:
                    summary["sent"] += 1
                elif sent is False:
                    summary["failed"] += 1

            for cart in carts:
                db.session.expunge(cart)

        logger.info(
            f"Cart abandonment scan done: scanned={summary['scanned']} "
            f"sent={summary['sent']} failed={summary['failed']}"
        )
        return summary

    def _process_cart(self, cart, steps, now):
        """Send at most one step for `cart`. None means nothing was due."""
        cart_age_minutes = (now - cart.created_at).total_seconds() / 60
        index = select_due_step(
            steps,
            cart.emails_sent,
            cart_age_minutes,
            last_email_sent_at=cart.last_email_sent_at,
            now=now,
            min_gap_minutes=self.min_gap_minutes,
        )
        if index is None:
            return None

        if not self._claim_step(cart, index, now):
            logger.info(f"Cart {cart.cart_key} step {index} claimed elsewhere")
            return None

        step = steps[index]
        success = self.email_service.send_cart_abandonment(cart, step)
        if success:
            logger.info(
                f"Abandonment email {index + 1}/{len(steps)} sent to {cart.email} "
                f"for cart {cart.cart_key}"
            )
        else:
            logger.error(
                f"Abandonment email {index + 1}/{len(steps)} to {cart.email} "
                f"for cart {cart.cart_key} failed, not retried"
            )

        if index + 1 >= len(steps):
            logger.info(f"Cart {cart.cart_key} completed all abandonment emails")
        return bool(success)

    @staticmethod
    def _claim_step(cart, index, now):
        seen = cart.emails_sent or 0
        updated = (
            db.session.query(AbandonedCart)
            .filter(AbandonedCart.id == cart.id, AbandonedCart.emails_sent == seen)
            .update(
                {
                    AbandonedCart.emails_sent: index + 1,
                    AbandonedCart.last_email_sent_at: now,
                },
                synchronize_session=False,
            )
        )
        db.session.commit()
        return updated == 1
