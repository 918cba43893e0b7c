import hmac
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError

import const
from app.errors.exceptions import (
    BadRequest,
    DownloadExpired,
    DownloadLimitReached,
    DownloadTokenNotFound,
    Forbidden,
    InternalError,
    NotFound,
)
from app.extensions import db
from app.lib.logger import logger
from app.lib.string import generate_download_token
from app.models.download_token import DownloadToken
from app.models.order_item import OrderItem
from app.models.product import Product


def _same_token(given, expected):
    if not expected:
        return False
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


class DownloadService:
    """Issues and redeems download tokens for purchased files.

    A token behaves like a token bucket sized by the product's download limit
    that never refills. Files are served through short-lived signed urls from
    `storage`, which must expose ``generate_presigned_url(key, expires_in, file_name)``.
    """

    def __init__(self, storage, url_expires_in=const.DOWNLOAD_URL_EXPIRES_IN):
        self.storage = storage
        self.url_expires_in = url_expires_in

    @staticmethod
    def find_by_token(token):
        return DownloadToken.query.filter(DownloadToken.token == token).first()

    @staticmethod
    def find_by_order_item(order_item_id):
        return DownloadToken.query.filter(
            DownloadToken.order_item_id == order_item_id
        ).first()

    @staticmethod
    def get_tokens_by_customer(customer_id):
        return (
            DownloadToken.query.filter(DownloadToken.customer_id == customer_id)
            .order_by(DownloadToken.created_at.desc(), DownloadToken.id.desc())
            .all()
        )

    def generate_token(
        self, order_item_id, customer_id=None, product_id=None, confirmation_token=None, now=None
    ):
        """Return the token for an order item, creating it on first request.

        A `confirmation_token`, when given, must be the one issued with the
        item's order.
        """
        now = now or datetime.utcnow()

        order_item = db.session.get(OrderItem, order_item_id)
        if not order_item:
            raise NotFound(message="Order item not found")

        order = order_item.order
        if confirmation_token is not None and not _same_token(
            confirmation_token, order.confirmation_token if order else None
        ):
            raise Forbidden(message="Invalid confirmation token")
        if not order or order.status != const.ORDER_COMPLETED:
            raise Forbidden(message="Order not completed")

        customer_id = customer_id or order.customer_id
        product_id = product_id or order_item.product_id
        if customer_id != order.customer_id:
            raise Forbidden(message="Order item does not belong to this customer")
        if product_id != order_item.product_id:
            raise BadRequest(message="Order item does not match product")

        existing = self.find_by_order_item(order_item.id)
        if existing:
            return existing

        product = db.session.get(Product, product_id)
        if not product:
            raise NotFound(message="Product not found")
        if not product.files:
            raise NotFound(message="No files available for download")

        download_token = DownloadToken(
            order_item_id=order_item.id,
            customer_id=customer_id,
            product_id=product.id,
            token=generate_download_token(),
            downloads_remaining=product.download_limit or None,
            expires_at=now
            + timedelta(days=product.download_expiry or const.DEFAULT_DOWNLOAD_EXPIRY_DAYS),
        )
        try:
            download_token.save()
        except IntegrityError:
            # another request created the row for this order item first
            db.session.rollback()
            existing = self.find_by_order_item(order_item.id)
            if existing:
                return existing
            raise

        logger.info(
            f"Download token issued for order item {order_item.id} "
            f"(remaining={download_token.downloads_remaining}, expires={download_token.expires_at})"
        )
        return download_token

    @staticmethod
    def resolve_file(product, file_id=None):
        files = list(product.files)
        if not files:
            raise NotFound(message="No files available for download")

        if file_id is None or file_id == "":
            if len(files) == 1:
                return files[0]
            raise BadRequest(message="fileId is required for products with multiple files")

        for product_file in files:
            if str(product_file.id) == str(file_id):
                return product_file
        raise NotFound(message="Requested file not found")

    @staticmethod
    def check_redeemable(download_token, now):
        if not download_token:
            raise DownloadTokenNotFound()
        if now >= download_token.expires_at:
            raise DownloadExpired()
        if (
            download_token.downloads_remaining is not None
            and download_token.downloads_remaining <= 0
        ):
            raise DownloadLimitReached()

    @staticmethod
    def consume(download_token, ip_address=None, now=None):
        """Spend one download with a single conditional update.

        Returns False when a limited token had nothing left at write time.
        """
        now = now or datetime.utcnow()
        values = {
            DownloadToken.last_download_at: now,
            DownloadToken.ip_address: ip_address,
        }
        query = db.session.query(DownloadToken).filter(
            DownloadToken.id == download_token.id
        )
        if download_token.downloads_remaining is not None:
            values[DownloadToken.downloads_remaining] = (
                DownloadToken.downloads_remaining - 1
            )
            query = query.filter(DownloadToken.downloads_remaining > 0)

        updated = query.update(values, synchronize_session=False)
        db.session.commit()
        db.session.refresh(download_token)
        return updated == 1

    def redeem(self, token, file_id=None, ip_address=None, now=None):
        """Validate the token, sign the file url and spend one download."""
        now = now or datetime.utcnow()

        download_token = self.find_by_token(token)
        self.check_redeemable(download_token, now)

        product = db.session.get(Product, download_token.product_id)
        if not product:
            raise NotFound(message="Product not found")
        target_file = self.resolve_file(product, file_id)

        signed_url = self.storage.generate_presigned_url(
            target_file.file_url,
            expires_in=self.url_expires_in,
            file_name=target_file.file_name,
        )
        if not signed_url:
            raise InternalError(message="Failed to generate download URL")

        if not self.consume(download_token, ip_address=ip_address, now=now):
            logger.warning(f"Download token {download_token.id} ran out during redemption")
            raise DownloadLimitReached()

        logger.info(
            f"Download token {download_token.id} redeemed for file {target_file.id} "
            f"(remaining={download_token.downloads_remaining})"
        )
        return {
            "url": signed_url,
            "file": target_file,
            "download_token": download_token,
        }
