from datetime import datetime

import const
from app.errors.exceptions import BadRequest, NotFound
from app.extensions import db
from app.lib.logger import logger
from app.lib.string import generate_confirmation_token, generate_order_number
from app.models.checkout_page import CheckoutPage
from app.models.customer import Customer
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.product import Product
from app.models.user import User
from app.services.coupon import CouponService

HANDLED_WEBHOOK_STATUSES = (
    const.PAYMENT_COMPLETED,
    const.PAYMENT_FAILED,
    const.PAYMENT_CANCELLED,
    const.PAYMENT_REFUNDED,
)


class OrderService:
    """Checkout submission, payment outcome handling and the public confirmation view."""

    def __init__(
        self,
        payment_gateway,
        email_service,
        download_service,
        cart_abandonment,
        frontend_url="",
        api_url="",
    ):
        self.payment_gateway = payment_gateway
        self.email_service = email_service
        self.download_service = download_service
        self.cart_abandonment = cart_abandonment
        self.frontend_url = (frontend_url or "").rstrip("/")
        self.api_url = (api_url or "").rstrip("/")

    # ---------------------------------------------------------------- queries

    @staticmethod
    def find_order(id, user_id=None):
        order = db.session.get(Order, id)
        if order and user_id is not None and order.user_id != user_id:
            return None
        return order

    @staticmethod
    def find_by_confirmation_token(token):
        return Order.query.filter(Order.confirmation_token == token).first()

    @staticmethod
    def get_orders(user_id, status=None):
        query = Order.query.filter(Order.user_id == user_id)
        if status:
            query = query.filter(Order.status == status)
        return query.order_by(Order.created_at.desc(), Order.id.desc()).all()

    @staticmethod
    def get_orders_by_customer(customer_id):
        return (
            Order.query.filter(Order.customer_id == customer_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    # --------------------------------------------------------------- checkout

    @staticmethod
    def get_or_create_customer(seller_id, email, first_name=None, last_name=None):
        email = email.strip().lower()
        customer = Customer.query.filter_by(user_id=seller_id, email=email).first()
        if customer:
            return customer
        return Customer(
            user_id=seller_id, email=email, first_name=first_name, last_name=last_name
        ).save()

    def create_checkout_order(
        self,
        seller_id,
        email,
        items,
        first_name=None,
        last_name=None,
        coupon_code=None,
        cart_id=None,
        checkout_page_id=None,
        ip_address=None,
        user_agent=None,
        now=None,
    ):
        now = now or datetime.utcnow()

        if not db.session.get(User, seller_id):
            raise NotFound(message="Seller not found")
        if not items:
            raise BadRequest(message="Cart is empty")
        if checkout_page_id is not None:
            page = db.session.get(CheckoutPage, checkout_page_id)
            if not page or page.user_id != seller_id:
                raise NotFound(message="Checkout page not found")

        lines = []
        for item in items:
            quantity = int(item.get("quantity") or 1)
            if quantity < 1:
                raise BadRequest(message="Quantity must be at least 1")
            product = db.session.get(Product, item.get("product_id"))
            if not product or product.user_id != seller_id or not product.is_active:
                raise NotFound(message="Product not found")
            lines.append((product, quantity))

        subtotal = round(sum(product.price * quantity for product, quantity in lines), 2)

        coupon = None
        discount = 0
        if coupon_code:
            coupon = CouponService.validate_coupon(coupon_code, seller_id, now=now)
            discount = coupon.discount_for(subtotal)
        total = round(max(subtotal - discount, 0), 2)

        customer = self.get_or_create_customer(seller_id, email, first_name, last_name)
        order = Order(
            user_id=seller_id,
            customer_id=customer.id,
            checkout_page_id=checkout_page_id,
            order_number=generate_order_number(now),
            confirmation_token=generate_confirmation_token(),
            status=const.ORDER_PENDING,
            subtotal=subtotal,
            discount=discount,
            total=total,
            coupon_id=coupon.id if coupon else None,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        db.session.add(order)
        db.session.flush()
        for product, quantity in lines:
            db.session.add(
                OrderItem(
                    order_id=order.id,
                    product_id=product.id,
                    product_name=product.name,
                    quantity=quantity,
                    price=product.price,
                )
            )
        db.session.commit()
        logger.info(
            f"Order {order.order_number} created for seller {seller_id}: "
            f"subtotal={subtotal} discount={discount} total={total}"
        )

        if cart_id:
            self.cart_abandonment.mark_recovered(cart_id, now=now)

        if total == 0:
            self.complete_order(order.id, payment_method="free", now=now)
            return order, {"success": True, "payment_url": None}

        payment = self.payment_gateway.create_charge(
            order,
            customer_email=customer.email,
            customer_name=" ".join(filter(None, [first_name, last_name])),
            redirect_url=self.confirmation_url(order),
            cancel_url=f"{self.frontend_url}/checkout/cancelled",
            webhook_url=f"{self.api_url}/api/webhooks/payment",
        )
        if payment.get("success") and payment.get("invoice_id"):
            order.update(invoice_id=payment["invoice_id"])
        return order, payment

    def confirmation_url(self, order):
        return f"{self.frontend_url}/thank-you/{order.confirmation_token}"

    # ------------------------------------------------------- status changes

    def _transition(self, order_id, from_status, to_status, values=None):
        values = dict(values or {})
        values[Order.status] = to_status
        updated = (
            db.session.query(Order)
            .filter(Order.id == order_id, Order.status == from_status)
            .update(values, synchronize_session=False)
        )
        db.session.commit()
        return updated == 1

    def complete_order(
        self, order_id, transaction_id=None, invoice_id=None, payment_method=None, now=None
    ):
        """pending -> completed. Returns True only for the call that made the change."""
        now = now or datetime.utcnow()
        values = {Order.completed_at: now}
        if transaction_id:
            values[Order.transaction_id] = transaction_id
        if invoice_id:
            values[Order.invoice_id] = invoice_id
        if payment_method:
            values[Order.payment_method] = payment_method

        if not self._transition(order_id, const.ORDER_PENDING, const.ORDER_COMPLETED, values):
            return False

        order = db.session.get(Order, order_id)
        db.session.refresh(order)
        if order.coupon_id:
            CouponService.increment_usage(order.coupon_id)
        logger.info(f"Order {order.order_number} completed")

        items = [item.to_dict() for item in order.items]
        if not self.email_service.send_order_confirmation(
            order, items, self.confirmation_url(order)
        ):
            logger.warning(f"Confirmation email for order {order.order_number} not sent")
        return True

    def fail_order(self, order_id):
        changed = self._transition(order_id, const.ORDER_PENDING, const.ORDER_FAILED)
        if changed:
            logger.info(f"Order {order_id} failed")
        return changed

    def refund_order(self, order_id):
        changed = self._transition(order_id, const.ORDER_COMPLETED, const.ORDER_REFUNDED)
        if changed:
            logger.info(f"Order {order_id} refunded")
        return changed

    def handle_payment_webhook(self, payload, now=None):
        status = (payload.get("status") or "").upper()
        metadata = payload.get("metadata") or {}
        order_id = metadata.get("order_id")
        invoice_id = payload.get("invoice_id")

        order = None
        if order_id:
            order = db.session.get(Order, order_id)
        if not order and invoice_id:
            order = Order.query.filter(Order.invoice_id == invoice_id).first()
        if not order:
            logger.warning(f"Webhook: order not found (order_id={order_id}, invoice={invoice_id})")
            return {"processed": False, "message": "Order not found"}

        if status not in HANDLED_WEBHOOK_STATUSES:
            logger.info(f"Webhook: status {status!r} ignored for order {order.id}")
            return {"processed": False, "message": "Status ignored"}

        if status == const.PAYMENT_COMPLETED:
            changed = self.complete_order(
                order.id,
                transaction_id=payload.get("transaction_id"),
                invoice_id=invoice_id,
                payment_method=payload.get("payment_method"),
                now=now,
            )
        elif status == const.PAYMENT_REFUNDED:
            changed = self.refund_order(order.id)
        else:
            changed = self.fail_order(order.id)

        if not changed:
            logger.info(f"Webhook: order {order.id} already {order.status}, {status} ignored")
        return {"processed": changed, "message": "Webhook processed"}

    # ----------------------------------------------------------- thank you

    def get_confirmation(self, confirmation_token, now=None):
        order = self.find_by_confirmation_token(confirmation_token)
        if not order:
            raise NotFound(message="Order not found")
        customer = order.customer
        if not customer:
            raise NotFound(message="Customer not found")

        items = []
        for item in order.items:
            product = db.session.get(Product, item.product_id)
            files = list(product.files) if product else []
            download_token = None
            if order.status == const.ORDER_COMPLETED and files:
                download_token = self.download_service.generate_token(
                    item.id, customer.id, item.product_id, now=now
                ).token
            items.append(
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "quantity": item.quantity,
                    "price": item.price,
                    "download_token": download_token,
                    "files": [
                        {
                            "id": f.id,
                            "name": f.name,
                            "file_name": f.file_name,
                            "file_size": f.file_size,
                        }
                        for f in files
                    ],
                }
            )

        seller = db.session.get(User, order.user_id)
        return {
            "order": {
                "id": order.id,
                "order_number": order.order_number,
                "total": order.total,
                "status": order.status,
                "created_at": order.to_dict()["created_at"],
            },
            "customer": {
                "email": customer.email,
                "first_name": customer.first_name,
                "last_name": customer.last_name,
            },
            "items": items,
            "seller": {
                "name": seller.name if seller else None,
                "email": seller.email if seller else None,
            },
        }
