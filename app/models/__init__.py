from app.models.user import User
from app.models.customer import Customer
from app.models.product import Product
from app.models.product_file import ProductFile
from app.models.checkout_page import CheckoutPage
from app.models.coupon import Coupon
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.download_token import DownloadToken
from app.models.abandoned_cart import AbandonedCart
from app.models.abandonment_sequence import AbandonmentSequence
