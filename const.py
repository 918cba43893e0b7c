# Pagination Defaults
DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100

ACTIVE = 1
USER = 0

# JWT identity types
TOKEN_TYPE_SELLER = "seller"
TOKEN_TYPE_CUSTOMER = "customer"

# Orders
ORDER_PENDING = "pending"
ORDER_COMPLETED = "completed"
ORDER_FAILED = "failed"
ORDER_REFUNDED = "refunded"
ORDER_STATUSES = [ORDER_PENDING, ORDER_COMPLETED, ORDER_FAILED, ORDER_REFUNDED]

# Payment gateway webhook statuses
PAYMENT_COMPLETED = "COMPLETED"
PAYMENT_FAILED = "FAILED"
PAYMENT_CANCELLED = "CANCELLED"
PAYMENT_REFUNDED = "REFUNDED"
WEBHOOK_SIGNATURE_HEADER = "X-Webhook-Signature"

# Checkout pages
CHECKOUT_MODE_FULL = "full"
CHECKOUT_MODES = [CHECKOUT_MODE_FULL, "embedded", "slide", "express"]
CHECKOUT_TEMPLATE_DEFAULT = "publisher"

# Coupons
DISCOUNT_PERCENTAGE = "percentage"
DISCOUNT_FIXED = "fixed"
DISCOUNT_TYPES = [DISCOUNT_PERCENTAGE, DISCOUNT_FIXED]

# Downloads
DEFAULT_DOWNLOAD_LIMIT = 5
DEFAULT_DOWNLOAD_EXPIRY_DAYS = 30
DOWNLOAD_TOKEN_BYTES = 32
DOWNLOAD_URL_EXPIRES_IN = 60 * 60

# Cart abandonment
CART_ABANDONMENT_INTERVAL_MINUTES = 5
CART_ABANDONMENT_MIN_GAP_MINUTES = 60
CART_ABANDONMENT_BATCH_SIZE = 500
CART_ABANDONMENT_LIST_LIMIT = 50
CART_ABANDONMENT_LOCK_KEY = "digitalcart:cart_abandonment:lock"
CART_ABANDONMENT_LOCK_TIMEOUT = 10 * 60

DEFAULT_ABANDONMENT_SEQUENCE = {
    "name": "Default Sequence",
    "is_active": True,
    "emails": [
        {
            "delay_minutes": 60,
            "subject": "Did you forget something?",
            "include_coupon": False,
        },
        {
            "delay_minutes": 24 * 60,
            "subject": "Your cart is waiting for you",
            "include_coupon": True,
            "coupon_code": "COMEBACK10",
            "discount_percent": 10,
        },
        {
            "delay_minutes": 72 * 60,
            "subject": "Last chance - Special offer inside",
            "include_coupon": True,
            "coupon_code": "FINAL15",
            "discount_percent": 15,
        },
    ],
}
