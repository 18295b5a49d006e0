"""Application-wide constants and configuration values.

Centralizes magic numbers and endpoint paths to avoid duplication
and make changes easier.
"""

# ============== REMOTE BACKEND ==============
DEFAULT_API_BASE_URL = "https://fooddelight-back-end.onrender.com"
DEFAULT_API_TIMEOUT_SECONDS = 30.0

# Cart Service paths
CART_GET_PATH = "/cart/get_cart_items"
CART_ADD_PATH = "/cart/add_item"
CART_DELETE_PATH = "/cart/delete_cart_item/{name}"
CART_UPDATE_QUANTITY_PATH = "/cart/update_cart_quantity"
CART_CLEAR_PATH = "/cart/clear_cart"

# Payment gateway paths
PAYMENT_KEY_PATH = "/razorpay/getkey"
PAYMENT_ORDER_PATH = "/razorpay/payment/process"

# ============== CHECKOUT ==============
DEFAULT_CURRENCY = "INR"
DEFAULT_MERCHANT_NAME = "FoodDelights"
DEFAULT_PAYMENT_DESCRIPTION = "Razorpay Payment"
DEFAULT_THEME_COLOR = "#5ced73"
DEFAULT_WIDGET_TIMEOUT_SECONDS = 15 * 60.0

# ============== CART ==============
MIN_QUANTITY = 1

# ============== PRICING ==============
MIN_CATEGORY_DISCOUNT = 5  # percent
MAX_CATEGORY_DISCOUNT = 34  # percent, inclusive

# ============== SUCCESS OVERLAY ==============
SUCCESS_COUNTDOWN_SECONDS = 10
SUCCESS_TICK_SECONDS = 1.0

CONFETTI_DURATION_SECONDS = 10.0
CONFETTI_INTERVAL_SECONDS = 0.25
CONFETTI_INITIAL_PARTICLES = 50
CONFETTI_START_VELOCITY = 30
CONFETTI_SPREAD = 360
CONFETTI_TICKS = 60
CONFETTI_Z_INDEX = 1060
CONFETTI_LEFT_RANGE = (0.1, 0.3)
CONFETTI_RIGHT_RANGE = (0.7, 0.9)

# ============== TOASTS ==============
TOAST_AUTO_CLOSE_MS = 3000
