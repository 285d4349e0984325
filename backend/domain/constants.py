"""
Domain constants used across services/routers.
"""

# Admin notification templates
CREDIT_REQUEST_NOTICE = "New credit purchase request: {amount} MMK from {username}"
PRODUCT_ORDER_NOTICE = "New product order: {product_name} from {username}"

# Client-facing confirmations
CREDIT_REQUEST_SUBMITTED = "Credit purchase request submitted successfully"
PRODUCT_ORDER_PLACED = "Product order placed successfully. {credits} credits deducted."
PRODUCT_DELETED = "Product deleted successfully"
