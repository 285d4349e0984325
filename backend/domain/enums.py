"""
Domain enums (minimal set used for clarity in services).
"""

from enum import Enum


class OrderType(str, Enum):
    CREDIT = "CREDIT"
    PRODUCT = "PRODUCT"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"  # set by the admin review process, never here
    REJECTED = "REJECTED"
