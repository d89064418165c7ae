"""Closed enumerations shared by schemas, views and display helpers."""

import enum


class Resource(str, enum.Enum):
    BUSINESS = "business"
    CATEGORY = "category"
    PRODUCT = "product"
    CUSTOMER = "customer"
    ORDER = "order"
    PAYMENT = "payment"

    @property
    def path_segment(self) -> str:
        # The API spells the customer resource "costumer"
        if self is Resource.CUSTOMER:
            return "costumer"
        return self.value


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, enum.Enum):
    CREDIT_CARD = "CREDIT_CARD"
    PAYPAL = "PAYPAL"
    BANK_TRANSFER = "BANK_TRANSFER"
    CASH_ON_DELIVERY = "CASH_ON_DELIVERY"


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"
