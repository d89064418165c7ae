"""Derived display values. Nothing here is ever sent back to the API."""

from typing import Optional, assert_never

from libs.common.currency import format_price
from libs.common.datetime_utils import format_date, format_datetime
from services.backoffice_service.schemas.enums import (
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)

__all__ = [
    "format_date",
    "format_datetime",
    "format_price",
    "order_status_color",
    "order_status_label",
    "payment_method_icon",
    "payment_method_label",
    "payment_status_color",
    "payment_status_label",
    "truncate_text",
]

NEUTRAL_COLOR = "gray"


def order_status_color(status: Optional[OrderStatus]) -> str:
    if status is None:
        return NEUTRAL_COLOR
    match status:
        case OrderStatus.PENDING:
            return "yellow"
        case OrderStatus.PROCESSING:
            return "blue"
        case OrderStatus.SHIPPED:
            return "purple"
        case OrderStatus.DELIVERED:
            return "green"
        case OrderStatus.CANCELLED:
            return "red"
        case _:
            assert_never(status)


def order_status_label(status: Optional[OrderStatus]) -> str:
    if status is None:
        return "Unknown"
    match status:
        case OrderStatus.PENDING:
            return "Pending"
        case OrderStatus.PROCESSING:
            return "Processing"
        case OrderStatus.SHIPPED:
            return "Shipped"
        case OrderStatus.DELIVERED:
            return "Delivered"
        case OrderStatus.CANCELLED:
            return "Cancelled"
        case _:
            assert_never(status)


def payment_status_color(status: Optional[PaymentStatus]) -> str:
    if status is None:
        return NEUTRAL_COLOR
    match status:
        case PaymentStatus.PENDING:
            return "yellow"
        case PaymentStatus.COMPLETED:
            return "green"
        case PaymentStatus.FAILED:
            return "red"
        case PaymentStatus.REFUNDED:
            return "gray"
        case _:
            assert_never(status)


def payment_status_label(status: Optional[PaymentStatus]) -> str:
    if status is None:
        return "Unknown"
    match status:
        case PaymentStatus.PENDING:
            return "Pending"
        case PaymentStatus.COMPLETED:
            return "Completed"
        case PaymentStatus.FAILED:
            return "Failed"
        case PaymentStatus.REFUNDED:
            return "Refunded"
        case _:
            assert_never(status)


def payment_method_label(method: Optional[PaymentMethod]) -> str:
    if method is None:
        return "Unknown"
    match method:
        case PaymentMethod.CREDIT_CARD:
            return "Credit Card"
        case PaymentMethod.PAYPAL:
            return "PayPal"
        case PaymentMethod.BANK_TRANSFER:
            return "Bank Transfer"
        case PaymentMethod.CASH_ON_DELIVERY:
            return "Cash on Delivery"
        case _:
            assert_never(method)


def payment_method_icon(method: Optional[PaymentMethod]) -> str:
    if method is None:
        return "💰"
    match method:
        case PaymentMethod.CREDIT_CARD:
            return "💳"
        case PaymentMethod.PAYPAL:
            return "🔵"
        case PaymentMethod.BANK_TRANSFER:
            return "🏦"
        case PaymentMethod.CASH_ON_DELIVERY:
            return "💵"
        case _:
            assert_never(method)


def truncate_text(text: Optional[str], max_length: int = 100) -> Optional[str]:
    if not text or len(text) <= max_length:
        return text
    return text[:max_length] + "..."
