from __future__ import annotations

from enum import Enum


class PaymentStatus(str, Enum):
    """Payment tag shown on a student card."""

    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"


class InvoiceStatus(str, Enum):
    """Cached invoice label; the ledger sum is the source of truth."""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    CARD = "card"
    CHEQUE = "cheque"
    OTHER = "other"
