"""Invoice status rules.

The stored status is a cache of what the ledger says. These functions decide
the new cached value after a ledger change, and what a reader should show
when the cache may be stale.
"""

from __future__ import annotations

from ..core.enums import InvoiceStatus


def status_after_payment(prior: InvoiceStatus, *, paid_cents: int, total_cents: int) -> InvoiceStatus:
    if paid_cents >= total_cents:
        return InvoiceStatus.PAID
    if prior == InvoiceStatus.DRAFT:
        return InvoiceStatus.SENT
    return prior


def status_after_undo(prior: InvoiceStatus, *, paid_cents: int, total_cents: int) -> InvoiceStatus:
    if paid_cents <= 0:
        return InvoiceStatus.SENT if prior == InvoiceStatus.PAID else prior
    if paid_cents >= total_cents:
        return InvoiceStatus.PAID
    return InvoiceStatus.SENT


def effective_status(stored: InvoiceStatus, *, paid_cents: int, total_cents: int) -> InvoiceStatus:
    """Status as implied by the ledger right now.

    Cancelled invoices stay cancelled. A stored ``paid`` that the ledger no
    longer covers reads as ``sent``; a ledger that covers the total reads as
    ``paid`` whatever was stored.
    """
    if stored == InvoiceStatus.CANCELLED:
        return stored
    if paid_cents > 0 and paid_cents >= total_cents:
        return InvoiceStatus.PAID
    if stored == InvoiceStatus.PAID:
        return InvoiceStatus.SENT
    return stored
