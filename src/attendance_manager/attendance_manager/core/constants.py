"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_INVOICE_DUE_DAYS = 14
MIN_PASSWORD_LENGTH = 6

INVOICE_PREFIX = "INV"
PAYMENT_PREFIX = "PAY"
REFERENCE_DIGITS = 4
FALLBACK_SUFFIX_LENGTH = 6

# Month picker: two past months, the current one, three ahead.
MONTH_OPTIONS_BEFORE = 2
MONTH_OPTIONS_AFTER = 3
