"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

CODE_LENGTH = 10
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"

CHECKIN_OPEN_BEFORE_MINUTES = 30
CHECKIN_CLOSE_AFTER_MINUTES = 30
CHECKOUT_OPEN_BEFORE_MINUTES = 60
CHECKOUT_CLOSE_AFTER_MINUTES = 60

# Earlier convention: codes expire at a fixed offset, with no opening bound.
FIXED_CHECKIN_EXPIRY_MINUTES = 90
FIXED_CHECKOUT_EXPIRY_MINUTES = 10

DEFAULT_MIN_PASSWORD_LENGTH = 6
