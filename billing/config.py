"""
Billing configuration - single source of truth for platform fee constants.

All monetary amounts are in cents (integer) unless otherwise noted.
The live commission rate is stored in SystemConfig (see services/config_service.py);
the values here are only the fallback and the storage key.
"""

# Platform commission taken from each checkout (0.085 = 8.5%) when no SystemConfig row exists.
# settings.DEFAULT_COMMISSION_RATE overrides it per environment.
DEFAULT_COMMISSION_RATE = 0.085

# SystemConfig key holding the current commission rate as a decimal string
COMMISSION_RATE_KEY = "COMMISSION_RATE"

# Stripe Connect account ids always carry this prefix
CONNECTED_ACCOUNT_PREFIX = "acct_"

# Checkout (one seat per session)
CHECKOUT_PAYMENT_METHOD_TYPES = ["card"]
