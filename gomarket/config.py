"""
Configuration - environment-driven settings for the cart.

All values are read once at import time.
"""

import os

# Storage key holding the whole serialized cart
CART_STORAGE_KEY = os.environ.get("CART_STORAGE_KEY", "@GoMarketplace:products")

# Write attempts per persist (1 = no retry)
CART_PERSIST_ATTEMPTS = max(1, int(os.environ.get("CART_PERSIST_ATTEMPTS", "1")))
CART_PERSIST_RETRY_MAX_WAIT = float(os.environ.get("CART_PERSIST_RETRY_MAX_WAIT", "10"))

# Redis expiry for the cart blob; 0 keeps it forever
CART_TTL_SECONDS = int(os.environ.get("CART_TTL_SECONDS", "0"))
