"""
Cart Errors

Centralized error messages and the exceptions raised by the cart core.
"""

# Scope errors
ERROR_OUTSIDE_PROVIDER = "use_cart must be used within a cart_provider"
ERROR_PROVIDER_CLOSED = "CartAPI used after its cart_provider exited"

# Storage errors
ERROR_PERSIST_FAILED = "Failed to persist cart"
ERROR_INVALID_CART_DATA = "Stored cart data is not a valid cart"


class CartError(Exception):
    """Base class for cart errors."""


class CartScopeError(CartError):
    """Cart API accessed outside the scope that owns the store."""


class CartPersistenceError(CartError):
    """A write to cart storage failed."""

    def __init__(self, message: str = ERROR_PERSIST_FAILED, failures: int = 1):
        super().__init__(message)
        self.failures = failures


class CartDecodeError(CartError, ValueError):
    """Stored text could not be decoded into cart items."""
