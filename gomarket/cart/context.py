"""
Cart access for UI collaborators.

``CartAPI`` is the only handle consumers get. Build it directly from a store,
or open a ``cart_provider`` and fetch it with ``use_cart()`` anywhere inside
that block:

    async with cart_provider(RedisStorage()) as cart:
        await cart.add_to_cart({"id": "p1", "title": "Shoe", "image_url": "u", "price": 10})
        ...
        use_cart().products

Using the handle outside its provider raises CartScopeError.
"""
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any, AsyncIterator, Mapping, Optional, Union

from gomarket.config import CART_STORAGE_KEY
from gomarket.errors import CartScopeError, ERROR_OUTSIDE_PROVIDER, ERROR_PROVIDER_CLOSED
from gomarket.logging import get_logger
from .models import ProductInput
from .service import CartStore, Products
from .storage import CartWriter, PersistenceAdapter

logger = get_logger(__name__)

# CartAPI bound by the innermost open cart_provider
_current_cart: ContextVar[Optional["CartAPI"]] = ContextVar("_current_cart", default=None)


class CartAPI:
    """Read access to the cart items plus the three cart mutations."""

    def __init__(self, store: CartStore):
        self._store: Optional[CartStore] = store

    @property
    def store(self) -> CartStore:
        if self._store is None:
            raise CartScopeError(ERROR_PROVIDER_CLOSED)
        return self._store

    @property
    def products(self) -> Products:
        return self.store.products

    async def add_to_cart(self, item: Union[ProductInput, Mapping[str, Any]]) -> Products:
        return await self.store.add_to_cart(item)

    async def increment(self, product_id: str) -> Products:
        return await self.store.increment(product_id)

    async def decrement(self, product_id: str) -> Products:
        return await self.store.decrement(product_id)

    def detach(self) -> None:
        """Invalidate this handle; every later access raises CartScopeError."""
        self._store = None


@asynccontextmanager
async def cart_provider(
    storage: PersistenceAdapter,
    key: str = CART_STORAGE_KEY,
    writer: Optional[CartWriter] = None,
) -> AsyncIterator[CartAPI]:
    """
    Own a CartStore for the duration of the block.

    The store starts loading in the background on entry (it is not awaited).
    On exit the pending load is cancelled, queued writes settle and the
    CartAPI handed out is detached.
    """
    store = CartStore(storage, key=key, writer=writer)
    api = CartAPI(store)
    token = _current_cart.set(api)
    store.start_loading()
    try:
        yield api
    finally:
        try:
            await store.close()
        finally:
            api.detach()
            _current_cart.reset(token)


def use_cart() -> CartAPI:
    """Return the CartAPI of the enclosing cart_provider."""
    api = _current_cart.get()
    if api is None:
        raise CartScopeError(ERROR_OUTSIDE_PROVIDER)
    return api
