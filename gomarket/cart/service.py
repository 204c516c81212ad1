"""Cart store: authoritative in-memory cart mirrored into storage."""
import asyncio
import contextlib
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Union

from gomarket.config import CART_STORAGE_KEY
from gomarket.errors import CartDecodeError
from gomarket.logging import get_logger, sanitize_id_for_logging
from .models import CartItem, ProductInput, as_product_input, dump_products, load_products
from .storage import CartWriter, PersistenceAdapter

logger = get_logger(__name__)

Products = tuple[CartItem, ...]
Subscriber = Callable[[Products], Any]


class CartState(str, Enum):
    """Store lifecycle."""
    UNINITIALIZED = "uninitialized"  # load() not finished yet
    READY = "ready"


class CartStore:
    """
    Owns the cart items and keeps storage in sync with them.

    Every mutation is computed from the latest committed list, published to
    subscribers right away and then handed to the writer, which persists the
    full list under one storage key. Mutation callers never wait for storage.

    Features:
    - One-shot hydration from storage (``load``)
    - Repeat adds increment instead of duplicating a line
    - No lower bound on quantity, no removal
    """

    def __init__(
        self,
        storage: PersistenceAdapter,
        key: str = CART_STORAGE_KEY,
        writer: Optional[CartWriter] = None,
    ):
        self._storage = storage
        self.key = key
        self._writer = writer or CartWriter(storage)
        self._products: Products = ()
        self._state = CartState.UNINITIALIZED
        self._ready = asyncio.Event()
        self._subscribers: list[Subscriber] = []
        self._mutations_before_ready = 0
        self._load_task: Optional[asyncio.Task] = None

    @property
    def products(self) -> Products:
        """Current cart snapshot (read-only)."""
        return self._products

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is CartState.READY

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for every published snapshot; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, products: Products) -> None:
        self._products = products
        for callback in list(self._subscribers):
            try:
                callback(products)
            except Exception:
                logger.exception("Cart subscriber failed")

    # ------------------------------------------------------------------
    # Hydration
    # ------------------------------------------------------------------

    def start_loading(self) -> asyncio.Task:
        """Run the one-shot hydration in the background."""
        if self._load_task is None:
            self._load_task = asyncio.get_running_loop().create_task(self._hydrate(), name="cart-load")
        return self._load_task

    async def load(self) -> None:
        """
        Hydrate the cart from storage.

        Stored items replace the in-memory list wholesale; when nothing is
        stored the current list is kept. Read and decode failures are logged
        and leave the list as it was. The store becomes READY and publishes
        exactly once, whatever the outcome; overlapping calls share one read.

        Changes made before READY are published but not written. If stored
        data replaces them they are dropped; otherwise the resulting list is
        written once hydration finishes.
        """
        if self.is_ready:
            return
        await self.start_loading()

    async def _hydrate(self) -> None:
        products: Optional[Products] = None
        try:
            raw = await self._storage.get(self.key)
        except Exception as e:
            logger.warning(f"Failed to read cart from storage, keeping current cart: {e}")
            raw = None

        if raw:
            try:
                products = load_products(raw)
            except CartDecodeError as e:
                logger.warning(f"Corrupted cart data under {self.key!r}, keeping current cart: {e}")
            else:
                if self._mutations_before_ready:
                    logger.warning(
                        f"Discarding {self._mutations_before_ready} cart change(s) made before load completed"
                    )
                logger.info(f"Cart loaded: {len(products)} item(s)")
        else:
            logger.info("No stored cart found, starting empty")

        self._state = CartState.READY
        self._ready.set()
        if products is None:
            self._publish(self._products)
            if self._mutations_before_ready:
                self.persist(self._products)
        else:
            self._publish(products)

    async def wait_ready(self) -> None:
        """Wait until load() has completed."""
        await self._ready.wait()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add_to_cart(self, candidate: Union[ProductInput, Mapping[str, Any]]) -> Products:
        """Add a product with quantity 1, or increment it if already present."""
        product = as_product_input(candidate)

        if any(item.id == product.id for item in self._products):
            # Display fields of the existing line win over the candidate's
            return await self.increment(product.id)

        return self._commit(self._products + (product.to_cart_item(),))

    async def increment(self, product_id: str) -> Products:
        """Increase quantity of the matching item by one."""
        return self._commit(self._shift_quantity(product_id, 1))

    async def decrement(self, product_id: str) -> Products:
        """Decrease quantity of the matching item by one (no floor, no removal)."""
        return self._commit(self._shift_quantity(product_id, -1))

    def _shift_quantity(self, product_id: str, delta: int) -> Products:
        matched = False
        products = []
        for item in self._products:
            if item.id == product_id:
                item = item.with_quantity(item.quantity + delta)
                matched = True
            products.append(item)

        if not matched:
            logger.debug(f"Cart has no item {sanitize_id_for_logging(product_id)}; rewriting unchanged cart")
        return tuple(products)

    def _commit(self, products: Products) -> Products:
        self._publish(products)
        if self.is_ready:
            self.persist(products)
        else:
            # written by _hydrate once the stored cart is known
            self._mutations_before_ready += 1
        return products

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def persist(self, products: Products) -> None:
        """Queue a full-list write under the cart key; does not wait for it."""
        self._writer.submit(self.key, dump_products(products))

    async def flush(self) -> None:
        """Wait for queued writes; raises CartPersistenceError if any failed."""
        await self._writer.drain()

    async def close(self) -> None:
        """Stop a pending load and let queued writes settle."""
        if self._load_task is not None and not self._load_task.done():
            if self._mutations_before_ready:
                logger.warning(
                    f"Dropping {self._mutations_before_ready} unsaved cart change(s): closed before load completed"
                )
            self._load_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._load_task
        await self._writer.close()
