"""Cart package: models, storage, store and consumer facade."""
from .models import CartItem, ProductInput, dump_products, load_products
from .storage import CartWriter, MemoryStorage, PersistenceAdapter, RedisStorage
from .service import CartState, CartStore
from .context import CartAPI, cart_provider, use_cart

__all__ = [
    "CartItem",
    "ProductInput",
    "dump_products",
    "load_products",
    "CartWriter",
    "MemoryStorage",
    "PersistenceAdapter",
    "RedisStorage",
    "CartState",
    "CartStore",
    "CartAPI",
    "cart_provider",
    "use_cart",
]
