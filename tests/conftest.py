"""Pytest configuration and fixtures"""
import os
import pytest
from typing import Optional

# Set test environment variables
os.environ.setdefault("CART_STORAGE_KEY", "@GoMarketplace:products")
os.environ.setdefault("CART_PERSIST_ATTEMPTS", "1")
os.environ.setdefault("CART_TTL_SECONDS", "0")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from gomarket.cart import CartStore, CartWriter, MemoryStorage  # noqa: E402
from gomarket.config import CART_STORAGE_KEY  # noqa: E402


class RecordingStorage(MemoryStorage):
    """MemoryStorage that remembers every read and write."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        super().__init__(initial)
        self.reads: list[str] = []
        self.writes: list[tuple[str, str]] = []

    async def get(self, key: str) -> Optional[str]:
        self.reads.append(key)
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        self.writes.append((key, value))
        await super().set(key, value)


class BrokenStorage:
    """Storage whose every call fails."""

    def __init__(self, error: Exception = ConnectionError("storage offline")):
        self.error = error

    async def get(self, key: str) -> Optional[str]:
        raise self.error

    async def set(self, key: str, value: str) -> None:
        raise self.error


@pytest.fixture
def cart_key():
    return CART_STORAGE_KEY


@pytest.fixture
def storage():
    """Empty recording storage"""
    return RecordingStorage()


@pytest.fixture
def broken_storage():
    return BrokenStorage()


@pytest.fixture
def store(storage):
    """Cart store over empty storage, no retries"""
    return CartStore(storage, writer=CartWriter(storage, attempts=1, max_wait=0))


@pytest.fixture
def shoe():
    """Product candidate from the catalog"""
    return {
        "id": "p1",
        "title": "Shoe",
        "image_url": "u",
        "price": 10,
    }


@pytest.fixture
def shirt():
    return {
        "id": "p2",
        "title": "Shirt",
        "image_url": "https://cdn.example.com/shirt.png",
        "price": 24.9,
    }
