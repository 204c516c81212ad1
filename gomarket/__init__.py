"""GoMarketplace cart state: in-memory cart mirrored into key-value storage."""
