"""Key-value persistence: store port, adapters and key layout."""
