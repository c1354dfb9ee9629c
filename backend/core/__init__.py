"""Cross-context building blocks shared by identity, teaching and web adapters."""
