"""HTTP adapter (FastAPI) for the assignment portal."""
