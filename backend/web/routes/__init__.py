"""API routers grouped by bounded context."""
