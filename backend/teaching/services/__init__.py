"""Use-case services of the teaching context."""
