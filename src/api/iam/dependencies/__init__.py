"""FastAPI dependency wiring for IAM bounded context."""
