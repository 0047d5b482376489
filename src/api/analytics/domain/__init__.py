"""Analytics domain layer."""
