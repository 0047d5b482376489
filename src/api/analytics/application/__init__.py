"""Analytics application layer."""
