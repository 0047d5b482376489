"""Analytics infrastructure: SQL repositories and the QuickSight adapter."""
