"""Analytics bounded context.

Dashboard visibility for tenant members: governance rules, the row-level
security session context handed to the embedding service, and per-role
metric visibility.
"""
