"""Roles shared by user management and dashboard visibility."""

from enum import StrEnum


class UserRole(StrEnum):
    """Roles a tenant member can hold."""

    ADMIN = "Admin"
    FINANCE = "Finance"
    OPERATIONS = "Operations"
    MARKETING = "Marketing"
