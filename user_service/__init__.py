"""User Service - user account management (identity, contact, role, status, address)."""
