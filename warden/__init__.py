"""Warden: user management and role-based access control API."""
