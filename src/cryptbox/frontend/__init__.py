"""Frontends for CryptBox."""
