"""Core package of CryptBox."""
