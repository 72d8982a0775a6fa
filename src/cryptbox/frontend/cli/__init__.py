"""Textual frontend for browsing a single box."""
