"""Warden: account security for email and password accounts."""

__version__ = "0.1.0"
