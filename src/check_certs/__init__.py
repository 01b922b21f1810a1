# src/check_certs/__init__.py

"""Fetch and report TLS certificate details for many hosts at once."""

__version__ = "1.0.0"
