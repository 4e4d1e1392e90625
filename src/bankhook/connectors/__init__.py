"""Connectors for the remote Plaid API.

This module wraps the Plaid Python SDK behind the small async surface the
HTTP handlers need.
"""

from .plaid_client import PlaidClient, error_detail_from_exception, plaid_host

__all__ = ["PlaidClient", "error_detail_from_exception", "plaid_host"]
