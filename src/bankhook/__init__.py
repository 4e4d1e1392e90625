"""Bankhook: a Plaid Link, data relay and webhook demo server.

This package provides a small FastAPI backend that:
- Issues Plaid Link tokens and exchanges public tokens for access tokens
- Relays transactions, balances and asset reports to the browser
- Receives Plaid webhooks and reacts to them (including revocation)
- Persists the single user's connection state to a local JSON file
"""

__version__ = "0.1.0"
