"""ChefORG exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Store operations convert them into result envelopes before returning.
"""

from __future__ import annotations


class CheforgError(Exception):
    """Base exception for all ChefORG failures."""


class CheforgConfigError(CheforgError):
    """Raised for invalid runtime configuration."""


class CheforgStoreError(CheforgError):
    """Raised for key-value substrate and collection failures."""


class CheforgStoreWriteError(CheforgStoreError):
    """Raised when a table snapshot cannot be serialized or persisted."""


class CheforgQueryError(CheforgError):
    """Raised for malformed query specs such as unknown operators."""
