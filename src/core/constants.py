"""Core constants used across ChefORG store modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in store logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".cheforg")
DEFAULT_KEY_PREFIX = "cheforg_"
DEFAULT_DEV_PASSWORD = "123456"
STORAGE_FILE_SUFFIX = ".json"
ID_FIELD = "id"
CREATED_AT_FIELD = "created_at"
UPDATED_AT_FIELD = "updated_at"
PROTECTED_PATCH_FIELDS = (ID_FIELD, CREATED_AT_FIELD)
GENERATED_ID_SUFFIX_LENGTH = 9
BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
SUPPORTED_OPERATORS = ("eq", "gte", "lte", "in")
USERS_TABLE = "users"
CURRENT_USER_KEY = "current_user"
AUTH_SESSION_KEY = "auth_session"
