"""Runtime configuration model for the ChefORG store.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_DATA_ROOT, DEFAULT_DEV_PASSWORD, DEFAULT_KEY_PREFIX
from core.errors import CheforgConfigError


@dataclass(frozen=True)
class CheforgConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local directory holding one JSON file per storage key.
        key_prefix: Prefix prepended to table names to build storage keys.
        dev_password: Shared password accepted by the development auth session.
    """

    data_root: Path
    key_prefix: str = DEFAULT_KEY_PREFIX
    dev_password: str = DEFAULT_DEV_PASSWORD

    @classmethod
    def from_env(cls) -> "CheforgConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            CheforgConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("CHEFORG_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        key_prefix = _parse_non_empty(
            "CHEFORG_KEY_PREFIX", os.getenv("CHEFORG_KEY_PREFIX", DEFAULT_KEY_PREFIX)
        )
        dev_password = _parse_non_empty(
            "CHEFORG_DEV_PASSWORD", os.getenv("CHEFORG_DEV_PASSWORD", DEFAULT_DEV_PASSWORD)
        )
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            key_prefix=key_prefix,
            dev_password=dev_password,
        )


def _parse_non_empty(variable: str, raw_value: str) -> str:
    """Validate that an environment value is not blank.

    Args:
        variable: Environment variable name, used in the error message.
        raw_value: Raw string from environment.

    Returns:
        The stripped value.

    Raises:
        CheforgConfigError: If the value is empty or whitespace.
    """
    value = raw_value.strip()
    if not value:
        raise CheforgConfigError(
            f"Invalid {variable} value: expected a non-empty string. "
            f"Unset {variable} to use the default."
        )
    return value
