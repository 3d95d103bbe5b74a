"""Named deployment environments."""

from __future__ import annotations

from enum import Enum

from .errors import UnrecognizedEnvironmentError


class Environment(str, Enum):
    """Deployment environment, used to name environment-specific files."""

    LOCAL = "local"
    PRODUCTION = "production"

    @classmethod
    def from_name(cls, name: str) -> "Environment":
        """Resolve an environment by name, ignoring case.

        Raises:
            UnrecognizedEnvironmentError: If the name matches no environment.
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise UnrecognizedEnvironmentError(name) from None

    def __str__(self) -> str:
        return self.value
