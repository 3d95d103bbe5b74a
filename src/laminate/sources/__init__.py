"""Readers for the concrete sources a layer can point at.

File layers are read by extension (TOML, JSON, YAML); environment-variable
layers are read from the live process environment.
"""

from .env_vars import parse_value, read_env_vars
from .files import load_file

__all__ = [
    "load_file",
    "parse_value",
    "read_env_vars",
]
