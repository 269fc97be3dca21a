"""
Configuration management for the Ark DEX adapter.

Loads settings from the host-provided config mapping or from environment
variables, and exposes them as a single AdapterSettings dataclass.
"""

from ark_dex_adapter.config.settings import AdapterSettings, get_settings  # noqa: F401

__all__ = ["AdapterSettings", "get_settings"]
